"""
Unit tests for the Trial base class.
"""

import logging
import math
import pytest
from joblib import parallel_backend

from neatcore.genotype.genome import Genome
from neatcore.pool.population import Population
from neatcore.run.config      import Config
from neatcore.run.trial       import Trial


# ============================================================================
# Fixtures
# ============================================================================

class ConnectionCountTrial(Trial):
    """Rewards genomes for their number of enabled connections."""

    def _reset(self):
        super()._reset()
        self.evaluations = 0

    def _evaluate_fitness(self, genome: Genome) -> float:
        self.evaluations += 1
        return float(sum(conn.enabled for conn in genome.connections))


class ConstantTrial(Trial):

    def __init__(self, config, fitness, **kwargs):
        super().__init__(config, **kwargs)
        self._fitness = fitness

    def _evaluate_fitness(self, genome: Genome) -> float:
        return self._fitness


@pytest.fixture
def config():
    config = Config()
    config.population_size        = 12
    config.max_number_generations = 3
    config.seed                   = 7
    return config


# ============================================================================
# Test Trial Run
# ============================================================================

class TestTrialRun:

    def test_runs_max_generations(self, config):
        trial = ConnectionCountTrial(config, suppress_output=True)
        trial.run()

        assert trial._generation_counter == 3
        assert isinstance(trial.population, Population)
        assert trial.population.generation == 3
        assert trial.evaluations == 12 * 4
        assert trial.failed is True

    def test_fitness_assigned(self, config):
        trial = ConnectionCountTrial(config, suppress_output=True)
        trial.run()

        for genome in trial.population.genomes:
            assert genome.fitness == sum(conn.enabled for conn in genome.connections)

    def test_rerun_resets_state(self, config):
        trial = ConnectionCountTrial(config, suppress_output=True)
        trial.run()
        first = [genome.to_dict() for genome in trial.population.genomes]

        trial.run()
        assert trial._generation_counter == 3
        assert [genome.to_dict() for genome in trial.population.genomes] == first

    def test_same_seed_same_result(self, config):
        trial1 = ConnectionCountTrial(config, suppress_output=True)
        trial2 = ConnectionCountTrial(config, suppress_output=True)
        trial1.run()
        trial2.run()

        assert [g.to_dict() for g in trial1.population.genomes] == \
               [g.to_dict() for g in trial2.population.genomes]

    def test_parallel_evaluation(self, config):
        serial = ConnectionCountTrial(config, suppress_output=True)
        serial.run()

        parallel = ConnectionCountTrial(config, suppress_output=True)
        with parallel_backend('threading'):
            parallel.run(num_jobs=2)

        assert [g.to_dict() for g in parallel.population.genomes] == \
               [g.to_dict() for g in serial.population.genomes]

    def test_reports_logged(self, config, caplog):
        trial = ConnectionCountTrial(config)
        with caplog.at_level(logging.INFO, logger="neatcore.run.trial"):
            trial.run()

        assert "Generation 0" in caplog.text
        assert "Generation 3" in caplog.text
        assert "failed after 3 generations" in caplog.text

    def test_suppressed_reports(self, config, caplog):
        trial = ConnectionCountTrial(config, suppress_output=True)
        with caplog.at_level(logging.INFO, logger="neatcore.run.trial"):
            trial.run()

        assert not [record for record in caplog.records if record.name == "neatcore.run.trial"]

    def test_nan_fitness_tolerated(self, config):
        trial = ConstantTrial(config, math.nan, suppress_output=True)
        trial.run()
        assert trial.population.generation == 3


# ============================================================================
# Test Termination
# ============================================================================

class TestTrialTerminate:

    def test_fitness_threshold_max(self, config):
        config.fitness_termination_check = True
        config.fitness_criterion         = 'max'
        config.fitness_threshold         = 1.0

        trial = ConstantTrial(config, 1.0, suppress_output=True)
        trial.run()

        assert trial._generation_counter == 0
        assert trial.failed is False

    def test_fitness_threshold_mean_not_reached(self, config):
        config.fitness_termination_check = True
        config.fitness_criterion         = 'mean'
        config.fitness_threshold         = 2.0

        trial = ConstantTrial(config, 1.0, suppress_output=True)
        trial.run()

        assert trial._generation_counter == 3
        assert trial.failed is True

    def test_bad_criterion(self, config):
        config.fitness_termination_check = True
        config.fitness_criterion         = 'median'
        config.fitness_threshold         = 1.0

        trial = ConstantTrial(config, 1.0, suppress_output=True)
        with pytest.raises(RuntimeError, match="fitness_criterion"):
            trial.run()

    def test_abstract(self, config):
        with pytest.raises(TypeError):
            Trial(config)
