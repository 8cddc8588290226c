"""
Shared fixtures for integration tests.

The package evolves genotypes only; the tests evaluate genomes with the
small feed-forward pass below, visiting the layers in ascending order.
"""

from collections import defaultdict

import numpy as np
import pytest

from neatcore.genotype.node_gene import NodeType
from neatcore.run.config         import Config
from neatcore.run.trial          import Trial


def forward_pass(genome, inputs):
    """Propagate 'inputs' through the enabled connections; sigmoid on every non-input node."""
    values = {}
    for node in genome.nodes[0]:
        values[node.id] = 1.0 if node.type is NodeType.BIAS else inputs[node.id]

    incoming = defaultdict(list)
    for conn in genome.connections:
        if conn.enabled:
            incoming[conn.node_out].append(conn)

    for layer_nodes in genome.nodes[1:]:
        for node in layer_nodes:
            total = sum(values[conn.node_in] * conn.weight for conn in incoming[node.id])
            total = float(np.clip(total, -60.0, 60.0))
            values[node.id] = 1.0 / (1.0 + np.exp(-4.9 * total))

    return [values[node.id] for node in genome.output_nodes]


class TruthTableTrial(Trial):
    """Fitness is 4 minus the squared error over a two-input truth table."""

    INPUTS  = [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]
    OUTPUTS = None

    def _reset(self):
        super()._reset()
        self.history = []

    def _evaluate_fitness(self, genome):
        fitness = 4.0
        for inputs, expected in zip(self.INPUTS, self.OUTPUTS):
            output   = forward_pass(genome, inputs)[0]
            fitness -= (output - expected) ** 2
        return float(fitness)

    def _report_progress(self):
        self.history.append(self._population.get_fittest_genome().fitness)


class OrTrial(TruthTableTrial):
    OUTPUTS = [0.0, 1.0, 1.0, 1.0]


class XorTrial(TruthTableTrial):
    OUTPUTS = [0.0, 1.0, 1.0, 0.0]


@pytest.fixture
def truth_table_config():
    """Two inputs, a bias node and one output; no fitness-based termination."""
    config = Config()
    config.population_size        = 50
    config.num_inputs             = 2
    config.num_outputs            = 1
    config.bias                   = True
    config.seed                   = 3
    config.max_number_generations = 30
    return config


@pytest.fixture
def evaluate():
    """The feed-forward pass used to score genomes."""
    return forward_pass


@pytest.fixture
def or_trial():
    """Trial class scoring genomes on the OR truth table."""
    return OrTrial


@pytest.fixture
def xor_trial():
    """Trial class scoring genomes on the XOR truth table."""
    return XorTrial
