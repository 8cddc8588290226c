"""
NEAT Trial Module

This module defines the abstract base class for NEAT trials with built-in
support for CPU-based parallelization using joblib.

A trial represents one independent run of the NEAT algorithm, evolving a
population through generations until a solution is found or the maximum
number of generations is reached.
"""

import logging
from abc        import ABC, abstractmethod
from joblib     import Parallel, delayed
from statistics import mean

from neatcore.genotype.genome   import Genome
from neatcore.pool.population   import Population
from neatcore.random_source     import RandomSource
from neatcore.run.config        import Config

logger = logging.getLogger(__name__)

class Trial(ABC):
    """
    Abstract base class for implementing a NEAT trial.

    The trial owns the random source and the population. It alternates between
    fitness evaluation (delegated to the subclass) and the population's
    generation pipeline, until the termination condition is met.

    Subclasses must implement:
    - _evaluate_fitness(genome): Evaluate fitness for a single genome

    Subclasses can override:
    - _reset():           Reset trial-specific state (call super()._reset())
    - _report_progress(): Report progress after each generation (default: log a summary)
    - _final_report():    Report the final results (default: log the fittest genome)
    - _terminate():       Custom termination logic (default: max generations + fitness threshold)

    Public Methods:
        run(): Execute a complete NEAT trial

    Parallelization of fitness evaluation for genomes:
        num_jobs=1:  Serial evaluation (no parallelization)
        num_jobs>1:  Use specified number of parallel processes
        num_jobs=-1: Use all available CPU cores
    """

    def __init__(self, config: Config, suppress_output: bool = False):
        """
        Initialize the trial.

        Parameters:
            config:          Configuration parameters
            suppress_output: If True, suppress progress and final reports
                             (useful when running multiple trials in a row)
        """
        self._config            : Config              = config
        self._generation_counter: int                 = 0
        self._population        : Population | None   = None
        self._rng               : RandomSource | None = None
        self._suppress_output   : bool                = suppress_output
        self.failed             : bool                = True

    @property
    def population(self) -> Population | None:
        return self._population

    def run(self, num_jobs: int = 1):
        """
        Run the trial.

        Resets the trial state and runs the evolutionary
        algorithm until the terminate condition is met.

        Parameters:
            num_jobs: Number of parallel processes for fitness evaluation of genomes
                      1 = serial (no parallelization)
                     -1 = use all available CPU cores
                     >1 = use specified number of processes
        """
        # Reset the trial state before starting a new run
        self._reset()

        # Create the initial population
        self._rng        = RandomSource(self._config.seed)
        self._population = Population(self._config.population_size,
                                      self._config.topology,
                                      self._rng,
                                      self._config.settings)

        # Evaluate the fitness of the initial population
        self._evaluate_fitness_all(num_jobs)

        if not self._suppress_output:
            self._report_progress()

        # Evolution loop
        while not self._terminate():
            self._generation_counter += 1

            # The members of the population mate and create offspring
            self._population.next_generation(self._rng)

            # Evaluate the fitness of each genome in the new generation
            self._evaluate_fitness_all(num_jobs)

            if not self._suppress_output:
                self._report_progress()

        if not self._suppress_output:
            self._final_report()

    def _reset(self):
        """
        Reset the trial state before starting a new run.

        Subclasses should call super()._reset() and then
        initialize their problem-specific data.
        """
        self._generation_counter = 0
        self._population         = None
        self._rng                = None
        self.failed              = True

    @abstractmethod
    def _evaluate_fitness(self, genome: Genome) -> float:
        """
        Evaluate and return the fitness of a genome.

        Higher fitness values indicate better performance and a larger
        share of offspring for the genome's species.

        IMPORTANT: The fitness must be a positive number (or zero).
        NaN is accepted and treated as zero.

        Parameters:
            genome: The Genome to evaluate

        Returns:
            float: Fitness score for the genome
        """
        pass

    def _evaluate_fitness_all(self, num_jobs: int):
        """
        Evaluate fitness for all genomes in the population.

        Uses serial or parallel evaluation based on num_jobs:
        - num_jobs=1: Sequential evaluation in single process
        - num_jobs>1 or -1: Parallel evaluation using joblib
        """
        genomes   = self._population.genomes
        serialize = num_jobs == 1

        if serialize:
            for genome in genomes:
                genome.fitness = self._evaluate_fitness(genome)
        else:
            fitness_all = Parallel(num_jobs)(delayed(self._evaluate_fitness)(g) for g in genomes)
            for genome, fitness in zip(genomes, fitness_all):
                genome.fitness = fitness

    def _report_progress(self):
        """
        Report trial progress after each generation.

        This method is suppressed by setting 'self._suppress_output' to 'True'.
        """
        fittest = self._population.get_fittest_genome()
        logger.info("Generation %d: best fitness %.4f (genome %d), %d species",
                    self._generation_counter, fittest.fitness, fittest.id,
                    len(self._population.species))

    def _final_report(self):
        """
        Produce final report at the end of the trial.

        This method is suppressed by setting 'self._suppress_output' to 'True'.
        """
        fittest = self._population.get_fittest_genome()
        logger.info("Trial %s after %d generations, best fitness %.4f",
                    "failed" if self.failed else "succeeded",
                    self._generation_counter, fittest.fitness)
        logger.debug("Fittest genome:\n%s", fittest)

    def _terminate(self) -> bool:
        """
        Determine whether the trial should terminate.

        This default implementation stops the trial after a maximum number
        of generations and (optionally) also stops it if a given measure of
        population fitness has reached a given threshold.

        Subclasses can override this method for custom termination logic.

        Returns:
            bool: True if the trial should stop, False otherwise

        Raises:
            RuntimeError: if the fitness criterion is neither "max" nor "mean"
        """
        # Has this trial run for too long?
        terminate = self._generation_counter >= self._config.max_number_generations

        # Check whether the fitness has reached a target threshold
        if self._config.fitness_termination_check:
            genome_fitness = [genome.fitness for genome in self._population.genomes]

            if self._config.fitness_criterion == "max":
                overall_fitness = max(genome_fitness)
            elif self._config.fitness_criterion == "mean":
                overall_fitness = mean(genome_fitness)
            else:
                raise RuntimeError("bad 'fitness_criterion' in configuration file")

            # Compare a measure of population fitness (max, mean, ...) against a threshold
            success   = overall_fitness >= self._config.fitness_threshold
            terminate = terminate or success

            if terminate:
                self.failed = not success

        return terminate
