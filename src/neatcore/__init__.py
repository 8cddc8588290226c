"""
neatcore - the evolutionary core of NEAT (NeuroEvolution of Augmenting Topologies).

This package evolves the genotypes of layered, feed-forward neural networks:
genome encoding and historical innovation tracking, compatibility distance and
speciation, fitness sharing, stagnation, and the reproduction pipeline. Fitness
evaluation (building and running the networks) is left to the caller.

Main components:
- genotype: Genetic encoding (genomes, genes, innovation tracking)
- pool: Population and speciation management
- run: Configuration and trial execution
- random_source: The seeded source of every random decision

Example:
    >>> from neatcore import Config, Trial
    >>> config = Config("config.ini")
    >>> class MyTrial(Trial):
    ...     def _evaluate_fitness(self, genome):
    ...         # Implement fitness evaluation
    ...         pass
    >>> trial = MyTrial(config)
    >>> trial.run()
"""

__version__ = "0.1.0"

# Import main classes for convenient access
from neatcore.run.config import Config, Settings, Topology
from neatcore.random_source import RandomSource
from neatcore.identifiers import GenomeId, LayerId, NodeId, SpecieId
from neatcore.genotype.genome import Genome
from neatcore.genotype.node_gene import NodeGene, NodeType
from neatcore.genotype.connection_gene import ConnectionGene
from neatcore.genotype.innovation_tracker import InnovationTracker
from neatcore.pool.species import Species
from neatcore.pool.population import Population
from neatcore.run.trial import Trial

__all__ = [
    "Config",
    "Settings",
    "Topology",
    "RandomSource",
    "GenomeId",
    "LayerId",
    "NodeId",
    "SpecieId",
    "Genome",
    "NodeGene",
    "NodeType",
    "ConnectionGene",
    "InnovationTracker",
    "Species",
    "Population",
    "Trial",
]
