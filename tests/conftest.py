"""Pytest configuration and shared fixtures."""

import pytest

from neatcore.genotype.genome             import Genome
from neatcore.genotype.innovation_tracker import InnovationTracker
from neatcore.random_source               import RandomSource
from neatcore.run.config                  import Settings, Topology


@pytest.fixture
def topology():
    """Two inputs, a bias node and one output: nodes 0, 1 (input), 2 (bias), 3 (output)."""
    return Topology(num_inputs=2, num_outputs=1, bias=True)


@pytest.fixture
def settings():
    """Default evolution parameters."""
    return Settings()


@pytest.fixture
def rng():
    """A seeded random source, so every test sees the same draws."""
    return RandomSource(42)


@pytest.fixture
def tracker(topology):
    """A fresh innovation tracker for the shared topology."""
    return InnovationTracker(topology)


@pytest.fixture
def sample_genome(rng, topology, tracker, settings):
    """A minimal, fully connected genome (innovations 0, 1, 2 all lead to node 3)."""
    return Genome.new_random(rng, 0, topology, tracker, settings)
