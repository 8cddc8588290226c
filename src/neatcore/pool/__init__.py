"""
NEAT Pool Package

The population of genomes and its division into species.

Exported Classes:
    Species:    Bookkeeping record of a single species
    Population: Owns the genomes and species, and advances them one generation at a time
"""

from neatcore.pool.species    import Species
from neatcore.pool.population import Population

__all__ = ['Species',
           'Population']
