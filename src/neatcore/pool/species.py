"""
NEAT Species Module

This module implements the Species class for the NEAT algorithm.
A species represents a cluster of genetically similar genomes
that compete primarily within their own niche.

Classes:
    Species: Bookkeeping record of a single species
"""

from neatcore.identifiers import GenomeId, SpecieId

class Species:
    """
    A species: a cluster of genomes within a compatibility distance of a shared representative.

    The population is divided into species so that innovative structures compete
    with similar genomes first, instead of being eliminated by more mature solutions.
    Membership is recomputed every generation from the representative genome, which
    persists across generations; everything else is bookkeeping used by the
    population's generation pipeline.

    Public Attributes:
        id:                   Position of the species in the population's species list
        genomes:              IDs of the member genomes in the current generation
        representative:       ID of the genome used for distance calculations during speciation
        fitness_sum:          Sum of the members' adjusted fitness
        fitness_max:          Best adjusted fitness the species has reached so far
        stagnant_generations: Generations since 'fitness_max' last improved (0 for a new species)
        bounds:               Number of offspring the species produces for the next generation
        population_count:     Number of members found at speciation time
        is_new:               Whether the species was founded during the current generation

    Life Cycle:
    1. Created when a genome doesn't fit into any existing species
    2. Accumulates members during speciation based on genetic similarity
    3. Gets a reproduction quota ('bounds') proportional to its share of the fitness
    4. Elects a new representative among its offspring
    5. Removed if stagnant, if it gets no offspring, or if it attracts no members
    """

    def __init__(self, species_id: int, representative: int):
        """
        Parameters:
            species_id:     position of the species in the population's species list
            representative: ID of the genome that founds the species
        """
        self.id                  : SpecieId       = SpecieId(species_id)
        self.genomes             : list[GenomeId] = []
        self.representative      : GenomeId       = GenomeId(representative)
        self.fitness_sum         : float          = 0.0
        self.fitness_max         : float          = 0.0
        self.stagnant_generations: int            = 0
        self.bounds              : int            = 0
        self.population_count    : int            = 0
        self.is_new              : bool           = True

    def init_for_next_generation(self) -> None:
        """
        Reset the per-generation state before the genomes are assigned to species again.
        """
        self.genomes          = []
        self.fitness_sum      = 0.0
        self.population_count = 0

    def is_empty(self) -> bool:
        return not self.genomes

    def __len__(self):
        return len(self.genomes)

    def __repr__(self):
        return (f"Species(id={int(self.id)}, members={len(self.genomes)}, "
                f"representative={int(self.representative)}, fitness_sum={self.fitness_sum:.4f}, "
                f"fitness_max={self.fitness_max:.4f}, stagnant={self.stagnant_generations}, "
                f"bounds={self.bounds})")
