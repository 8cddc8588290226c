"""
NEAT Population Module

This module implements the Population class, the top-level orchestrator for the NEAT
evolutionary algorithm. The population owns all genomes and species and advances
them one generation at a time.

Classes:
    Population: Top-level evolutionary coordinator managing genomes and species
"""

import logging
import math

from neatcore.genotype.genome             import Genome
from neatcore.genotype.innovation_tracker import InnovationTracker
from neatcore.identifiers                 import GenomeId, SpecieId
from neatcore.pool.species                import Species
from neatcore.random_source               import RandomSource
from neatcore.run.config                  import Settings, Topology

logger = logging.getLogger(__name__)

class Population:
    """
    A population of evolving genomes in the NEAT algorithm.

    The population has a fixed number of slots; the index of a slot is the ID of
    the genome occupying it. Slots are reused from one generation to the next.
    Fitness values are assigned by the caller between generations, after which
    'next_generation()' runs the pipeline:

        speciate -> compute adjusted fitness -> sort species -> compute stagnation ->
        compute species bounds -> produce offspring -> elect representatives -> clean species

    All randomness comes from the RandomSource passed by the caller.

    Public Attributes:
        genomes:            The genomes of the current generation (index == genome ID)
        species:            The species of the current generation (index == species ID)
        innovation_tracker: Tracks innovation numbers and node IDs for all genomes
        generation:         Number of completed generation advances

    Public Methods:
        next_generation(rng): Create the next generation through speciation and reproduction
        get_fittest_genome(): Return the genome with the highest fitness
    """

    def __init__(self,
                 population_size: int,
                 topology       : Topology,
                 rng            : RandomSource,
                 settings       : Settings | None = None):
        """
        Initialize the population with a given number of minimal, randomly weighted genomes.

        Parameters:
            population_size: number of genomes (population slots)
            topology:        input/output interface shared by all genomes
            rng:             source of randomness for the initial weights
            settings:        evolution parameters (defaults are used if None)
        """
        if population_size < 1:
            raise ValueError(f"population_size must be at least 1, got {population_size}")

        self._topology: Topology = topology
        self._settings: Settings = settings if settings is not None else Settings()

        self.innovation_tracker: InnovationTracker = InnovationTracker(topology)
        self.genomes           : list[Genome]      = [
            Genome.new_random(rng, i, topology, self.innovation_tracker, self._settings)
            for i in range(population_size)
        ]
        self.species   : list[Species] = []
        self.generation: int           = 0

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def topology(self) -> Topology:
        return self._topology

    def get_fittest_genome(self) -> Genome:
        """
        Return the genome with the highest (raw) fitness in the population.
        """
        return max(self.genomes, key=lambda genome: genome.fitness)

    def next_generation(self, rng: RandomSource) -> None:
        """
        Create the next generation through speciation, selection and reproduction.

        This is the main generational step in the NEAT algorithm. The fitness of every
        genome must have been assigned by the caller beforehand. When the method returns,
        the population holds the offspring, ready to be evaluated.

        Parameters:
            rng: source of randomness for reproduction and representative election
        """
        self.speciate()
        self.compute_adjusted_fitness()
        self.sort_species()
        self.compute_stagnation()
        self.compute_species_bounds()

        best_fitness = self.get_fittest_genome().fitness

        self.offspring_species(rng)
        self.elect_representatives_for_species(rng)
        self.clean_species()

        self.generation += 1
        logger.info("Generation %d: %d species, best fitness %.4f, %d innovations",
                    self.generation, len(self.species), best_fitness,
                    self.innovation_tracker.innovation_count)

    def speciate(self) -> None:
        """
        Assign every genome to a species.

        Each genome joins the first species, in stored order, whose representative is
        closer than the similarity threshold. Search order, not distance minimization,
        decides the assignment. A genome matching no species founds a new one, with
        itself as representative, which later genomes may join.

        Postconditions:
            - Every genome is a member of exactly one species
            - Species that attracted no genomes are left empty
        """
        settings = self._settings

        for species in self.species:
            species.init_for_next_generation()

        # Representatives are read before any genome is reassigned
        representatives = [self.genomes[species.representative]
                           if species.representative < len(self.genomes) else None
                           for species in self.species]

        for genome in self.genomes:
            assigned = None
            for species, representative in zip(self.species, representatives):
                if representative is None:
                    continue
                if representative.similarity(genome, settings) < settings.species_similarity_threshold:
                    assigned = species
                    break

            if assigned is None:
                assigned = Species(len(self.species), genome.id)
                self.species.append(assigned)
                representatives.append(genome)
                logger.debug("Genome %d founds species %d", genome.id, assigned.id)

            genome.species = assigned.id
            assigned.genomes.append(genome.id)

        for species in self.species:
            species.population_count = len(species.genomes)

        assert sum(len(species) for species in self.species) == len(self.genomes), \
            "Lost genomes during speciation!"

    def compute_adjusted_fitness(self) -> None:
        """
        Explicit fitness sharing: divide each genome's fitness by the size of its species,
        and sum the adjusted fitness of each species.

        Treats NaN fitness as 0.0 (invalid networks get worst fitness).

        Raises:
            ValueError: if a genome has negative fitness
        """
        for genome in self.genomes:
            if math.isnan(genome.fitness):
                genome.fitness = 0.0
            if genome.fitness < 0:
                raise ValueError(f"Genome {genome.id} has negative fitness {genome.fitness}")

            species = self.species[genome.species]
            genome.adjusted_fitness = genome.fitness / len(species.genomes)
            species.fitness_sum    += genome.adjusted_fitness

    def sort_species(self) -> None:
        """
        Order the members of each species by ascending adjusted fitness (best member last).
        """
        for species in self.species:
            species.genomes.sort(key=lambda genome_id: self.genomes[genome_id].adjusted_fitness)

    def compute_stagnation(self) -> None:
        """
        Track the best adjusted fitness of each species and extinguish species that stagnate.

        A new species, or one whose best member improves on the best adjusted fitness
        recorded so far, has its stagnation counter reset to 1. Otherwise the counter is
        incremented, and once it reaches 'generation_for_stagnating_species' the species'
        member list is cleared, which excludes it from reproduction.

        Expects the members to be sorted (see 'sort_species()').
        """
        limit = self._settings.generation_for_stagnating_species

        for species in self.species:
            if species.is_empty():
                continue

            current_max_fitness = self.genomes[species.genomes[-1]].adjusted_fitness
            if species.stagnant_generations == 0 or current_max_fitness > species.fitness_max:
                species.fitness_max          = current_max_fitness
                species.stagnant_generations = 1
            else:
                species.stagnant_generations += 1
                if species.stagnant_generations >= limit:
                    logger.debug("Species %d stagnated for %d generations and goes extinct",
                                 species.id, species.stagnant_generations)
                    species.genomes = []

    def compute_species_bounds(self) -> None:
        """
        Calculate how many offspring each species produces.

        Offspring are allocated proportionally to the species' share of the total adjusted
        fitness. Fractional quotas are rounded with the largest remainder method, so the
        quotas add up exactly to the population size (ties go to the species stored first).
        Empty species get nothing; if no species has fitness, every quota is zero.
        """
        for species in self.species:
            species.bounds = 0

        breeding      = [species for species in self.species if not species.is_empty()]
        total_fitness = sum(species.fitness_sum for species in breeding)
        if not breeding or total_fitness <= 0:
            logger.debug("No fitness to share: every species quota is zero")
            return

        population_size = len(self.genomes)
        quotas = [species.fitness_sum / total_fitness * population_size for species in breeding]
        bounds = [math.floor(quota) for quota in quotas]

        leftover     = population_size - sum(bounds)
        by_remainder = sorted(range(len(breeding)), key=lambda i: quotas[i] - bounds[i], reverse=True)
        for i in by_remainder[:leftover]:
            bounds[i] += 1

        for species, bound in zip(breeding, bounds):
            species.bounds = bound

        assert sum(bounds) == population_size, "Species quotas do not add up to the population size!"

    def offspring_species(self, rng: RandomSource) -> None:
        """
        Produce the next generation of genomes.

        Each species with a positive quota produces exactly 'bounds' offspring, cycling
        through its members from best to worst:
        - the champion (the best member of a species with more than 'size_specie_for_champion'
          members) is copied unchanged
        - any other offspring is, with probability 'prob_offsprint_crossover', the crossover
          of two parents, and otherwise a copy of the member; either way it is then mutated

        Offspring are built into a separate list which replaces the current genomes at the
        end, so parents are never overwritten while they can still be selected. A species
        keeps its own slots first; surplus offspring take the slots freed by species which
        shrink or die out. Species with a zero quota lose all their members.

        If no species can reproduce, half of the population is replaced by new random
        genomes and the other half is mutated.
        """
        settings = self._settings
        breeding = [species for species in self.species if species.bounds > 0]

        if not breeding:
            logger.warning("Generation %d: no species can reproduce, reseeding half of the population",
                           self.generation)
            self._reseed(rng)
            return

        for species in breeding:
            assert not species.is_empty(), f"Species {species.id} has a quota but no members!"

        # Population slots of each species' offspring
        population_size = len(self.genomes)
        own_slots  = {species.id: sorted(species.genomes)[:species.bounds] for species in breeding}
        used_slots = {slot for slots in own_slots.values() for slot in slots}
        free_slots = iter([slot for slot in range(population_size) if slot not in used_slots])

        offspring_slots = {}
        for species in breeding:
            surplus = species.bounds - len(own_slots[species.id])
            offspring_slots[species.id] = own_slots[species.id] + [next(free_slots) for _ in range(surplus)]

        # Members as of this generation; member lists are replaced only once every species has spawned
        members = {species.id: list(species.genomes) for species in breeding}

        offspring: list[Genome | None] = [None] * population_size
        for species in breeding:
            ranked        = [self.genomes[genome_id] for genome_id in reversed(members[species.id])]
            num_champions = 1 if len(ranked) > settings.size_specie_for_champion else 0

            for k, slot in enumerate(offspring_slots[species.id]):
                member = ranked[k % len(ranked)]

                if k < num_champions:
                    child = member.copy(slot)
                else:
                    if rng.bernoulli(settings.prob_offsprint_crossover):
                        parent_1, parent_2 = self._select_parents(species, breeding, members, rng)
                        child = Genome.crossover(parent_1, parent_2, slot, rng, settings)
                    else:
                        child = member.copy(slot)
                    child.mutate(rng, settings, self.innovation_tracker)

                child.species          = species.id
                child.fitness          = 0.0
                child.adjusted_fitness = 0.0
                offspring[slot]        = child

        for species in self.species:
            species.genomes = [GenomeId(slot) for slot in offspring_slots.get(species.id, [])]

        assert all(child is not None for child in offspring), "Offspring do not fill the population!"
        self.genomes = offspring

    def _select_parents(self,
                        species : Species,
                        breeding: list[Species],
                        members : dict[SpecieId, list],
                        rng     : RandomSource) -> tuple[Genome, Genome]:
        """
        Pick two parents: a random member of 'species' and either another random member of
        the same species or, with probability 'prob_mating_interspecies', a random member
        of another breeding species. The fitter parent is returned first.
        """
        parent_1     = self.genomes[rng.choice(members[species.id])]
        mate_species = species

        if rng.bernoulli(self._settings.prob_mating_interspecies):
            others = [other for other in breeding if other is not species]
            if others:
                mate_species = rng.choice(others)

        parent_2 = self.genomes[rng.choice(members[mate_species.id])]

        if parent_1.fitness < parent_2.fitness:
            parent_1, parent_2 = parent_2, parent_1
        return parent_1, parent_2

    def _reseed(self, rng: RandomSource) -> None:
        """
        Replace the first half of the population with new random genomes and mutate the rest.

        Genomes left without a species (their species went extinct through stagnation)
        are gathered into one new species, so every genome keeps a valid species.
        """
        half = len(self.genomes) // 2
        for index, genome in enumerate(self.genomes):
            if index < half:
                fresh = Genome.new_random(rng, genome.id, self._topology, self.innovation_tracker, self._settings)
                fresh.species = genome.species
                self.genomes[index] = fresh
            else:
                genome.mutate(rng, self._settings, self.innovation_tracker)

        members = {genome_id for species in self.species for genome_id in species.genomes}
        orphans = [genome.id for genome in self.genomes if genome.id not in members]
        if orphans:
            species = Species(len(self.species), orphans[0])
            species.genomes = list(orphans)
            self.species.append(species)
            for genome_id in orphans:
                self.genomes[genome_id].species = species.id
            logger.debug("Species %d founded for %d genomes of extinct species", species.id, len(orphans))

    def elect_representatives_for_species(self, rng: RandomSource) -> None:
        """
        Each species that reproduced picks a random member as its new representative.
        """
        for species in self.species:
            if species.bounds > 0 and not species.is_empty():
                species.representative = GenomeId(rng.choice(species.genomes))

    def clean_species(self) -> None:
        """
        Remove species without members and renumber the survivors contiguously.

        A species founded during this generation which got no quota is kept
        for one more generation, to give it a chance to attract members.
        """
        survivors = [species for species in self.species
                     if not species.is_empty() or (species.is_new and species.bounds == 0)]

        for index, species in enumerate(survivors):
            species.id     = SpecieId(index)
            species.is_new = False
            for genome_id in species.genomes:
                self.genomes[genome_id].species = species.id

        if len(survivors) < len(self.species):
            logger.debug("Removed %d extinct species", len(self.species) - len(survivors))
        self.species = survivors

    def __str__(self):
        return '\n'.join(str(genome) for genome in self.genomes)
