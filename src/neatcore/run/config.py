import configparser
import math
import os
from dataclasses import dataclass, fields

@dataclass(frozen=True)
class Topology:
    """
    The input/output interface shared by every genome of a population.
    Fixed when the population is created, never changed afterwards.
    """
    num_inputs : int
    num_outputs: int
    bias       : bool = False

    def __post_init__(self):
        if self.num_inputs < 1:
            raise ValueError(f"num_inputs must be at least 1, got {self.num_inputs}")
        if self.num_outputs < 1:
            raise ValueError(f"num_outputs must be at least 1, got {self.num_outputs}")

    @property
    def num_input_nodes(self) -> int:
        """Number of nodes on the input layer (inputs plus the bias node, if any)."""
        return self.num_inputs + int(self.bias)

    @property
    def first_hidden_id(self) -> int:
        """Smallest node ID available to hidden nodes."""
        return self.num_input_nodes + self.num_outputs


@dataclass(frozen=True)
class Settings:
    """
    Parameters of the evolutionary process, read-only while a generation is computed.

    'size_specie_for_champion' is a size threshold, not a count: a species with more
    members than this keeps its single best member unchanged.
    """

    # Mutation and mating probabilities
    prob_mutation_weight             : float = 0.8
    prob_mutation_weight_perturbation: float = 0.9
    prob_mutation_new_node           : float = 0.02
    prob_mutation_new_connection     : float = 0.05
    prob_inherit_on_fitter_genomre   : float = 0.5
    prob_inherit_disabled_gene       : float = 0.75
    prob_offsprint_crossover         : float = 0.75
    prob_mating_interspecies         : float = 0.001

    # Speciation
    species_similarity_threshold: float = 4.0
    normalized_gene_size        : int   = 20
    coeficient_excess           : float = 1.0
    coeficient_disjoint         : float = 1.0
    coeficient_weight           : float = 3.0

    # Reproduction & stagnation
    size_specie_for_champion         : int = 5
    generation_for_stagnating_species: int = 15

    # Connection weights
    weight_init_low        : float = 0.0
    weight_init_high       : float = 1.0
    weight_perturb_strength: float = 0.1
    min_weight             : float = -30.0
    max_weight             : float = 30.0

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name.startswith('prob_') and not 0.0 <= value <= 1.0:
                raise ValueError(f"'{f.name}' must be a probability in [0, 1], got {value}")
            if f.name.startswith('coeficient_') and value < 0:
                raise ValueError(f"'{f.name}' cannot be negative, got {value}")

        if not math.isfinite(self.species_similarity_threshold) or self.species_similarity_threshold < 0:
            raise ValueError("'species_similarity_threshold' must be a non-negative number")
        if self.normalized_gene_size < 0:
            raise ValueError("'normalized_gene_size' cannot be negative")
        if self.size_specie_for_champion < 0:
            raise ValueError("'size_specie_for_champion' cannot be negative")
        if self.generation_for_stagnating_species < 1:
            raise ValueError("'generation_for_stagnating_species' must be at least 1")
        if self.weight_init_low >= self.weight_init_high:
            raise ValueError("'weight_init_low' must be smaller than 'weight_init_high'")
        if self.weight_perturb_strength < 0:
            raise ValueError("'weight_perturb_strength' cannot be negative")
        if self.min_weight > self.max_weight:
            raise ValueError("'min_weight' cannot exceed 'max_weight'")


class Config:

    def __init__(self, config_file: str | None = None):
        """
        Initialize Config by parsing an INI file, or create a Config holding the defaults.

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, creates a default Config for manual attribute setting.
        """

        # Default config for testing/manual setup
        if config_file is None:
            self.population_size = 150
            self.num_inputs      = 2
            self.num_outputs     = 1
            self.bias            = False
            self.seed            = None

            for f in fields(Settings):
                setattr(self, f.name, f.default)

            self.fitness_termination_check = False
            self.fitness_criterion         = 'max'
            self.fitness_threshold         = None
            self.max_number_generations    = 100
            return

        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        # Sentinel for missing default values
        _NO_DEFAULT = object()

        # Helper function to safely parse values
        def get_value(section, key, value_type, default=_NO_DEFAULT):
            try:
                raw_value = parser.get(section, key)
                if raw_value.lower() == 'none':
                    return None
                if value_type == int:
                    return parser.getint(section, key)
                elif value_type == float:
                    return parser.getfloat(section, key)
                elif value_type == bool:
                    return parser.getboolean(section, key)
                elif value_type == str:
                    return raw_value
            except (configparser.NoSectionError, configparser.NoOptionError):
                if default is not _NO_DEFAULT:
                    return default
                raise

        defaults = {f.name: f.default for f in fields(Settings)}

        # [POPULATION_INIT]

        # The number of genomes in each generation (the number of population slots).
        self.population_size = get_value('POPULATION_INIT', 'population_size', int)

        # The number of input nodes, through which the network receives inputs.
        self.num_inputs = get_value('POPULATION_INIT', 'num_inputs', int)

        # The number of output nodes, to which the network delivers outputs.
        self.num_outputs = get_value('POPULATION_INIT', 'num_outputs', int)

        # Whether the input layer carries an extra, always-on bias node.
        self.bias = get_value('POPULATION_INIT', 'bias', bool, default=False)

        # Seed of the random source. Use "None" for a non-reproducible run.
        self.seed = get_value('POPULATION_INIT', 'seed', int, default=None)

        # [MUTATION]

        # The probability that the weights of a genome are mutated, and given that,
        # the probability that each weight is perturbed rather than replaced.
        self.prob_mutation_weight = get_value('MUTATION', 'prob_mutation_weight', float,
                                              default=defaults['prob_mutation_weight'])
        self.prob_mutation_weight_perturbation = get_value('MUTATION', 'prob_mutation_weight_perturbation', float,
                                                           default=defaults['prob_mutation_weight_perturbation'])

        # The probabilities of the structural mutations (split a connection by
        # adding a node, connect two unconnected nodes).
        self.prob_mutation_new_node = get_value('MUTATION', 'prob_mutation_new_node', float,
                                                default=defaults['prob_mutation_new_node'])
        self.prob_mutation_new_connection = get_value('MUTATION', 'prob_mutation_new_connection', float,
                                                      default=defaults['prob_mutation_new_connection'])

        # During crossover: the probability that a matching gene comes from the
        # fitter parent, and that a gene disabled in either parent stays disabled.
        self.prob_inherit_on_fitter_genomre = get_value('MUTATION', 'prob_inherit_on_fitter_genomre', float,
                                                        default=defaults['prob_inherit_on_fitter_genomre'])
        self.prob_inherit_disabled_gene = get_value('MUTATION', 'prob_inherit_disabled_gene', float,
                                                    default=defaults['prob_inherit_disabled_gene'])

        # The probability that an offspring is produced by crossover (rather than
        # cloning), and that the second parent comes from a different species.
        self.prob_offsprint_crossover = get_value('MUTATION', 'prob_offsprint_crossover', float,
                                                  default=defaults['prob_offsprint_crossover'])
        self.prob_mating_interspecies = get_value('MUTATION', 'prob_mating_interspecies', float,
                                                  default=defaults['prob_mating_interspecies'])

        # [CONNECTION]

        # New and replaced weights are drawn uniformly from [weight_init_low, weight_init_high).
        self.weight_init_low  = get_value('CONNECTION', 'weight_init_low',  float, default=defaults['weight_init_low'])
        self.weight_init_high = get_value('CONNECTION', 'weight_init_high', float, default=defaults['weight_init_high'])

        # The standard deviation of the zero-centered normal distribution
        # from which a weight perturbation is drawn.
        self.weight_perturb_strength = get_value('CONNECTION', 'weight_perturb_strength', float,
                                                 default=defaults['weight_perturb_strength'])

        # Perturbed weights are clamped to this range.
        self.min_weight = get_value('CONNECTION', 'min_weight', float, default=defaults['min_weight'])
        self.max_weight = get_value('CONNECTION', 'max_weight', float, default=defaults['max_weight'])

        # [SPECIATION]

        # Genomes whose distance to a species representative is less
        # than this threshold are assigned to that species.
        self.species_similarity_threshold = get_value('SPECIATION', 'species_similarity_threshold', float,
                                                      default=defaults['species_similarity_threshold'])

        # When both genomes have fewer genes than this, the excess and
        # disjoint counts are not normalized by the genome size.
        self.normalized_gene_size = get_value('SPECIATION', 'normalized_gene_size', int,
                                              default=defaults['normalized_gene_size'])

        # The weight of the excess, disjoint and weight-difference terms in the distance.
        self.coeficient_excess   = get_value('SPECIATION', 'coeficient_excess',   float, default=defaults['coeficient_excess'])
        self.coeficient_disjoint = get_value('SPECIATION', 'coeficient_disjoint', float, default=defaults['coeficient_disjoint'])
        self.coeficient_weight   = get_value('SPECIATION', 'coeficient_weight',   float, default=defaults['coeficient_weight'])

        # [REPRODUCTION]

        # Species with more members than this keep their champion unchanged.
        self.size_specie_for_champion = get_value('REPRODUCTION', 'size_specie_for_champion', int,
                                                  default=defaults['size_specie_for_champion'])

        # [STAGNATION]

        # Species whose best adjusted fitness has not improved for this
        # number of generations are extinguished.
        self.generation_for_stagnating_species = get_value('STAGNATION', 'generation_for_stagnating_species', int,
                                                           default=defaults['generation_for_stagnating_species'])

        # [TERMINATION]

        # Whether to use the fitness of the most recent
        # generation as a criterion for stopping the run.
        self.fitness_termination_check = get_value('TERMINATION', 'fitness_termination_check', bool, default=False)

        # The function used to compute the termination criterion.
        # Allowed values:
        #   "mean" calculate the mean fitness across the entire population
        #   "max"  get the fitness of the fittest genome in the population
        self.fitness_criterion = get_value('TERMINATION', 'fitness_criterion', str, default='max')

        # The fitness value which when met or exceeded causes the run to end.
        self.fitness_threshold = get_value('TERMINATION', 'fitness_threshold', float, default=None)

        # The number of generations after which to stop the run.
        self.max_number_generations = get_value('TERMINATION', 'max_number_generations', int)

        # Reject bad values now rather than at the first generation
        _ = self.settings, self.topology
        if self.population_size is None or self.population_size < 1:
            raise ValueError(f"population_size must be at least 1, got {self.population_size}")

    @property
    def settings(self) -> Settings:
        """The evolution parameters as an immutable Settings record."""
        return Settings(**{f.name: getattr(self, f.name) for f in fields(Settings)})

    @property
    def topology(self) -> Topology:
        """The population's input/output interface as an immutable Topology record."""
        return Topology(self.num_inputs, self.num_outputs, self.bias)
