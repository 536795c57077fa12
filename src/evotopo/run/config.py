import configparser
import os

from evotopo.activations import ActivationKind, parse_activation
from evotopo.errors      import ConfigError

# Sentinel for missing default values
_NO_DEFAULT = object()

# Every configuration parameter: (section, name, type, default).
# 'type' is one of int, float, bool, str; a default of None means "not set".
_PARAMETERS = [

    # [POPULATION_INIT]

    # The number of individuals in each generation.
    ('POPULATION_INIT', 'population_size', int, 150),

    # The number of input nodes, through which the network receives inputs,
    # and of output nodes, to which the network delivers outputs.
    ('POPULATION_INIT', 'num_inputs' , int, 1),
    ('POPULATION_INIT', 'num_outputs', int, 1),

    # Specifies the initial connectivity of newly-created networks.
    # Allowed values:
    #   "none"      - no connections are initially present
    #   "one-input" - one random input node is connected to all outputs nodes
    #   "partial"   - a fraction of all possible connections are instantiated randomly
    #   "full"      - connect all input nodes (and the bias node) to all output nodes
    ('POPULATION_INIT', 'initial_cxn_policy', str, 'full'),

    # The fraction of connections to instantiate (only used by the "partial" policy).
    ('POPULATION_INIT', 'initial_cxn_fraction', float, 0.5),

    # [SPECIATION]

    # Individuals whose genomic distance is less than or equal to this
    # threshold are considered to be in the same species.
    ('SPECIATION', 'compatibility_threshold', float, 3.0),

    # The coefficients for the excess and disjoint gene counts' contribution
    # to the genomic distance.
    ('SPECIATION', 'distance_excess_coeff'  , float, 1.0),
    ('SPECIATION', 'distance_disjoint_coeff', float, 1.0),

    # The coefficient for the parameter difference (connection weight,
    # node bias) of homologous genes' contribution to the genomic distance.
    ('SPECIATION', 'distance_params_coeff', float, 0.4),

    # Whether to include in the genomic distance the contribution
    # coming from the difference in parameters of homologous nodes.
    ('SPECIATION', 'distance_includes_nodes', bool, True),

    # If set, the compatibility threshold is moved by 'threshold_step' after
    # each speciation to steer the number of species towards this target,
    # never going below 'min_compatibility_threshold'. Use "None" to disable.
    ('SPECIATION', 'target_species_count'       , int  , None),
    ('SPECIATION', 'threshold_step'             , float, 0.1),
    ('SPECIATION', 'min_compatibility_threshold', float, 0.3),

    # [FITNESS]

    # Penalties subtracted from the raw fitness, per node and per enabled
    # connection of the evaluated network. Set to 0.0 to disable.
    ('FITNESS', 'node_cost'      , float, 0.0),
    ('FITNESS', 'connection_cost', float, 0.0),

    # [REPRODUCTION]

    # The number of most-fit individuals in each species that
    # will be preserved as-is from one generation to the next.
    ('REPRODUCTION', 'elitism', int, 1),

    # The fraction of individuals allowed to reproduce in each species.
    ('REPRODUCTION', 'survival_threshold', float, 0.2),

    # The minimum number of offspring reserved for each surviving species
    # (honored only while the population is large enough to afford it).
    ('REPRODUCTION', 'min_species_size', int, 2),

    # The probability that an offspring is produced by crossover
    # (otherwise it is a mutated clone of a single parent).
    ('REPRODUCTION', 'crossover_probability', float, 0.75),

    # The probability that the second parent of a crossover is
    # drawn from the whole population instead of the same species.
    ('REPRODUCTION', 'interspecies_mating_rate', float, 0.001),

    # The number of candidates drawn for each tournament selecting a parent.
    ('REPRODUCTION', 'tournament_size', int, 3),

    # The probability that a connection disabled in one parent
    # is disabled in the offspring, even if enabled in the other.
    ('REPRODUCTION', 'disable_inherit_probability', float, 0.75),

    # [STAGNATION]

    # Species that have not shown improvement in more than this
    # number of generations will be considered stagnant and removed.
    ('STAGNATION', 'stagnation_after', int, 15),

    # The number of best species that are protected from stagnation.
    # The species holding the fittest individual is always protected.
    ('STAGNATION', 'species_elitism', int, 1),

    # [TERMINATION]

    # The number of generations after which to stop the run.
    ('TERMINATION', 'max_generations', int, 100),

    # If set, the run stops as soon as the best fitness reaches this value.
    ('TERMINATION', 'fitness_goal', float, None),

    # [NODE]

    # Activation function for new nodes and the ones available for mutation
    # ("all" or a comma-separated list of names).
    ('NODE', 'activation_initial', str, 'sigmoid'),
    ('NODE', 'activation_options', str, 'all'),

    # The probability that mutation will change the activation function of a node.
    ('NODE', 'activation_mutate_prob', float, 0.0),

    # The mean and standard deviation of the normal distribution
    # used to initialize the 'bias' parameter of new nodes.
    ('NODE', 'bias_init_mean' , float, 0.0),
    ('NODE', 'bias_init_stdev', float, 1.0),

    # The minimum and maximum allowed 'bias' values.
    ('NODE', 'min_bias', float, -30.0),
    ('NODE', 'max_bias', float,  30.0),

    # The probability that mutation will replace the 'bias' of a node with a newly
    # chosen random value, or change it by adding a random value, and the standard
    # deviation of the zero-centered normal distribution of that added value.
    ('NODE', 'bias_replace_prob'    , float, 0.1),
    ('NODE', 'bias_perturb_prob'    , float, 0.7),
    ('NODE', 'bias_perturb_strength', float, 0.5),

    # [CONNECTION]

    # The mean and standard deviation of the normal distribution
    # used to initialize the 'weight' parameter of new connections.
    ('CONNECTION', 'weight_init_mean' , float, 0.0),
    ('CONNECTION', 'weight_init_stdev', float, 1.0),

    # The minimum and maximum allowed 'weight' values.
    ('CONNECTION', 'min_weight', float, -30.0),
    ('CONNECTION', 'max_weight', float,  30.0),

    # Same as for the node 'bias', for the 'weight' of enabled connections.
    ('CONNECTION', 'weight_replace_prob'    , float, 0.1),
    ('CONNECTION', 'weight_perturb_prob'    , float, 0.8),
    ('CONNECTION', 'weight_perturb_strength', float, 0.5),

    # [STRUCTURAL_MUTATIONS]

    # The probability that mutation will add a new node (splitting an
    # existing connection, the enabled status of which will be set to False).
    ('STRUCTURAL_MUTATIONS', 'node_add_probability', float, 0.2),

    # The probability that mutation will delete a hidden node. The node must have
    # enabled connections in and out; its inputs are then wired directly to its outputs.
    ('STRUCTURAL_MUTATIONS', 'node_delete_probability', float, 0.0),

    # The probability that mutation will add a connection between existing nodes.
    ('STRUCTURAL_MUTATIONS', 'connection_add_probability', float, 0.5),

    # The probability that mutation will delete a connection gene (enabled or disabled).
    ('STRUCTURAL_MUTATIONS', 'connection_delete_probability', float, 0.0),

    # The probability that mutation will flip the enabled status of a connection.
    ('STRUCTURAL_MUTATIONS', 'connection_toggle_probability', float, 0.01),

    # [RUN]

    # Number of parallel jobs for fitness evaluation (1 = serial, -1 = all cores),
    # and the joblib backend preference ("threads" or "processes").
    ('RUN', 'num_jobs'       , int, 1),
    ('RUN', 'parallel_prefer', str, 'threads'),

    # Seed for the random number generators. Use "None" for an unseeded run.
    ('RUN', 'seed', int, None),
]

_PROBABILITIES = ['bias_replace_prob', 'bias_perturb_prob', 'weight_replace_prob',
                  'weight_perturb_prob', 'activation_mutate_prob', 'node_add_probability',
                  'node_delete_probability', 'connection_add_probability',
                  'connection_delete_probability', 'connection_toggle_probability',
                  'crossover_probability', 'interspecies_mating_rate',
                  'disable_inherit_probability', 'survival_threshold']

class Config:
    """
    Configuration parameters for one evolution run.

    All parameters have defaults. Values are taken, in increasing order of
    precedence, from the defaults, from an (optional) INI file, and from keyword
    overrides. The configuration is validated on construction; the evolution
    driver validates it again and freezes it when the run starts, after which
    it is read-only.

    Public Methods:
        validate():    Check all parameter ranges, raising ConfigError if one is invalid
        freeze():      Make the configuration read-only
        parameters():  Return the names of all configuration parameters
    """

    def __init__(self, config_file: str | None = None, **overrides):
        """
        Initialize Config from the defaults, an INI file, and keyword overrides.

        Parameters:
            config_file: Path to the INI configuration file (optional).
                         Parameters missing from the file keep their defaults.
            overrides:   Parameter values taking precedence over the file

        Raises:
            FileNotFoundError: if 'config_file' does not exist
            ConfigError:       if a parameter is unknown, malformed or out of range
        """
        object.__setattr__(self, '_frozen', False)

        for _, name, _, default in _PARAMETERS:
            setattr(self, name, default)

        if config_file is not None:
            self._read_file(config_file)

        known = set(self.parameters())
        for name, value in overrides.items():
            if name not in known:
                raise ConfigError(f"Unknown configuration parameter '{name}'")
            setattr(self, name, value)

        self.validate()

    @staticmethod
    def parameters() -> list[str]:
        return [name for _, name, _, _ in _PARAMETERS]

    def _read_file(self, config_file: str) -> None:
        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        # Helper function to safely parse values
        def get_value(section, key, value_type, default=_NO_DEFAULT):
            try:
                raw_value = parser.get(section, key)
                # String parameters take "none" literally (e.g. initial_cxn_policy = none)
                if value_type != str and raw_value.lower() == 'none':
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
            except ValueError as e:
                raise ConfigError(f"Bad value for [{section}] {key}: {e}") from e

        for section, name, value_type, _ in _PARAMETERS:
            setattr(self, name, get_value(section, name, value_type, default=getattr(self, name)))

    def validate(self) -> None:
        """
        Check that all parameters are within their allowed ranges.

        Raises:
            ConfigError: describing the first invalid parameter found
        """
        if not isinstance(self.population_size, int) or self.population_size <= 0:
            raise ConfigError(f"population_size must be a positive integer, got {self.population_size}")
        if self.num_inputs < 1:
            raise ConfigError(f"num_inputs must be at least 1, got {self.num_inputs}")
        if self.num_outputs < 1:
            raise ConfigError(f"num_outputs must be at least 1, got {self.num_outputs}")
        if self.max_generations < 1:
            raise ConfigError(f"max_generations must be at least 1, got {self.max_generations}")
        if self.stagnation_after < 0:
            raise ConfigError(f"stagnation_after cannot be negative, got {self.stagnation_after}")
        if self.compatibility_threshold <= 0:
            raise ConfigError(f"compatibility_threshold must be positive, got {self.compatibility_threshold}")
        if self.min_compatibility_threshold < 0 or self.threshold_step < 0:
            raise ConfigError("min_compatibility_threshold and threshold_step cannot be negative")
        if self.target_species_count is not None and self.target_species_count < 1:
            raise ConfigError(f"target_species_count must be at least 1, got {self.target_species_count}")
        if self.node_cost < 0 or self.connection_cost < 0:
            raise ConfigError("node_cost and connection_cost cannot be negative")
        if self.elitism < 0 or self.species_elitism < 0 or self.min_species_size < 0:
            raise ConfigError("elitism, species_elitism and min_species_size cannot be negative")
        if self.tournament_size < 1:
            raise ConfigError(f"tournament_size must be at least 1, got {self.tournament_size}")
        if self.initial_cxn_policy not in ("none", "one-input", "partial", "full"):
            raise ConfigError(f"bad initial connection policy '{self.initial_cxn_policy}'")
        if self.initial_cxn_policy == "partial" and \
           (self.initial_cxn_fraction is None or not 0.0 <= self.initial_cxn_fraction <= 1.0):
            raise ConfigError("initial_cxn_fraction must be in [0, 1] for the 'partial' policy")
        if self.parallel_prefer not in ("threads", "processes"):
            raise ConfigError(f"parallel_prefer must be 'threads' or 'processes', got '{self.parallel_prefer}'")
        if self.num_jobs == 0:
            raise ConfigError("num_jobs cannot be 0")

        for name in _PROBABILITIES:
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be in [0, 1], got {value}")
        if self.bias_replace_prob + self.bias_perturb_prob > 1.0:
            raise ConfigError("bias_replace_prob + bias_perturb_prob cannot exceed 1")
        if self.weight_replace_prob + self.weight_perturb_prob > 1.0:
            raise ConfigError("weight_replace_prob + weight_perturb_prob cannot exceed 1")

        if self.min_weight > self.max_weight:
            raise ConfigError(f"min_weight ({self.min_weight}) exceeds max_weight ({self.max_weight})")
        if self.min_bias > self.max_bias:
            raise ConfigError(f"min_bias ({self.min_bias}) exceeds max_bias ({self.max_bias})")
        if self.weight_init_stdev < 0 or self.bias_init_stdev < 0:
            raise ConfigError("initialization standard deviations cannot be negative")
        if self.weight_perturb_strength < 0 or self.bias_perturb_strength < 0:
            raise ConfigError("perturbation strengths cannot be negative")
        if not self.activation_options:
            raise ConfigError("activation_options cannot be empty")

    def freeze(self) -> None:
        """
        Make the configuration read-only. Any later assignment raises AttributeError.
        """
        object.__setattr__(self, '_frozen', True)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __setattr__(self, name, value):
        """
        Override 'setattr' to refuse changes once frozen, and to automatically
        parse activation names. This allows users to write
        config.activation_options = "tanh, relu" and have it converted
        to the list of corresponding ActivationKind members.
        """
        if self._frozen:
            raise AttributeError(f"Configuration is frozen, cannot set '{name}'")
        try:
            if name == 'activation_initial':
                value = parse_activation(value)
            elif name == 'activation_options':
                value = self._parse_activation_options(value)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        super().__setattr__(name, value)

    @staticmethod
    def _parse_activation_options(raw_options) -> list[ActivationKind]:
        """
        Parse activation_options from string to list.

        Parameters:
            raw_options: Either "all", a comma-separated list, or already a list

        Returns:
            List of ActivationKind members
        """
        if isinstance(raw_options, (list, tuple)):
            return [parse_activation(opt) for opt in raw_options]
        if raw_options.strip().lower() == 'all':
            return list(ActivationKind)
        return [parse_activation(opt) for opt in raw_options.split(',') if opt.strip()]

    def __repr__(self):
        values = ', '.join(f"{name}={getattr(self, name)!r}" for name in self.parameters())
        return f"Config({values})"
