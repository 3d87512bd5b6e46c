"""
Global constants for the grammar evolution engine.
"""

# Genome shape constants
ACTIVATION_SHAPE = (4,)
PARAMETER_SHAPES = {
    "complexity": (8,),
    "expressiveness": (6,),
    "efficiency": (4,),
    "adaptability": (5,),
}
PARAMETER_INIT_SCALES = {
    "complexity": 0.3,
    "expressiveness": 0.4,
    "efficiency": 0.5,
    "adaptability": 0.3,
}
ACTIVATION_INIT_SCALE = 0.5

# Random genome creation
MIN_INITIAL_NODES = 3
MAX_INITIAL_NODES = 10
MAX_SEED_PRIMITIVES = 5

# Structural mutation constants
EDGE_TYPES = ("semantic", "syntactic", "causal", "temporal")
PATTERN_NAMES = ("recursive", "hierarchical", "sequential", "parallel", "conditional")
MAX_PATTERN_NODES = 3
MAX_INITIAL_RECURSION_DEPTH = 4
WEIGHT_PERTURBATION = 0.1
APPLICABILITY_PERTURBATION = 0.1

# Selection constants
TOURNAMENT_FRACTION = 0.1
MIN_TOURNAMENT_SIZE = 2
PARETO_FRACTION = 0.1
MAX_PARETO_FRONT = 10

# Scheduling
DIVERSITY_INTERVAL = 5
META_OPTIMIZATION_INTERVAL = 10

# Meta-optimization
META_WINDOW = 10
STAGNATION_IMPROVEMENT = 0.001
FAST_IMPROVEMENT = 0.01
RATE_INCREASE_FACTOR = 1.1
RATE_DECREASE_FACTOR = 0.9
MUTATION_RATE_BOUNDS = (0.01, 0.5)
CROSSOVER_RATE_BOUNDS = (0.1, 0.9)

# Adaptive mutation strength
ADAPTIVE_WINDOW = 5
ADAPTIVE_MIN_HISTORY = 3
TREND_THRESHOLD = 0.01
IMPROVING_FACTOR = 0.8
DECLINING_FACTOR = 1.3
STAGNANT_FACTOR = 1.1

# Termination
STAGNATION_RANGE = 0.001

# Statistics / insights
CONVERGENCE_WINDOW = 5
HIGH_COMPLEXITY_NODES = 8
MINIMAL_STRUCTURE_NODES = 4
PATTERN_RICH_COUNT = 3
SIMPLE_STRUCTURE_COUNT = 1
FITNESS_JUMP = 0.1

# Config file discovery
CONFIG_ENV_PREFIX = "GRAMMAREVO_"
