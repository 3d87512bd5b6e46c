"""
Parent and survivor selection strategies.
"""
import math
from typing import Callable, List, Optional

from grammarevo.config import EvolutionParams, SelectionMethod
from grammarevo.constants import MIN_TOURNAMENT_SIZE, TOURNAMENT_FRACTION
from grammarevo.evolution.genome import GrammarGenome
from grammarevo.evolution.random_source import RandomSource
from grammarevo.utils.errors import ConfigurationError

SimilarityFunction = Callable[[GrammarGenome, GrammarGenome], float]


def sort_by_fitness(population: List[GrammarGenome]) -> List[GrammarGenome]:
    """Return a new list sorted by fitness, best first."""
    return sorted(population, key=lambda genome: genome.fitness, reverse=True)


def tournament_size_for(population_size: int) -> int:
    """Tournament size used for a population of the given size."""
    return max(MIN_TOURNAMENT_SIZE, int(population_size * TOURNAMENT_FRACTION))


def tournament_selection(
    population: List[GrammarGenome],
    count: int,
    tournament_size: int,
    rng: RandomSource,
) -> List[GrammarGenome]:
    """
    Select by repeated tournaments.

    Members of each tournament are drawn uniformly with replacement and the
    fittest member wins.

    Args:
        population: Candidate genomes
        count: Number of genomes to select
        tournament_size: Members per tournament
        rng: Random source

    Returns:
        Selected genomes
    """
    selected = []
    for _ in range(count):
        contestants = [rng.choice(population) for _ in range(tournament_size)]
        selected.append(max(contestants, key=lambda genome: genome.fitness))
    return selected


def roulette_selection(
    population: List[GrammarGenome],
    count: int,
    rng: RandomSource,
) -> List[GrammarGenome]:
    """
    Select with probability proportional to non-negative fitness.

    Falls back to uniform choice when no genome has positive fitness.
    """
    weights = [max(0.0, genome.fitness) if math.isfinite(genome.fitness) else 0.0
               for genome in population]
    total = sum(weights)

    selected = []
    for _ in range(count):
        if total <= 0:
            selected.append(rng.choice(population))
            continue

        pick = rng.uniform(0, total)
        current = 0.0
        chosen = population[-1]
        for genome, weight in zip(population, weights):
            current += weight
            if current >= pick:
                chosen = genome
                break
        selected.append(chosen)
    return selected


def rank_selection(
    population: List[GrammarGenome],
    count: int,
    rng: RandomSource,
) -> List[GrammarGenome]:
    """
    Select biased towards the top ranks.

    A uniform rank ``r`` maps to index ``r * r // n`` of the sorted
    population, so lower indices (fitter genomes) are chosen more often.
    """
    ranked = sort_by_fitness(population)
    n = len(ranked)
    selected = []
    for _ in range(count):
        rank = rng.randrange(n)
        selected.append(ranked[(rank * rank) // n])
    return selected


def pareto_selection(
    population: List[GrammarGenome],
    count: int,
    pareto_front: List[GrammarGenome],
    tournament_size: int,
    rng: RandomSource,
) -> List[GrammarGenome]:
    """Take Pareto-front members first, then top up by tournament."""
    selected = list(pareto_front[:count])
    if len(selected) < count:
        selected.extend(tournament_selection(
            population, count - len(selected), tournament_size, rng
        ))
    return selected


def select_parents(
    population: List[GrammarGenome],
    params: EvolutionParams,
    pareto_front: Optional[List[GrammarGenome]],
    rng: RandomSource,
) -> List[GrammarGenome]:
    """
    Select the parents for the next generation.

    Elites (the top ``elite_ratio`` of genomes with finite fitness) are kept
    unconditionally; the rest are chosen by the configured method.

    Args:
        population: Current population
        params: Evolution parameters
        pareto_front: Current Pareto front, used by the pareto method
        rng: Random source

    Returns:
        Exactly ``population.size`` parents

    Raises:
        ConfigurationError: If the selection method is unknown
    """
    size = params.population.size
    if not population:
        return []

    elite_count = int(size * params.population.elite_ratio)
    finite = [genome for genome in sort_by_fitness(population) if math.isfinite(genome.fitness)]
    parents = finite[:min(elite_count, size)]
    remaining = size - len(parents)

    method = params.selection.method
    tournament_size = tournament_size_for(size)
    if method == SelectionMethod.TOURNAMENT:
        parents.extend(tournament_selection(
            population, remaining, tournament_size, rng
        ))
    elif method == SelectionMethod.ROULETTE:
        parents.extend(roulette_selection(population, remaining, rng))
    elif method == SelectionMethod.RANK:
        parents.extend(rank_selection(population, remaining, rng))
    elif method == SelectionMethod.PARETO:
        parents.extend(pareto_selection(
            population, remaining, pareto_front or [], tournament_size, rng
        ))
    else:
        raise ConfigurationError(f"Unknown selection method: {method}")

    return parents


def select_survivors(
    combined: List[GrammarGenome],
    size: int,
    threshold: float,
    similarity: SimilarityFunction,
) -> List[GrammarGenome]:
    """
    Choose the next population from parents and offspring.

    Candidates are taken in fitness order; each must stay at or below the
    similarity threshold against every survivor so far. Remaining slots are
    then filled in fitness order regardless of similarity. Genomes with
    non-finite fitness only enter in that second pass.

    Args:
        combined: Candidate genomes
        size: Target population size
        threshold: Maximum tolerated similarity
        similarity: Pairwise similarity function

    Returns:
        At most ``size`` survivors, sorted best first
    """
    ranked = sort_by_fitness(combined)
    survivors: List[GrammarGenome] = []
    included = set()

    for genome in ranked:
        if len(survivors) >= size:
            break
        if id(genome) in included or not math.isfinite(genome.fitness):
            continue
        if all(similarity(genome, other) <= threshold for other in survivors):
            survivors.append(genome)
            included.add(id(genome))

    for genome in ranked:
        if len(survivors) >= size:
            break
        if id(genome) not in included:
            survivors.append(genome)
            included.add(id(genome))

    return sort_by_fitness(survivors)
