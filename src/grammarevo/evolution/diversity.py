"""
Similarity measures and diversity preservation.

Similarity combines a structural score (how alike the node, edge and pattern
counts are) with a parametric score (mean cosine of the parameter vectors).
Both lie in [0, 1], so the combined score does as well.
"""
from typing import List, Tuple

from grammarevo.evolution.genome import GrammarGenome
from grammarevo.evolution.tensor import cosine_similarity
from grammarevo.utils.helpers import clamp


def structural_similarity(a: GrammarGenome, b: GrammarGenome) -> float:
    """Similarity of the node, edge and pattern counts of two genomes."""
    differences = []
    for count_a, count_b in (
        (a.node_count, b.node_count),
        (a.edge_count, b.edge_count),
        (a.pattern_count, b.pattern_count),
    ):
        differences.append(abs(count_a - count_b) / max(count_a, count_b, 1))
    return max(0.0, 1.0 - sum(differences) / len(differences))


def parametric_similarity(a: GrammarGenome, b: GrammarGenome) -> float:
    """Mean cosine similarity of the parameter vectors, clamped to [0, 1]."""
    vectors_a = a.parameters.as_dict()
    vectors_b = b.parameters.as_dict()
    cosines = [cosine_similarity(vectors_a[name], vectors_b[name]) for name in vectors_a]
    return clamp(sum(cosines) / len(cosines))


def genome_similarity(a: GrammarGenome, b: GrammarGenome) -> float:
    """
    Combined similarity of two genomes.

    Symmetric, in [0, 1], and 1.0 for a genome compared with itself (unless
    all its parameter vectors are zero).
    """
    return (structural_similarity(a, b) + parametric_similarity(a, b)) / 2.0


def maintains_diversity(
    candidate: GrammarGenome,
    retained: List[GrammarGenome],
    threshold: float,
) -> bool:
    """Check that a candidate is not too similar to any retained genome."""
    return all(genome_similarity(candidate, other) <= threshold for other in retained)


def maintain_diversity(
    population: List[GrammarGenome],
    threshold: float,
) -> Tuple[List[GrammarGenome], List[GrammarGenome]]:
    """
    Remove genomes that are too similar to an earlier genome.

    The scan runs from the last index down and compares against every
    earlier index of the original list. A genome is dropped even when the
    earlier genome it resembles is itself dropped later in the scan, so a
    population ordered by fitness keeps its fittest members.

    Args:
        population: Genomes, typically sorted by fitness descending
        threshold: Maximum tolerated similarity

    Returns:
        Tuple of (kept genomes in original order, removed genomes)
    """
    removed_indices = set()
    for i in range(len(population) - 1, 0, -1):
        for j in range(i):
            if genome_similarity(population[i], population[j]) > threshold:
                removed_indices.add(i)
                break

    kept = [genome for i, genome in enumerate(population) if i not in removed_indices]
    removed = [genome for i, genome in enumerate(population) if i in removed_indices]
    return kept, removed


def population_diversity(population: List[GrammarGenome]) -> float:
    """Mean pairwise dissimilarity, 0.0 for fewer than two genomes."""
    if len(population) < 2:
        return 0.0

    total = 0.0
    pairs = 0
    for i in range(len(population)):
        for j in range(i + 1, len(population)):
            total += 1.0 - genome_similarity(population[i], population[j])
            pairs += 1
    return total / pairs
