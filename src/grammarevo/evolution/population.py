"""
Population bookkeeping: the current generation, the best genome seen and
the Pareto front.
"""
import math
from typing import List, Optional, Sequence

from grammarevo.config import EvolutionParams
from grammarevo.constants import MAX_PARETO_FRONT, PARETO_FRACTION
from grammarevo.evolution.genome import GrammarGenome, GrammarPrimitive
from grammarevo.evolution.reproduction import GenomeFactory
from grammarevo.evolution.selection import sort_by_fitness
from grammarevo.utils.errors import ConfigurationError


class PopulationManager:
    """
    Holds the population and its derived views.

    The population list is replaced wholesale each generation and is always
    kept sorted by fitness, best first. ``best_genome`` is the fittest genome
    seen since the last reset, not only in the current population.
    """

    def __init__(self, params: EvolutionParams, factory: GenomeFactory):
        self.params = params
        self.factory = factory
        self.population: List[GrammarGenome] = []
        self.best_genome: Optional[GrammarGenome] = None
        self.pareto_front: List[GrammarGenome] = []
        self.seed_primitives: List[GrammarPrimitive] = []

    def reset(self) -> None:
        """Forget the population, best genome, front and seeds."""
        self.population = []
        self.best_genome = None
        self.pareto_front = []
        self.seed_primitives = []

    def create_initial(self, seed_primitives: Sequence[GrammarPrimitive]) -> List[GrammarGenome]:
        """
        Create the unevaluated generation-0 genomes.

        Args:
            seed_primitives: Primitives typing the genome nodes

        Returns:
            ``population.size`` random genomes

        Raises:
            ConfigurationError: If no seed primitives are given
        """
        if not seed_primitives:
            raise ConfigurationError("At least one seed primitive is required")

        self.reset()
        self.seed_primitives = list(seed_primitives)
        return [
            self.factory.create_random_genome(self.seed_primitives, generation=0, tag="rand")
            for _ in range(self.params.population.size)
        ]

    def create_immigrants(self, count: int, generation: int) -> List[GrammarGenome]:
        """Create ``count`` unevaluated random genomes for the given generation."""
        return [
            self.factory.create_random_genome(self.seed_primitives, generation=generation, tag="imm")
            for _ in range(count)
        ]

    @property
    def shortfall(self) -> int:
        """Number of genomes missing from a full population."""
        return max(0, self.params.population.size - len(self.population))

    def replace(self, genomes: List[GrammarGenome]) -> None:
        """Install a new population and refresh the derived views."""
        self.population = sort_by_fitness(genomes)
        self._refresh()

    def _refresh(self) -> None:
        finite = [genome for genome in self.population if math.isfinite(genome.fitness)]
        if finite and (self.best_genome is None or finite[0].fitness > self.best_genome.fitness):
            self.best_genome = finite[0]
        if self.best_genome is None and self.population:
            self.best_genome = self.population[0]

        front_size = min(MAX_PARETO_FRONT, math.ceil(len(self.population) * PARETO_FRACTION))
        self.pareto_front = finite[:front_size]
