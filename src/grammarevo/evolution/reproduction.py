"""
Genome creation and genetic operators.

The factory creates random genomes and produces offspring by crossover and
mutation. Operators never modify their inputs: each returns new genomes with
fresh ids, and every returned genome has passed structural validation.
"""
from typing import Dict, List, Optional, Sequence, Tuple

from grammarevo.config import EvolutionParams
from grammarevo.constants import (
    ACTIVATION_INIT_SCALE,
    ACTIVATION_SHAPE,
    APPLICABILITY_PERTURBATION,
    EDGE_TYPES,
    MAX_INITIAL_NODES,
    MAX_INITIAL_RECURSION_DEPTH,
    MAX_PATTERN_NODES,
    MAX_SEED_PRIMITIVES,
    MIN_INITIAL_NODES,
    PARAMETER_INIT_SCALES,
    PARAMETER_SHAPES,
    PATTERN_NAMES,
    WEIGHT_PERTURBATION,
)
from grammarevo.evolution.genome import (
    GenomeEdge,
    GenomeNode,
    GenomeParameters,
    GenomePattern,
    GenomeStructure,
    GrammarGenome,
    GrammarPrimitive,
    PrimitiveType,
    edges_reference,
    patterns_reference,
)
from grammarevo.evolution.random_source import RandomSource
from grammarevo.evolution.tensor import add_tensors, random_tensor
from grammarevo.utils.errors import EvolutionError
from grammarevo.utils.helpers import IdGenerator, clamp
from grammarevo.utils.logging import logger


class GenomeFactory:
    """
    Creates genomes and applies crossover and mutation.

    The factory reads rates from the shared ``EvolutionParams`` on every call,
    so adjustments made by the meta-optimizer take effect immediately.
    ``mutation_strength`` is the standard deviation of parametric noise and
    is refreshed by the engine once per generation.
    """

    def __init__(self, params: EvolutionParams, rng: RandomSource, ids: Optional[IdGenerator] = None):
        self.params = params
        self.rng = rng
        self.ids = ids or IdGenerator()
        self.mutation_strength = params.mutation.parametric_rate
        # child id -> parent fitness, for offspring produced by mutation alone
        self._mutation_parents: Dict[str, float] = {}

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_random_genome(
        self,
        seed_primitives: Sequence[GrammarPrimitive],
        generation: int = 0,
        tag: str = "rand",
    ) -> GrammarGenome:
        """
        Create a random genome from seed primitives.

        Args:
            seed_primitives: Non-empty list of primitives typing the nodes
            generation: Generation the genome is born in
            tag: Source tag used in the genome id

        Returns:
            New, unevaluated genome
        """
        if not seed_primitives:
            raise ValueError("At least one seed primitive is required")

        node_count = self.rng.randint(MIN_INITIAL_NODES, MAX_INITIAL_NODES)
        nodes = [
            GenomeNode(
                id=self.ids.next_id("node"),
                type=seed_primitives[i % len(seed_primitives)].type,
                activation=random_tensor(ACTIVATION_SHAPE, ACTIVATION_INIT_SCALE, self.rng),
                complexity=self.rng.random(),
            )
            for i in range(node_count)
        ]

        parameters = GenomeParameters(**{
            name: random_tensor(shape, PARAMETER_INIT_SCALES[name], self.rng)
            for name, shape in PARAMETER_SHAPES.items()
        })

        genome = GrammarGenome(
            id=self.ids.genome_id(generation, tag),
            primitives=tuple(seed_primitives[:MAX_SEED_PRIMITIVES]),
            structure=GenomeStructure(nodes=nodes),
            parameters=parameters,
            generation=generation,
        )
        genome.validate()
        return genome

    # ------------------------------------------------------------------
    # Crossover
    # ------------------------------------------------------------------

    def crossover(
        self,
        parent_a: GrammarGenome,
        parent_b: GrammarGenome,
        generation: Optional[int] = None,
    ) -> Tuple[GrammarGenome, GrammarGenome]:
        """
        Produce two children from two parents.

        Nodes, edges and patterns are each inherited wholesale from one
        parent. When the chosen edges or patterns would reference nodes the
        child does not inherit, that field comes from the node donor instead.

        Args:
            parent_a: First parent
            parent_b: Second parent
            generation: Generation of the children (defaults to one past the
                younger parent)

        Returns:
            Tuple of two children
        """
        if generation is None:
            generation = max(parent_a.generation, parent_b.generation) + 1

        alpha = self.params.crossover.blend_alpha
        children = (
            self._make_child(parent_a, parent_b, parent_a.parameters.blend(parent_b.parameters, alpha), generation),
            self._make_child(parent_a, parent_b, parent_b.parameters.blend(parent_a.parameters, alpha), generation),
        )

        result = []
        for child in children:
            if self.rng.chance(self.params.mutation.structural_rate):
                self._apply_mutations(child)
            child.validate()
            result.append(child)
        return result[0], result[1]

    def _crossover_primitives(
        self, parent_a: GrammarGenome, parent_b: GrammarGenome
    ) -> Tuple[GrammarPrimitive, ...]:
        a, b = parent_a.primitives, parent_b.primitives
        primitives = []
        for i in range(max(len(a), len(b))):
            if i < len(a) and i < len(b):
                primitives.append(self.rng.choice((a[i], b[i])))
            else:
                primitives.append(a[i] if i < len(a) else b[i])
        return tuple(primitives)

    def _make_child(
        self,
        parent_a: GrammarGenome,
        parent_b: GrammarGenome,
        parameters: GenomeParameters,
        generation: int,
    ) -> GrammarGenome:
        parents = (parent_a, parent_b)
        node_donor = self.rng.choice(parents)
        edge_donor = self.rng.choice(parents)
        pattern_donor = self.rng.choice(parents)

        node_ids = node_donor.structure.node_ids()
        if not edges_reference(edge_donor.structure.edges, node_ids):
            edge_donor = node_donor
        if not patterns_reference(pattern_donor.structure.patterns, node_ids):
            pattern_donor = node_donor

        # Copy each field from its donor through a full structure copy
        structure = GenomeStructure(
            nodes=node_donor.structure.copy().nodes,
            edges=edge_donor.structure.copy().edges,
            patterns=pattern_donor.structure.copy().patterns,
        )

        return GrammarGenome(
            id=self.ids.genome_id(generation, "cross"),
            primitives=self._crossover_primitives(parent_a, parent_b),
            structure=structure,
            parameters=parameters,
            generation=generation,
            lineage=(parent_a.id, parent_b.id),
        )

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def mutate(self, genome: GrammarGenome, generation: Optional[int] = None) -> GrammarGenome:
        """
        Produce a mutated copy of a genome.

        Args:
            genome: Genome to mutate (left untouched)
            generation: Generation of the child (defaults to the parent's + 1)

        Returns:
            New genome tagged ``mut`` with the parent as its only ancestor
        """
        if generation is None:
            generation = genome.generation + 1

        child = GrammarGenome(
            id=self.ids.genome_id(generation, "mut"),
            primitives=genome.primitives,
            structure=genome.structure.copy(),
            parameters=genome.parameters.copy(),
            generation=generation,
            lineage=(genome.id,),
        )
        self._apply_mutations(child)
        child.validate()
        return child

    def _apply_mutations(self, genome: GrammarGenome) -> None:
        """Mutate a genome the factory owns and has not yet published."""
        if self.rng.chance(self.params.mutation.structural_rate):
            category = self.rng.randrange(3)
            if category == 0:
                self._mutate_nodes(genome)
            elif category == 1:
                self._mutate_edges(genome.structure)
            else:
                self._mutate_patterns(genome.structure)

        if self.rng.chance(self.params.mutation.parametric_rate):
            strength = self.mutation_strength
            genome.parameters = GenomeParameters(**{
                name: add_tensors(vector, random_tensor(vector.shape, strength, self.rng))
                for name, vector in genome.parameters.as_dict().items()
            })

    def _mutate_nodes(self, genome: GrammarGenome) -> None:
        structure = genome.structure
        if len(structure.nodes) < self.params.constraints.max_nodes and self.rng.chance(0.5):
            if genome.primitives:
                node_type = self.rng.choice(genome.primitives).type
            else:
                node_type = self.rng.choice(list(PrimitiveType))
            structure.nodes.append(GenomeNode(
                id=self.ids.next_id("node"),
                type=node_type,
                activation=random_tensor(ACTIVATION_SHAPE, ACTIVATION_INIT_SCALE, self.rng),
                complexity=self.rng.random(),
            ))
        elif len(structure.nodes) >= 2:
            removed = structure.nodes.pop(self.rng.randrange(len(structure.nodes))).id
            structure.edges = [
                edge for edge in structure.edges
                if edge.source != removed and edge.target != removed
            ]
            for pattern in structure.patterns:
                pattern.nodes = [node_id for node_id in pattern.nodes if node_id != removed]
            structure.patterns = [pattern for pattern in structure.patterns if pattern.nodes]
            for node in structure.nodes:
                node.connections = [target for target in node.connections if target != removed]

    def _mutate_edges(self, structure: GenomeStructure) -> None:
        if structure.edges and self.rng.chance(0.5):
            edge = self.rng.choice(structure.edges)
            delta = self.rng.uniform(-WEIGHT_PERTURBATION, WEIGHT_PERTURBATION)
            edge.weight = clamp(edge.weight + delta)
            return

        if len(structure.nodes) < 2:
            return

        source, target = self.rng.sample(structure.nodes, 2)
        structure.edges.append(GenomeEdge(
            id=self.ids.next_id("edge"),
            source=source.id,
            target=target.id,
            weight=self.rng.random(),
            type=self.rng.choice(EDGE_TYPES),
        ))
        if target.id not in source.connections:
            source.connections.append(target.id)

    def _mutate_patterns(self, structure: GenomeStructure) -> None:
        if structure.patterns and self.rng.chance(0.5):
            pattern = self.rng.choice(structure.patterns)
            pattern.recursion_depth = max(1, pattern.recursion_depth + self.rng.choice((-1, 1)))
            delta = self.rng.uniform(-APPLICABILITY_PERTURBATION, APPLICABILITY_PERTURBATION)
            pattern.applicability = clamp(pattern.applicability + delta)
            return

        if not structure.nodes:
            return

        members = self.rng.sample(structure.nodes, min(MAX_PATTERN_NODES, len(structure.nodes)))
        structure.patterns.append(GenomePattern(
            id=self.ids.next_id("pattern"),
            name=self.rng.choice(PATTERN_NAMES),
            nodes=[node.id for node in members],
            recursion_depth=self.rng.randint(1, MAX_INITIAL_RECURSION_DEPTH),
            applicability=self.rng.random(),
        ))

    # ------------------------------------------------------------------
    # Offspring
    # ------------------------------------------------------------------

    def generate_offspring(self, parents: List[GrammarGenome], generation: int) -> List[GrammarGenome]:
        """
        Produce a full generation of offspring.

        Args:
            parents: Selected parents
            generation: Generation the offspring are born in

        Returns:
            Exactly ``population.size`` new genomes

        Raises:
            EvolutionError: If there are no parents
        """
        if not parents:
            raise EvolutionError("Cannot reproduce from an empty parent pool", phase="reproduction")

        size = self.params.population.size
        self._mutation_parents = {}
        offspring: List[GrammarGenome] = []
        crossovers = 0

        while len(offspring) < size:
            if len(parents) >= 2 and self.rng.chance(self.params.crossover.rate):
                parent_a = self.rng.choice(parents)
                parent_b = self.rng.choice(parents)
                if parent_a is parent_b:
                    offspring.append(self._tracked_mutation(parent_a, generation))
                else:
                    offspring.extend(self.crossover(parent_a, parent_b, generation))
                    crossovers += 1
            else:
                offspring.append(self._tracked_mutation(self.rng.choice(parents), generation))

        logger.debug(
            f"Generated {size} offspring",
            component="reproduction",
            operation="crossover",
            context={
                "generation": generation,
                "crossovers": crossovers,
                "mutations": len(self._mutation_parents),
            },
        )
        return offspring[:size]

    def _tracked_mutation(self, parent: GrammarGenome, generation: int) -> GrammarGenome:
        child = self.mutate(parent, generation)
        self._mutation_parents[child.id] = parent.fitness
        return child

    def mutation_success_rate(self, offspring: List[GrammarGenome]) -> float:
        """
        Fraction of mutation-only offspring that beat their parent.

        Args:
            offspring: Evaluated offspring from the last ``generate_offspring``

        Returns:
            Success fraction, 0.0 when no mutation offspring exist
        """
        tracked = [child for child in offspring if child.id in self._mutation_parents]
        if not tracked:
            return 0.0
        improved = sum(1 for child in tracked if child.fitness > self._mutation_parents[child.id])
        return improved / len(tracked)
