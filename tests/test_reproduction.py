import pytest

from grammarevo.config import EvolutionParams
from grammarevo.evolution.genome import GenomeEdge, GenomePattern
from grammarevo.evolution.random_source import RandomSource
from grammarevo.evolution.reproduction import GenomeFactory
from grammarevo.utils.errors import EvolutionError
from grammarevo.utils.helpers import IdGenerator


def make_factory(seed=7, **overrides):
    params = EvolutionParams(**overrides)
    return GenomeFactory(params, RandomSource(seed), IdGenerator())


def node_ids(genome):
    return [node.id for node in genome.structure.nodes]


def edge_ids(genome):
    return [edge.id for edge in genome.structure.edges]


def pattern_ids(genome):
    return [pattern.id for pattern in genome.structure.patterns]


def grow(factory, genome, steps=30):
    """Mutate repeatedly to obtain a genome with edges and patterns."""
    for _ in range(steps):
        genome = factory.mutate(genome)
    return genome


class TestCrossover:
    def test_children_inherit_whole_fields(self, seed_primitives):
        factory = make_factory(
            mutation={"structural_rate": 1.0, "parametric_rate": 0.0},
            constraints={"max_nodes": 20},
        )
        a = grow(factory, factory.create_random_genome(seed_primitives))
        b = grow(factory, factory.create_random_genome(seed_primitives))

        factory.params.mutation.structural_rate = 0.0
        for _ in range(20):
            for child in factory.crossover(a, b):
                assert node_ids(child) in (node_ids(a), node_ids(b))
                assert edge_ids(child) in (edge_ids(a), edge_ids(b))
                assert pattern_ids(child) in (pattern_ids(a), pattern_ids(b))
                child.validate()

    def test_children_metadata(self, factory, seed_primitives):
        a = factory.create_random_genome(seed_primitives, generation=2)
        b = factory.create_random_genome(seed_primitives, generation=3)
        children = factory.crossover(a, b)

        assert len(children) == 2
        for child in children:
            assert child.lineage == (a.id, b.id)
            assert child.generation == 4
            assert "_cross_" in child.id
            assert child.id not in (a.id, b.id)
        assert children[0].id != children[1].id

    def test_parameters_are_blended(self, seed_primitives):
        factory = make_factory(mutation={"structural_rate": 0.0, "parametric_rate": 0.0})
        a = factory.create_random_genome(seed_primitives)
        b = factory.create_random_genome(seed_primitives)
        child, _ = factory.crossover(a, b)
        expected = 0.5 * a.parameters.complexity + 0.5 * b.parameters.complexity
        assert child.parameters.complexity == pytest.approx(expected)

    def test_parents_are_untouched(self, factory, seed_primitives):
        a = factory.create_random_genome(seed_primitives)
        b = factory.create_random_genome(seed_primitives)
        before = (node_ids(a), a.parameters.complexity.copy())
        factory.crossover(a, b)
        assert node_ids(a) == before[0]
        assert (a.parameters.complexity == before[1]).all()


class TestMutation:
    def test_mutation_metadata(self, factory, seed_primitives):
        parent = factory.create_random_genome(seed_primitives, generation=1)
        child = factory.mutate(parent)
        assert child.lineage == (parent.id,)
        assert child.generation == 2
        assert "_mut_" in child.id
        assert child.structure is not parent.structure

    def test_mutation_keeps_one_node(self, seed_primitives):
        factory = make_factory(
            mutation={"structural_rate": 1.0, "parametric_rate": 0.0},
            constraints={"max_nodes": 1},
        )
        genome = factory.create_random_genome(seed_primitives)
        for _ in range(200):
            genome = factory.mutate(genome)
            assert genome.node_count >= 1
            genome.validate()
        assert genome.node_count == 1

    def test_structural_edits_preserve_integrity(self, seed_primitives):
        factory = make_factory(
            seed=11,
            mutation={"structural_rate": 1.0, "parametric_rate": 1.0},
            constraints={"max_nodes": 6},
        )
        genome = factory.create_random_genome(seed_primitives)
        for _ in range(300):
            genome = factory.mutate(genome)
            genome.validate()
            assert genome.node_count <= max(6, 10)
            for edge in genome.structure.edges:
                assert 0.0 <= edge.weight <= 1.0
                assert edge.source != edge.target
            for pattern in genome.structure.patterns:
                assert pattern.recursion_depth >= 1
                assert 0.0 <= pattern.applicability <= 1.0
                assert 1 <= len(pattern.nodes) <= 3

    def test_node_removal_prunes_references(self, seed_primitives):
        factory = make_factory(mutation={"structural_rate": 0.0, "parametric_rate": 0.0})
        genome = factory.create_random_genome(seed_primitives)
        first, second = genome.structure.nodes[0], genome.structure.nodes[1]
        genome.structure.edges.append(GenomeEdge("e_x", first.id, second.id, 0.5, "causal"))
        first.connections.append(second.id)
        genome.structure.patterns.append(GenomePattern("p_x", "recursive", [second.id]))

        factory.params.constraints.max_nodes = 1
        while genome.node_count > 1:
            factory._mutate_nodes(genome)

        genome.validate()
        remaining = genome.structure.node_ids()
        assert genome.edge_count == 0
        assert genome.structure.nodes[0].connections == []
        if second.id not in remaining:
            assert genome.pattern_count == 0
        for pattern in genome.structure.patterns:
            assert pattern.nodes and set(pattern.nodes) <= remaining

    def test_parametric_noise_uses_strength(self, seed_primitives):
        factory = make_factory(mutation={"structural_rate": 0.0, "parametric_rate": 1.0})
        parent = factory.create_random_genome(seed_primitives)

        factory.mutation_strength = 0.0
        unchanged = factory.mutate(parent)
        assert (unchanged.parameters.efficiency == parent.parameters.efficiency).all()

        factory.mutation_strength = 0.5
        changed = factory.mutate(parent)
        assert not (changed.parameters.efficiency == parent.parameters.efficiency).all()


class TestOffspring:
    def test_generates_exact_count(self, factory, seed_primitives):
        parents = [factory.create_random_genome(seed_primitives) for _ in range(5)]
        offspring = factory.generate_offspring(parents, generation=1)
        assert len(offspring) == factory.params.population.size
        assert len({child.id for child in offspring}) == len(offspring)
        for child in offspring:
            assert child.generation == 1
            child.validate()

    def test_single_parent_only_mutates(self, factory, seed_primitives):
        parent = factory.create_random_genome(seed_primitives)
        offspring = factory.generate_offspring([parent], generation=1)
        assert all(child.lineage == (parent.id,) for child in offspring)

    def test_same_parent_twice_is_mutated(self, seed_primitives):
        factory = make_factory(crossover={"rate": 1.0}, population={"size": 6})
        parent = factory.create_random_genome(seed_primitives)
        offspring = factory.generate_offspring([parent, parent], generation=1)
        assert len(offspring) == 6
        assert all(child.lineage == (parent.id,) for child in offspring)

    def test_empty_parents_raise(self, factory):
        with pytest.raises(EvolutionError):
            factory.generate_offspring([], generation=1)

    def test_mutation_success_rate(self, seed_primitives):
        factory = make_factory(crossover={"rate": 0.0}, population={"size": 4})
        parent = factory.create_random_genome(seed_primitives)
        parent.fitness = 0.5
        offspring = factory.generate_offspring([parent], generation=1)
        for child, fitness in zip(offspring, (0.9, 0.1, 0.7, 0.2)):
            child.fitness = fitness
        assert factory.mutation_success_rate(offspring) == pytest.approx(0.5)
        assert factory.mutation_success_rate([]) == 0.0
