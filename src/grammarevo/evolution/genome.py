"""
Genome model for evolved grammar rules.

A genome is a small graph: nodes typed by grammar primitives, weighted edges
between them, and patterns that group nodes into reusable motifs. All
cross references are node ids into ``GenomeStructure.nodes``.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

import numpy as np

from grammarevo.constants import PARAMETER_SHAPES
from grammarevo.evolution.tensor import add_tensors, clone_tensor, scale_tensor
from grammarevo.utils.errors import StructuralIntegrityError


class PrimitiveType(str, Enum):
    """Kinds of agentic grammar primitives."""
    ACTION = "action"
    PERCEPT = "percept"
    MEMORY = "memory"
    DECISION = "decision"
    PLANNING = "planning"
    COMMUNICATION = "communication"
    ADAPTATION = "adaptation"
    ATTENTION = "attention"
    GOAL = "goal"
    CONSTRAINT = "constraint"


@dataclass(frozen=True)
class GrammarPrimitive:
    """A seed building block of the grammar."""
    id: str
    type: PrimitiveType
    name: str
    complexity: float = 0.5
    dependencies: Tuple[str, ...] = ()


@dataclass(eq=False)
class GenomeNode:
    """A typed node with an activation vector."""
    id: str
    type: PrimitiveType
    activation: np.ndarray
    complexity: float
    connections: List[str] = field(default_factory=list)

    def copy(self) -> 'GenomeNode':
        return GenomeNode(
            id=self.id,
            type=self.type,
            activation=clone_tensor(self.activation),
            complexity=self.complexity,
            connections=list(self.connections),
        )


@dataclass
class GenomeEdge:
    """A weighted, typed edge between two nodes."""
    id: str
    source: str
    target: str
    weight: float
    type: str


@dataclass
class GenomePattern:
    """A named motif over a set of nodes."""
    id: str
    name: str
    nodes: List[str]
    recursion_depth: int = 1
    applicability: float = 0.5


@dataclass(eq=False)
class GenomeStructure:
    """Arena of nodes, edges and patterns keyed by id."""
    nodes: List[GenomeNode] = field(default_factory=list)
    edges: List[GenomeEdge] = field(default_factory=list)
    patterns: List[GenomePattern] = field(default_factory=list)

    def node_ids(self) -> Set[str]:
        return {node.id for node in self.nodes}

    def copy(self) -> 'GenomeStructure':
        """Deep copy of the structure."""
        return GenomeStructure(
            nodes=[node.copy() for node in self.nodes],
            edges=[replace(edge) for edge in self.edges],
            patterns=[replace(pattern, nodes=list(pattern.nodes)) for pattern in self.patterns],
        )


@dataclass(eq=False)
class GenomeParameters:
    """Continuous parameter vectors of a genome."""
    complexity: np.ndarray
    expressiveness: np.ndarray
    efficiency: np.ndarray
    adaptability: np.ndarray

    def as_dict(self) -> Dict[str, np.ndarray]:
        return {name: getattr(self, name) for name in PARAMETER_SHAPES}

    def copy(self) -> 'GenomeParameters':
        return GenomeParameters(**{
            name: clone_tensor(value) for name, value in self.as_dict().items()
        })

    def blend(self, other: 'GenomeParameters', alpha: float) -> 'GenomeParameters':
        """Return ``alpha * self + (1 - alpha) * other`` per vector."""
        return GenomeParameters(**{
            name: add_tensors(
                scale_tensor(getattr(self, name), alpha),
                scale_tensor(getattr(other, name), 1.0 - alpha),
            )
            for name in PARAMETER_SHAPES
        })


@dataclass(eq=False)
class GrammarGenome:
    """
    An individual in the grammar population.

    ``fitness`` stays 0.0 until the genome is evaluated and becomes ``-inf``
    when the evaluator fails for it.
    """
    id: str
    primitives: Tuple[GrammarPrimitive, ...]
    structure: GenomeStructure
    parameters: GenomeParameters
    fitness: float = 0.0
    metrics: Dict[str, float] = field(default_factory=dict)
    generation: int = 0
    lineage: Tuple[str, ...] = ()

    @property
    def node_count(self) -> int:
        return len(self.structure.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.structure.edges)

    @property
    def pattern_count(self) -> int:
        return len(self.structure.patterns)

    def validate(self) -> None:
        """Check structural integrity, raising on any dangling reference."""
        validate_structure(self.structure, self.id)

    def copy(self) -> 'GrammarGenome':
        """Deep copy, keeping id and fitness."""
        return GrammarGenome(
            id=self.id,
            primitives=self.primitives,
            structure=self.structure.copy(),
            parameters=self.parameters.copy(),
            fitness=self.fitness,
            metrics=dict(self.metrics),
            generation=self.generation,
            lineage=self.lineage,
        )


def edges_reference(edges: List[GenomeEdge], node_ids: Set[str]) -> bool:
    """Check whether every edge endpoint is in ``node_ids``."""
    return all(edge.source in node_ids and edge.target in node_ids for edge in edges)


def patterns_reference(patterns: List[GenomePattern], node_ids: Set[str]) -> bool:
    """Check whether every pattern member is in ``node_ids``."""
    return all(node_id in node_ids for pattern in patterns for node_id in pattern.nodes)


def validate_structure(structure: GenomeStructure, genome_id: Optional[str] = None) -> None:
    """
    Validate the referential integrity of a genome structure.

    Args:
        structure: Structure to validate
        genome_id: Owning genome id, included in the error details

    Raises:
        StructuralIntegrityError: If an id is duplicated, a reference dangles,
            or an edge weight, recursion depth or applicability is out of range
    """
    node_ids = structure.node_ids()
    if len(node_ids) != len(structure.nodes):
        raise StructuralIntegrityError("Duplicate node ids", genome_id)

    for node in structure.nodes:
        missing = [target for target in node.connections if target not in node_ids]
        if missing:
            raise StructuralIntegrityError(
                f"Node {node.id} connects to unknown nodes",
                genome_id,
                {"node_id": node.id, "missing": missing},
            )

    for edge in structure.edges:
        if edge.source not in node_ids or edge.target not in node_ids:
            raise StructuralIntegrityError(
                f"Edge {edge.id} references an unknown node",
                genome_id,
                {"edge_id": edge.id, "source": edge.source, "target": edge.target},
            )
        if not 0.0 <= edge.weight <= 1.0:
            raise StructuralIntegrityError(
                f"Edge {edge.id} weight out of range",
                genome_id,
                {"edge_id": edge.id, "weight": edge.weight},
            )

    for pattern in structure.patterns:
        missing = [node_id for node_id in pattern.nodes if node_id not in node_ids]
        if missing:
            raise StructuralIntegrityError(
                f"Pattern {pattern.id} references unknown nodes",
                genome_id,
                {"pattern_id": pattern.id, "missing": missing},
            )
        if pattern.recursion_depth < 1:
            raise StructuralIntegrityError(
                f"Pattern {pattern.id} has recursion depth below 1",
                genome_id,
                {"pattern_id": pattern.id, "recursion_depth": pattern.recursion_depth},
            )
        if not 0.0 <= pattern.applicability <= 1.0:
            raise StructuralIntegrityError(
                f"Pattern {pattern.id} applicability out of range",
                genome_id,
                {"pattern_id": pattern.id, "applicability": pattern.applicability},
            )
