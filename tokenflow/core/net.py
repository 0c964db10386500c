"""
Place/Transition net model.

The net is a bipartite graph: arcs always join one place and one transition.
Positions are cosmetic and never read by the replay engine.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class Place:
    """
    Place holding tokens.

    Fields:
        id: Identifier, unique across places and transitions
        label: Display label ("Start" marks the start place)
        x, y: Position on the canvas
        initial_tokens: Token count the model defines for this place
    """
    id: str
    label: str
    x: float = 0.0
    y: float = 0.0
    initial_tokens: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "x": self.x,
            "y": self.y,
            "initialTokens": self.initial_tokens,
        }


@dataclass
class Transition:
    """Transition matched against trace activities by its label."""
    id: str
    label: str
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, "x": self.x, "y": self.y}


@dataclass
class Arc:
    """Unit-weight arc (place -> transition or transition -> place)."""
    id: str
    source_id: str
    target_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "sourceId": self.source_id, "targetId": self.target_id}


Node = Union[Place, Transition]


@dataclass
class PetriNet:
    """
    Ordered collection of places, transitions and arcs.

    Mutated in place by GraphEditModel; every mutation must be followed by
    an IOIndex rebuild.
    """
    places: List[Place] = field(default_factory=list)
    transitions: List[Transition] = field(default_factory=list)
    arcs: List[Arc] = field(default_factory=list)

    def place_by_id(self, pid: str) -> Optional[Place]:
        for p in self.places:
            if p.id == pid:
                return p
        return None

    def transition_by_id(self, tid: str) -> Optional[Transition]:
        for t in self.transitions:
            if t.id == tid:
                return t
        return None

    def node_by_id(self, node_id: str) -> Optional[Node]:
        return self.place_by_id(node_id) or self.transition_by_id(node_id)

    def arc_by_id(self, arc_id: str) -> Optional[Arc]:
        for a in self.arcs:
            if a.id == arc_id:
                return a
        return None

    def arcs_touching(self, node_id: str) -> List[Arc]:
        return [a for a in self.arcs if a.source_id == node_id or a.target_id == node_id]

    def all_ids(self) -> List[str]:
        return (
            [p.id for p in self.places]
            + [t.id for t in self.transitions]
            + [a.id for a in self.arcs]
        )

    def copy(self) -> "PetriNet":
        return PetriNet(
            places=[Place(**vars(p)) for p in self.places],
            transitions=[Transition(**vars(t)) for t in self.transitions],
            arcs=[Arc(**vars(a)) for a in self.arcs],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "places": [p.to_dict() for p in self.places],
            "transitions": [t.to_dict() for t in self.transitions],
            "arcs": [a.to_dict() for a in self.arcs],
        }
