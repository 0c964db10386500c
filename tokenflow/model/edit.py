"""
GraphEditModel: structural edits of a net.

Every operation validates first and mutates second, so an edit is either
fully applied or rejected with the net left untouched. The caller rebuilds
the IOIndex (and reinitializes tokens) after each successful edit.
"""

import logging
from typing import List, Optional, Tuple

from ..core.errors import ArcEndpointError, NodeNotFoundError
from ..core.ids import next_id
from ..core.net import Arc, Node, PetriNet, Place, Transition

logger = logging.getLogger(__name__)

Position = Tuple[float, float]


class GraphEditModel:
    """
    Edit operations over a PetriNet owned by the caller.

    Usage:
        editor = GraphEditModel(net)
        p = editor.add_place(position=(10, 20))
        t = editor.add_transition(label="Approve")
        editor.add_arc(p.id, t.id)
    """

    def __init__(self, net: PetriNet) -> None:
        self.net = net

    def _require_node(self, node_id: str) -> Node:
        node = self.net.node_by_id(node_id)
        if node is None:
            raise NodeNotFoundError(f"No place or transition with id {node_id}")
        return node

    def add_place(
        self,
        label: Optional[str] = None,
        position: Position = (0.0, 0.0),
        initial_tokens: int = 0,
    ) -> Place:
        """Add a place with a fresh id; label defaults to "Place <n>"."""
        _check_tokens(initial_tokens)
        count = len(self.net.places)
        place = Place(
            id=next_id("p", count, self.net.all_ids()),
            label=label if label is not None else f"Place {count + 1}",
            x=position[0],
            y=position[1],
            initial_tokens=initial_tokens,
        )
        self.net.places.append(place)
        logger.debug("Added place %s", place.id)
        return place

    def add_transition(self, label: Optional[str] = None, position: Position = (0.0, 0.0)) -> Transition:
        """Add a transition with a fresh id; label defaults to "T<n>"."""
        count = len(self.net.transitions)
        transition = Transition(
            id=next_id("t", count, self.net.all_ids()),
            label=label if label is not None else f"T{count + 1}",
            x=position[0],
            y=position[1],
        )
        self.net.transitions.append(transition)
        logger.debug("Added transition %s", transition.id)
        return transition

    def add_arc(self, source_id: str, target_id: str) -> Arc:
        """
        Add an arc between a place and a transition (either direction).

        Parallel arcs between the same pair are allowed and count separately.

        Raises:
            ArcEndpointError: Self-loop, unknown endpoint, or two nodes of
                the same kind
        """
        if source_id == target_id:
            raise ArcEndpointError(f"An arc cannot connect {source_id} to itself")
        src_is_place = self.net.place_by_id(source_id) is not None
        dst_is_place = self.net.place_by_id(target_id) is not None
        src_known = src_is_place or self.net.transition_by_id(source_id) is not None
        dst_known = dst_is_place or self.net.transition_by_id(target_id) is not None
        if not src_known or not dst_known:
            missing = source_id if not src_known else target_id
            raise ArcEndpointError(f"Arc endpoint {missing} is not a place or transition of the net")
        if src_is_place == dst_is_place:
            raise ArcEndpointError("Arcs must connect a place and a transition")

        arc = Arc(
            id=next_id("a", len(self.net.arcs), self.net.all_ids()),
            source_id=source_id,
            target_id=target_id,
        )
        self.net.arcs.append(arc)
        logger.debug("Added arc %s (%s -> %s)", arc.id, source_id, target_id)
        return arc

    def delete_node(self, node_id: str) -> List[Arc]:
        """
        Delete a place or transition and every arc touching it.

        Returns:
            The arcs removed along with the node
        """
        self._require_node(node_id)
        removed = self.net.arcs_touching(node_id)
        self.net.places = [p for p in self.net.places if p.id != node_id]
        self.net.transitions = [t for t in self.net.transitions if t.id != node_id]
        self.net.arcs = [a for a in self.net.arcs if a.source_id != node_id and a.target_id != node_id]
        logger.debug("Deleted node %s and %d arc(s)", node_id, len(removed))
        return removed

    def delete_arc(self, arc_id: str) -> Arc:
        arc = self.net.arc_by_id(arc_id)
        if arc is None:
            raise NodeNotFoundError(f"No arc with id {arc_id}")
        self.net.arcs = [a for a in self.net.arcs if a.id != arc_id]
        return arc

    def move_node(self, node_id: str, x: float, y: float) -> Node:
        node = self._require_node(node_id)
        node.x = x
        node.y = y
        return node

    def update_node(
        self,
        node_id: str,
        label: Optional[str] = None,
        initial_tokens: Optional[int] = None,
    ) -> Node:
        """
        Replace the label and/or initial token count of a node.

        Raises:
            NodeNotFoundError: Unknown id
            ValueError: initial_tokens given for a transition, or negative
        """
        node = self._require_node(node_id)
        if initial_tokens is not None:
            if not isinstance(node, Place):
                raise ValueError(f"{node_id} is a transition; only places hold tokens")
            _check_tokens(initial_tokens)
        if label is not None:
            node.label = label
        if initial_tokens is not None:
            node.initial_tokens = initial_tokens
        return node


def _check_tokens(value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"initial_tokens must be a nonnegative integer, got {value!r}")
