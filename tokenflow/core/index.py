"""
IOIndex: derived input/output indexing of a net.

Built in one pass over the arcs. Rebuilding is explicit; callers invoke
IOIndex.build() after every structural mutation of the net.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .errors import ArcEndpointError, IntegrityError
from .net import PetriNet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionIO:
    """
    Input/output places of one transition.

    Parallel arcs appear once per arc in the id and slot tuples.

    Fields:
        id: Transition identifier
        label: Transition label
        input_place_ids: Sources of arcs entering the transition, in arc order
        output_place_ids: Targets of arcs leaving the transition, in arc order
        input_slots: Token table slots of input_place_ids
        output_slots: Token table slots of output_place_ids
    """
    id: str
    label: str
    input_place_ids: Tuple[str, ...] = ()
    output_place_ids: Tuple[str, ...] = ()
    input_slots: Tuple[int, ...] = ()
    output_slots: Tuple[int, ...] = ()


@dataclass(frozen=True)
class IOIndex:
    """
    Immutable index over a net.

    Fields:
        place_slots: place id -> stable integer slot (declaration order)
        transitions: transition id -> TransitionIO
        label_to_id: transition label -> transition id (last one wins)
    """
    place_slots: Dict[str, int] = field(default_factory=dict)
    transitions: Dict[str, TransitionIO] = field(default_factory=dict)
    label_to_id: Dict[str, str] = field(default_factory=dict)

    @staticmethod
    def build(net: PetriNet) -> "IOIndex":
        """
        Build the index for a net.

        Raises:
            IntegrityError: Duplicate ids, an id shared by two kinds of element,
                or an arc endpoint missing from the net
            ArcEndpointError: An arc joins two nodes of the same kind
        """
        place_slots: Dict[str, int] = {}
        for p in net.places:
            if p.id in place_slots:
                raise IntegrityError(f"Duplicate place id: {p.id}")
            place_slots[p.id] = len(place_slots)

        labels: Dict[str, str] = {}
        label_to_id: Dict[str, str] = {}
        inputs: Dict[str, List[str]] = {}
        outputs: Dict[str, List[str]] = {}
        for t in net.transitions:
            if t.id in place_slots:
                raise IntegrityError(f"Id {t.id} is used by both a place and a transition")
            if t.id in labels:
                raise IntegrityError(f"Duplicate transition id: {t.id}")
            labels[t.id] = t.label
            label_to_id[t.label] = t.id
            inputs[t.id] = []
            outputs[t.id] = []

        arc_ids = set()
        for arc in net.arcs:
            if arc.id in arc_ids:
                raise IntegrityError(f"Duplicate arc id: {arc.id}")
            if arc.id in place_slots or arc.id in labels:
                raise IntegrityError(f"Id {arc.id} is used by both an arc and a node")
            arc_ids.add(arc.id)
            src, dst = arc.source_id, arc.target_id
            for end in (src, dst):
                if end not in place_slots and end not in labels:
                    raise IntegrityError(f"Arc {arc.id} references unknown node {end}")
            if src in place_slots and dst in labels:
                inputs[dst].append(src)
            elif src in labels and dst in place_slots:
                outputs[src].append(dst)
            else:
                raise ArcEndpointError(
                    f"Arc {arc.id} must connect a place and a transition ({src} -> {dst})"
                )

        transitions = {
            tid: TransitionIO(
                id=tid,
                label=label,
                input_place_ids=tuple(inputs[tid]),
                output_place_ids=tuple(outputs[tid]),
                input_slots=tuple(place_slots[p] for p in inputs[tid]),
                output_slots=tuple(place_slots[p] for p in outputs[tid]),
            )
            for tid, label in labels.items()
        }

        if len(label_to_id) < len(labels):
            logger.warning(
                "Transition labels are not unique; %d transition(s) shadowed by a later one",
                len(labels) - len(label_to_id),
            )
        logger.debug(
            "IOIndex rebuilt: %d places, %d transitions, %d arcs",
            len(place_slots), len(transitions), len(net.arcs),
        )
        return IOIndex(place_slots=place_slots, transitions=transitions, label_to_id=label_to_id)

    def resolve(self, activity: str) -> Optional[TransitionIO]:
        """Return the transition whose label equals the activity, if any."""
        tid = self.label_to_id.get(activity)
        if tid is None:
            return None
        return self.transitions[tid]
