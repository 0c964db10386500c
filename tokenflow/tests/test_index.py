"""
Tests for IOIndex derivation.

Critical: Input/output lists must follow arc order and keep parallel arcs.
"""

import pytest

from tokenflow.core.errors import ArcEndpointError, IntegrityError
from tokenflow.core.index import IOIndex
from tokenflow.core.net import Arc, PetriNet, Place, Transition
from tokenflow.model.sample import sample_net


def test_sample_net_io():
    """Split consumes Start and feeds A and B; Join merges C and D into End."""
    index = IOIndex.build(sample_net())

    split = index.transitions["t1"]
    assert split.input_place_ids == ("p1",)
    assert split.output_place_ids == ("p2", "p3")

    join = index.transitions["t4"]
    assert join.input_place_ids == ("p4", "p5")
    assert join.output_place_ids == ("p6",)


def test_place_slots_follow_declaration_order():
    index = IOIndex.build(sample_net())
    assert index.place_slots == {"p1": 0, "p2": 1, "p3": 2, "p4": 3, "p5": 4, "p6": 5}
    assert index.transitions["t4"].input_slots == (3, 4)


def test_parallel_arcs_listed_per_arc():
    """Two arcs p1 -> t1 must put p1 twice in the input list."""
    net = PetriNet(
        places=[Place("p1", "P1", initial_tokens=2), Place("p2", "P2")],
        transitions=[Transition("t1", "T1")],
        arcs=[Arc("a1", "p1", "t1"), Arc("a2", "p1", "t1"), Arc("a3", "t1", "p2")],
    )
    index = IOIndex.build(net)
    assert index.transitions["t1"].input_place_ids == ("p1", "p1")
    assert index.transitions["t1"].input_slots == (0, 0)


def test_label_map_last_transition_wins():
    """Duplicate labels resolve to the last transition declared."""
    net = PetriNet(
        places=[Place("p1", "P1")],
        transitions=[Transition("t1", "Review"), Transition("t2", "Review")],
        arcs=[],
    )
    index = IOIndex.build(net)
    assert index.label_to_id["Review"] == "t2"
    assert index.resolve("Review").id == "t2"


def test_resolve_unknown_label():
    index = IOIndex.build(sample_net())
    assert index.resolve("Nope") is None
    assert index.resolve("Split").id == "t1"


def test_transition_without_arcs_has_empty_io():
    net = PetriNet(places=[], transitions=[Transition("t1", "Lonely")], arcs=[])
    io = IOIndex.build(net).transitions["t1"]
    assert io.input_place_ids == ()
    assert io.output_place_ids == ()


def test_dangling_arc_is_integrity_error():
    """An arc pointing at a missing place is caught at build time."""
    net = sample_net()
    net.arcs.append(Arc("a99", "p42", "t1"))
    with pytest.raises(IntegrityError):
        IOIndex.build(net)


def test_same_kind_arc_rejected():
    net = sample_net()
    net.arcs.append(Arc("a99", "p1", "p2"))
    with pytest.raises(ArcEndpointError):
        IOIndex.build(net)


def test_place_transition_id_collision_rejected():
    net = PetriNet(places=[Place("x", "P")], transitions=[Transition("x", "T")], arcs=[])
    with pytest.raises(IntegrityError):
        IOIndex.build(net)


def test_duplicate_place_id_rejected():
    net = PetriNet(places=[Place("p1", "A"), Place("p1", "B")], transitions=[], arcs=[])
    with pytest.raises(IntegrityError):
        IOIndex.build(net)


def test_duplicate_arc_id_rejected():
    """Two parallel arcs sharing an id could not be deleted one at a time."""
    net = PetriNet(
        places=[Place("p1", "A")],
        transitions=[Transition("t1", "T")],
        arcs=[Arc("a1", "p1", "t1"), Arc("a1", "p1", "t1")],
    )
    with pytest.raises(IntegrityError, match="a1"):
        IOIndex.build(net)


def test_arc_node_id_collision_rejected():
    net = PetriNet(
        places=[Place("p1", "A")],
        transitions=[Transition("t1", "T")],
        arcs=[Arc("p1", "p1", "t1")],
    )
    with pytest.raises(IntegrityError):
        IOIndex.build(net)
