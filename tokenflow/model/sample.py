"""
Sample net loaded when no model is supplied.

Start -> Split -> (A -> Action 1 -> C, B -> Action 2 -> D) -> Join -> End
"""

from ..core.net import Arc, PetriNet, Place, Transition


def sample_net() -> PetriNet:
    """Return a fresh copy of the sample split/join net."""
    return PetriNet(
        places=[
            Place("p1", "Start", 50, 250, initial_tokens=1),
            Place("p2", "A", 250, 150),
            Place("p3", "B", 250, 350),
            Place("p4", "C", 450, 150),
            Place("p5", "D", 450, 350),
            Place("p6", "End", 650, 250),
        ],
        transitions=[
            Transition("t1", "Split", 150, 250),
            Transition("t2", "Action 1", 350, 150),
            Transition("t3", "Action 2", 350, 350),
            Transition("t4", "Join", 550, 250),
        ],
        arcs=[
            Arc("a1", "p1", "t1"),
            Arc("a2", "t1", "p2"),
            Arc("a3", "t1", "p3"),
            Arc("a4", "p2", "t2"),
            Arc("a5", "t2", "p4"),
            Arc("a6", "p3", "t3"),
            Arc("a7", "t3", "p5"),
            Arc("a8", "p4", "t4"),
            Arc("a9", "p5", "t4"),
            Arc("a10", "t4", "p6"),
        ],
    )
