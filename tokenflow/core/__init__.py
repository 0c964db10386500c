"""
Core primitives of the token replay engine.

This module provides:
- PetriNet, Place, Transition, Arc: the net model
- IOIndex, TransitionIO: derived input/output indexing
- TraceEvent: immutable trace records
- TokenState, ReplaySnapshot: immutable token table and replay view
- firing: pure enablement / fire / unfire
- Canonical: deterministic JSON
"""

from .net import Arc, Node, PetriNet, Place, Transition
from .index import IOIndex, TransitionIO
from .events import TraceEvent
from .state import ReplaySnapshot, TokenState
from .firing import fire, is_enabled, missing_inputs, unfire
from .canonical import canonical_json_str, canonicalize
from .ids import next_id
from .errors import (
    ArcEndpointError,
    EmptyTraceError,
    FileFormatError,
    IntegrityError,
    ModelStructureError,
    NodeNotFoundError,
    ReplayError,
    TokenflowError,
    TokenUnderflowError,
    TransitionNotEnabledError,
    TransitionNotFoundError,
)

__all__ = [
    "Arc",
    "Node",
    "PetriNet",
    "Place",
    "Transition",
    "IOIndex",
    "TransitionIO",
    "TraceEvent",
    "ReplaySnapshot",
    "TokenState",
    "fire",
    "is_enabled",
    "missing_inputs",
    "unfire",
    "canonical_json_str",
    "canonicalize",
    "next_id",
    "ArcEndpointError",
    "EmptyTraceError",
    "FileFormatError",
    "IntegrityError",
    "ModelStructureError",
    "NodeNotFoundError",
    "ReplayError",
    "TokenflowError",
    "TokenUnderflowError",
    "TransitionNotEnabledError",
    "TransitionNotFoundError",
]
