"""
Model interchange document.

A document is a JSON object with three lists: "places", "transitions" and
"arcs". Import either produces a complete PetriNet or raises; it never
returns a partially read net.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from ..core.canonical import canonical_json_str
from ..core.errors import ModelStructureError
from ..core.net import Arc, PetriNet, Place, Transition

logger = logging.getLogger(__name__)

SECTIONS = ("places", "transitions", "arcs")


def _require_str(entry: Dict[str, Any], key: str, where: str) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value:
        raise ModelStructureError(f"{where}: '{key}' must be a non-empty string")
    return value


def _number(entry: Dict[str, Any], key: str, where: str) -> float:
    value = entry.get(key, 0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ModelStructureError(f"{where}: '{key}' must be a number")
    return value


def _entries(doc: Dict[str, Any], section: str) -> List[Dict[str, Any]]:
    items = doc[section]
    for i, entry in enumerate(items):
        if not isinstance(entry, dict):
            raise ModelStructureError(f"{section}[{i}]: expected an object")
    return items


def net_from_document(doc: Any) -> PetriNet:
    """
    Build a PetriNet from a decoded interchange document.

    Raises:
        ModelStructureError: If the document is not an object, one of the
            three sections is not a list, or an entry lacks a required field
    """
    if not isinstance(doc, dict):
        raise ModelStructureError("The model document must be a JSON object")
    for section in SECTIONS:
        if not isinstance(doc.get(section), list):
            raise ModelStructureError(
                f"The model document does not have the structure of a Petri net: '{section}' must be a list"
            )

    places = []
    for i, entry in enumerate(_entries(doc, "places")):
        where = f"places[{i}]"
        tokens = entry.get("initialTokens", 0)
        if isinstance(tokens, bool) or not isinstance(tokens, int) or tokens < 0:
            raise ModelStructureError(f"{where}: 'initialTokens' must be a nonnegative integer")
        places.append(
            Place(
                id=_require_str(entry, "id", where),
                label=str(entry.get("label", "")),
                x=_number(entry, "x", where),
                y=_number(entry, "y", where),
                initial_tokens=tokens,
            )
        )

    transitions = []
    for i, entry in enumerate(_entries(doc, "transitions")):
        where = f"transitions[{i}]"
        transitions.append(
            Transition(
                id=_require_str(entry, "id", where),
                label=str(entry.get("label", "")),
                x=_number(entry, "x", where),
                y=_number(entry, "y", where),
            )
        )

    arcs = []
    for i, entry in enumerate(_entries(doc, "arcs")):
        where = f"arcs[{i}]"
        arcs.append(
            Arc(
                id=_require_str(entry, "id", where),
                source_id=_require_str(entry, "sourceId", where),
                target_id=_require_str(entry, "targetId", where),
            )
        )

    return PetriNet(places=places, transitions=transitions, arcs=arcs)


def net_to_document(net: PetriNet) -> Dict[str, Any]:
    return net.to_dict()


def loads_model(text: str) -> PetriNet:
    """
    Decode a JSON model document.

    Raises:
        ModelStructureError: If the text is not JSON or not a net document
    """
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise ModelStructureError(f"The model file is not valid JSON ({e.msg})") from e
    return net_from_document(doc)


def dumps_model(net: PetriNet) -> str:
    """Serialize a net as an indented, deterministic JSON document."""
    return canonical_json_str(net_to_document(net), indent=2)


def read_model_file(path: Union[str, Path]) -> PetriNet:
    try:
        text = Path(path).read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise ModelStructureError(f"The model file is not valid UTF-8 text: {path}") from e
    net = loads_model(text)
    logger.info("Read model %s: %d places, %d transitions, %d arcs",
                path, len(net.places), len(net.transitions), len(net.arcs))
    return net


def write_model_file(path: Union[str, Path], net: PetriNet) -> None:
    Path(path).write_text(dumps_model(net) + "\n", encoding="utf-8")
