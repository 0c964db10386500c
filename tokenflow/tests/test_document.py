"""
Tests for the model interchange document.

Critical: Import must either yield a complete net or raise; an exported
net must import back unchanged.
"""

import json
import os
import tempfile

import pytest

from tokenflow.core.errors import ModelStructureError
from tokenflow.model.document import (
    dumps_model,
    loads_model,
    net_from_document,
    read_model_file,
    write_model_file,
)
from tokenflow.model.sample import sample_net


def test_export_import_preserves_net():
    net = sample_net()
    again = loads_model(dumps_model(net))
    assert again.to_dict() == net.to_dict()


def test_export_is_deterministic():
    assert dumps_model(sample_net()) == dumps_model(sample_net())


def test_export_uses_interchange_keys():
    doc = json.loads(dumps_model(sample_net()))
    assert set(doc) == {"places", "transitions", "arcs"}
    assert doc["places"][0] == {"id": "p1", "label": "Start", "x": 50, "y": 250, "initialTokens": 1}
    assert doc["arcs"][0] == {"id": "a1", "sourceId": "p1", "targetId": "t1"}


def test_missing_section_rejected():
    with pytest.raises(ModelStructureError, match="arcs"):
        net_from_document({"places": [], "transitions": []})


def test_non_object_rejected():
    with pytest.raises(ModelStructureError):
        net_from_document([1, 2, 3])
    with pytest.raises(ModelStructureError):
        loads_model("not json")


def test_bad_entries_rejected():
    base = {"transitions": [], "arcs": []}
    with pytest.raises(ModelStructureError, match="initialTokens"):
        net_from_document({**base, "places": [{"id": "p1", "label": "A", "initialTokens": -1}]})
    with pytest.raises(ModelStructureError, match="id"):
        net_from_document({**base, "places": [{"label": "A"}]})
    with pytest.raises(ModelStructureError, match="x"):
        net_from_document({**base, "places": [{"id": "p1", "x": "left"}]})
    with pytest.raises(ModelStructureError, match="sourceId"):
        net_from_document({"places": [], "transitions": [], "arcs": [{"id": "a1", "targetId": "t1"}]})


def test_optional_fields_default():
    net = net_from_document({"places": [{"id": "p1"}], "transitions": [{"id": "t1"}], "arcs": []})
    assert net.places[0].initial_tokens == 0
    assert (net.places[0].x, net.places[0].y) == (0, 0)
    assert net.transitions[0].label == ""


def test_model_file_roundtrip():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "net.json")
        write_model_file(path, sample_net())
        assert read_model_file(path).to_dict() == sample_net().to_dict()


def test_model_file_invalid_utf8():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "net.json")
        with open(path, "wb") as f:
            f.write(b'{"places": [{"id": "p\xff"}]}')
        with pytest.raises(ModelStructureError, match="UTF-8"):
            read_model_file(path)
