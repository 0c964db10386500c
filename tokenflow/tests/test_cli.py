"""
Tests for the tokenflow command-line interface.

Critical: --json output must stay machine-readable and every failure must
exit with a nonzero code.
"""

import json
import logging
import os
import tempfile

import pytest
from typer.testing import CliRunner

from cli.main import app

runner = CliRunner()

LOG = (
    "activity,timestamp,case_id\n"
    "Split,2024-01-01T09:00:00,c1\n"
    "Action 1,2024-01-01T09:01:00,c1\n"
    "Split,2024-01-01T09:02:00,c2\n"
    "Action 2,2024-01-01T09:03:00,c1\n"
    "Join,2024-01-01T09:04:00,c1\n"
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def trace_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "log.csv")
        with open(path, "w") as f:
            f.write(LOG)
        yield path


def _invoke(*args):
    return runner.invoke(app, ["--log-level", "CRITICAL", *args])


def test_replay_json_single_case(trace_file):
    result = _invoke("replay", "--trace", trace_file, "--case", "c1", "--json")

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["success"] is True
    assert data["case"] == "c1"
    assert data["steps_replayed"] == 4
    assert data["trace_length"] == 4
    assert data["tokens"]["p6"] == 1
    assert data["error"] is None


def test_replay_all_cases_shares_start_place(trace_file):
    """Two cases seed two start tokens; the second Split consumes the other one."""
    result = _invoke("replay", "--trace", trace_file, "--json")

    data = json.loads(result.stdout)
    assert result.exit_code == 0
    assert data["steps_replayed"] == 5
    assert data["tokens"]["p1"] == 0
    assert data["tokens"]["p3"] == 1


def test_replay_until(trace_file):
    result = _invoke("replay", "--trace", trace_file, "--case", "c1", "--until", "1", "--json")

    data = json.loads(result.stdout)
    assert data["steps_replayed"] == 1
    assert data["active_transition"] == "t2"


def test_replay_failure_exit_code():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "bad.csv")
        with open(path, "w") as f:
            f.write("activity,timestamp\nJoin,2024-01-01T09:00:00\n")

        result = _invoke("replay", "--trace", path, "--json")

    assert result.exit_code == 2
    data = json.loads(result.stdout)
    assert data["success"] is False
    assert data["steps_replayed"] == 0
    assert "Join" in data["error"]


def test_replay_unknown_case(trace_file):
    result = _invoke("replay", "--trace", trace_file, "--case", "c9", "--json")
    assert result.exit_code == 2
    assert json.loads(result.stdout)["case_id"] == "c9"


def test_replay_missing_file():
    result = _invoke("replay", "--trace", "/nonexistent/log.csv", "--json")
    assert result.exit_code == 2
    assert "not found" in json.loads(result.stdout)["error"]


def test_replay_with_model_file(trace_file):
    with tempfile.TemporaryDirectory() as tmpdir:
        model_path = os.path.join(tmpdir, "net.json")
        result = _invoke("model", "sample", "--out", model_path)
        assert result.exit_code == 0

        result = _invoke("replay", "--trace", trace_file, "--model", model_path, "--case", "c1", "--json")

    assert result.exit_code == 0
    assert json.loads(result.stdout)["tokens"]["p6"] == 1


def test_replay_table_output(trace_file):
    result = _invoke("replay", "--trace", trace_file, "--case", "c1", "--show-trace")
    assert result.exit_code == 0
    assert "Replayed 4/4 steps" in result.stdout


def test_log_inspect_json(trace_file):
    result = _invoke("log", "inspect", "--trace", trace_file, "--case", "c2", "--json")

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["format"] == "csv"
    assert data["count"] == 1
    assert data["events"][0]["step"] == 2


def test_log_inspect_empty_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "empty.jsonl")
        open(path, "w").close()
        result = _invoke("log", "inspect", "--trace", path, "--json")

    assert result.exit_code == 2
    assert "empty" in json.loads(result.stdout)["error"]


def test_log_cases_json(trace_file):
    result = _invoke("log", "cases", "--trace", trace_file, "--json")

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["count"] == 2
    assert data["cases"] == [{"case_id": "c1", "events": 4}, {"case_id": "c2", "events": 1}]


def test_model_show_json():
    result = _invoke("model", "show", "--json")

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    split = next(t for t in data["transitions"] if t["id"] == "t1")
    assert split["inputPlaceIds"] == ["p1"]
    assert split["outputPlaceIds"] == ["p2", "p3"]
    assert data["arcs"] == 10


def test_model_show_bad_document():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "net.json")
        with open(path, "w") as f:
            f.write('{"places": []}')
        result = _invoke("model", "show", "--model", path, "--json")

    assert result.exit_code == 2
    assert "transitions" in json.loads(result.stdout)["error"]


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.stdout


def _invoke_on_invalid_utf8(*command):
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "bad.csv")
        with open(path, "wb") as f:
            f.write(b"activity,timestamp\nSpl\xffit,2024-01-01T09:00:00\n")
        return _invoke(*command, "--trace", path, "--json")


def test_log_inspect_invalid_utf8():
    """Undecodable trace bytes exit 2 with a JSON error, not a traceback."""
    result = _invoke_on_invalid_utf8("log", "inspect")
    assert result.exit_code == 2
    assert "UTF-8" in json.loads(result.stdout)["error"]


def test_log_cases_invalid_utf8():
    result = _invoke_on_invalid_utf8("log", "cases")
    assert result.exit_code == 2
    assert "UTF-8" in json.loads(result.stdout)["error"]


def test_replay_invalid_utf8():
    result = _invoke_on_invalid_utf8("replay")
    assert result.exit_code == 2
    assert "UTF-8" in json.loads(result.stdout)["error"]
