"""
Trace log parsing.

Two input formats are accepted:
- JSONL: one object per line (a trailing comma is tolerated)
- CSV: header row plus data rows

Detection looks at the first non-blank line: "{" means JSONL.
Events come back ordered by timestamp with steps assigned after sorting.
"""

import csv
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..core.errors import FileFormatError
from ..core.events import TraceEvent
from .. import metrics

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("activity", "timestamp")

FORMAT_JSONL = "jsonl"
FORMAT_CSV = "csv"

_FALLBACK_FORMATS = (
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
)


def _lines(content: str) -> List[str]:
    return [line.strip() for line in content.splitlines() if line.strip()]


def detect_format(content: str) -> Optional[str]:
    """Return FORMAT_JSONL, FORMAT_CSV, or None for blank content."""
    lines = _lines(content)
    if not lines:
        return None
    return FORMAT_JSONL if lines[0].startswith("{") else FORMAT_CSV


def parse_timestamp(text: str) -> Optional[datetime]:
    """
    Parse a calendar date-time.

    Accepts ISO-8601 (with "Z" or an offset) and a few common
    "YYYY-MM-DD HH:MM" / "YYYY/MM/DD" forms. Naive values are read as UTC.

    Returns:
        Aware datetime, or None if the text is not a date-time
    """
    s = text.strip()
    if not s:
        return None
    if s.endswith("Z") or s.endswith("z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        for fmt in _FALLBACK_FORMATS:
            try:
                dt = datetime.strptime(s, fmt)
                break
            except ValueError:
                continue
        else:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _stringify(value: Any) -> str:
    """
    Render a JSON value as a field string.

    Scalars print the way a browser prints them (true, null, 2 for 2.0).
    Arrays and objects become compact JSON, so [1, 2] is "[1,2]" rather
    than the comma-joined "1,2".
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def _parse_jsonl(lines: List[str]) -> List[Tuple[str, Dict[str, str]]]:
    rows = []
    for lineno, line in enumerate(lines, start=1):
        clean = line[:-1] if line.endswith(",") else line
        try:
            record = json.loads(clean)
        except json.JSONDecodeError as e:
            raise FileFormatError(f"Line {lineno}: malformed JSON record ({e.msg})") from e
        if not isinstance(record, dict):
            raise FileFormatError(f"Line {lineno}: expected a JSON object")
        for key in REQUIRED_FIELDS:
            value = record.get(key)
            if not isinstance(value, str) or not value:
                raise FileFormatError(f"Line {lineno}: each JSON object must have a string '{key}' key")
        data = {str(k): _stringify(v) for k, v in record.items()}
        rows.append((record["activity"].strip(), data))
    return rows


def _parse_csv(lines: List[str]) -> List[Tuple[str, Dict[str, str]]]:
    if len(lines) < 2:
        raise FileFormatError("A CSV file must have a header row and at least one data row")

    reader = csv.reader(lines)
    headers = [h.strip() for h in next(reader)]
    for key in REQUIRED_FIELDS:
        if key not in headers:
            raise FileFormatError(f"The CSV header must contain the '{key}' column")

    rows = []
    for values in reader:
        values = [v.strip() for v in values]
        data = {h: (values[i] if i < len(values) else "") for i, h in enumerate(headers)}
        rows.append((data["activity"], data))
    return rows


def _sort_keys(rows: List[Tuple[str, Dict[str, str]]]) -> List[datetime]:
    """
    One sort key per row.

    An unparsable timestamp takes the key of the closest preceding parsable
    row (datetime.min when there is none) so a stable sort keeps it right
    behind that row.
    """
    floor = datetime.min.replace(tzinfo=timezone.utc)
    keys = []
    previous = floor
    for idx, (_, data) in enumerate(rows):
        parsed = parse_timestamp(data.get("timestamp", ""))
        if parsed is None:
            logger.warning(
                "Invalid timestamp %r on event %d; keeping its position relative to the previous event",
                data.get("timestamp", ""), idx,
            )
            keys.append(previous)
        else:
            keys.append(parsed)
            previous = parsed
    return keys


def parse_trace(content: str) -> List[TraceEvent]:
    """
    Parse raw log text into an ordered trace.

    Args:
        content: Whole text of a CSV or JSONL log

    Returns:
        Events sorted by timestamp (stable on ties), steps numbered from 0.
        Empty list when the content has no non-blank line.

    Raises:
        FileFormatError: Missing column/key, malformed record, or a CSV
            without data rows
    """
    lines = _lines(content)
    if not lines:
        return []

    fmt = FORMAT_JSONL if lines[0].startswith("{") else FORMAT_CSV
    with metrics.track_parse_duration():
        rows = _parse_jsonl(lines) if fmt == FORMAT_JSONL else _parse_csv(lines)
        keys = _sort_keys(rows)
        order = sorted(range(len(rows)), key=keys.__getitem__)

    events = [
        TraceEvent(step=step, activity=rows[idx][0], data=rows[idx][1])
        for step, idx in enumerate(order)
    ]
    metrics.track_parsed(fmt, len(events))
    logger.info("Parsed %d trace events (%s)", len(events), fmt)
    return events
