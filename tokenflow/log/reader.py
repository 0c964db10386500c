"""
Reading trace logs from disk.
"""

from pathlib import Path
from typing import List, Union

from ..core.errors import EmptyTraceError, FileFormatError
from ..core.events import TraceEvent
from .parser import parse_trace


def read_trace_text(path: Union[str, Path]) -> str:
    """
    Read the raw text of a trace log (UTF-8, BOM tolerated).

    Raises:
        FileNotFoundError: If the file does not exist
        FileFormatError: If the file is not valid UTF-8 text
    """
    try:
        return Path(path).read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise FileFormatError(
            f"Trace file is not valid UTF-8 text: {path} (byte {e.start})"
        ) from e


def read_trace_file(path: Union[str, Path]) -> List[TraceEvent]:
    """
    Read and parse a CSV or JSONL trace log.

    The whole file is parsed before anything is returned, so callers never
    see a partial trace.

    Raises:
        FileNotFoundError: If the file does not exist
        EmptyTraceError: If the file has no non-blank line
        FileFormatError: If the file is not UTF-8 or the content is malformed
    """
    events = parse_trace(read_trace_text(path))
    if not events:
        raise EmptyTraceError(f"Trace file is empty: {path}")
    return events
