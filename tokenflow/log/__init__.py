"""
Trace log ingestion.

This module provides:
- parse_trace: CSV / JSONL log text -> timestamp-ordered TraceEvents
- case_ids / filter_trace: per-case partitioning
- read_trace_file: parse a log file from disk
"""

from .parser import FORMAT_CSV, FORMAT_JSONL, detect_format, parse_timestamp, parse_trace
from .cases import case_ids, filter_trace
from .reader import read_trace_file, read_trace_text

__all__ = [
    "FORMAT_CSV",
    "FORMAT_JSONL",
    "detect_format",
    "parse_timestamp",
    "parse_trace",
    "case_ids",
    "filter_trace",
    "read_trace_file",
    "read_trace_text",
]
