"""
Net model documents and editing.

This module provides:
- Interchange document import/export (JSON)
- The default sample net
- GraphEditModel: total, validated structural edits
"""

from .document import (
    dumps_model,
    loads_model,
    net_from_document,
    net_to_document,
    read_model_file,
    write_model_file,
)
from .sample import sample_net
from .edit import GraphEditModel

__all__ = [
    "dumps_model",
    "loads_model",
    "net_from_document",
    "net_to_document",
    "read_model_file",
    "write_model_file",
    "sample_net",
    "GraphEditModel",
]
