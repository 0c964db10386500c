"""
Tokenflow CLI - Petri net trace replay

Commands:
- tokenflow replay - Replay a trace log against a net
- tokenflow log inspect/cases - Trace log operations
- tokenflow model sample/show - Model document operations
"""

__version__ = "0.1.0"
