"""
Token Replay Engine

Replays timestamped activity logs against a Place/Transition net, stepping
tokens forward and backward one trace event at a time.
"""

__version__ = "0.1.0"
