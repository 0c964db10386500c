"""
Command groups of the tokenflow CLI.
"""
