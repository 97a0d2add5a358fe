"""Pure scorers over a single match analysis (no I/O)."""
