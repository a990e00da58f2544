"""dyncall command-line interface."""
