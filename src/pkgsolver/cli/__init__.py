"""pkgsolver command-line interface."""
