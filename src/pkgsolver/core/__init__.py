"""Core engine: version model, package identity and dependency resolution."""
