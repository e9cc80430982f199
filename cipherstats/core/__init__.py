"""Core infrastructure (logging, files, scheduling) for cipherstats."""
