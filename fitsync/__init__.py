"""Client-side domain-state synchronization for the fitness app."""

__version__ = "0.1.0"
