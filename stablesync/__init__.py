"""StableSync: TJK record synchronization engine."""

__version__ = "0.1.0"
