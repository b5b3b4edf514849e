"""trendscout — discover, rank and unify trending topics from many providers."""

__version__ = "0.1.0"
