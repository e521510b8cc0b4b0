"""Task assignment recommendation package."""

__all__ = [
    "main",
    "access",
    "config",
    "models",
    "notifications",
    "db",
    "planner",
    "recommender",
    "scorer",
    "ranker",
    "seed",
    "utils",
]
