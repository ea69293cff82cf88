"""Team-parallel utilities: workspaces, team policies, reductions, array views and small helpers."""

__version__ = "0.1.0"

__all__ = [
    "anyvalue",
    "containers",
    "hello",
    "reduction",
    "team",
    "views",
    "workspace",
]