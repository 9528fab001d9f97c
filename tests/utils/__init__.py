# tests/utils/__init__.py

from .trace import TRACE, make_trace
from .tree import list_tree, make_tree, read_tree

__all__ = [
    "TRACE",
    "list_tree",
    "make_trace",
    "make_tree",
    "read_tree",
]
