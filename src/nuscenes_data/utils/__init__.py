"""
Utility functions
"""

from .parallel import fork_join, parallel_map
from .timing import time_block

__all__ = [
    "fork_join",
    "parallel_map",
    "time_block",
]
