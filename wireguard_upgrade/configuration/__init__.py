"""
Configuration package.

Adapter over the Vyatta configuration store and the snapshot, detach,
delete and restore transition built on top of it.
"""

from .vyatta_store import VyattaConfigStore, parse_session_env, split_values
from .transition import ConfigTransitionManager

__all__ = [
    "VyattaConfigStore",
    "ConfigTransitionManager",
    "parse_session_env",
    "split_values",
]
