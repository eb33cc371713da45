"""
Progress tracking and event reporting package.

JSON progress events for a supervising process, and a human-readable
summary for operators at the console.
"""

from .event_sender import EventEmitter
from .formatter import HumanReadableFormatter

__all__ = ["EventEmitter", "HumanReadableFormatter"]
