"""
Device environment detection package.
"""

from .probe import EnvironmentProbe, canonical_board_id, parse_firmware_generation

__all__ = ["EnvironmentProbe", "canonical_board_id", "parse_firmware_generation"]
