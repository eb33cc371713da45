"""
Utility functions and helper modules.
"""

from .json_utils import safe_json_serialize

__all__ = ["safe_json_serialize"]
