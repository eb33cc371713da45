"""
WireGuard package upgrade orchestrator for EdgeOS / Vyatta devices.
"""

__version__ = "1.0.0"
