"""
Upgrade execution package.

Run-scoped resources, persistent artifact staging, and the coordinator that
drives the full upgrade sequence.
"""

from .run_context import RunContext
from .artifacts import ArtifactStager
from .install_coordinator import InstallCoordinator

__all__ = ["RunContext", "ArtifactStager", "InstallCoordinator"]
