"""
Event sending and progress reporting.

Structured JSON events with sequence tracking, printed one per line to
stdout so a supervising process can follow the run. Log output goes to
stderr and never mixes with the event stream.
"""

import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

from loguru import logger

from wireguard_upgrade.core.constants import TOTAL_UPGRADE_STEPS
from wireguard_upgrade.core.dataclasses import UpgradeResult
from wireguard_upgrade.utils.json_utils import safe_json_serialize


class EventEmitter:
    """
    Clean JSON event emitter with sequence tracking for guaranteed message ordering.

    A disabled emitter still counts sequence numbers but writes nothing, so
    callers never have to branch on whether events were requested.
    """

    def __init__(self, enabled: bool = True, stream: Optional[TextIO] = None):
        self.enabled = enabled
        self.stream = stream
        self.sequence = 0

    def emit(
        self,
        event_type: str,
        data: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
        level: str = "INFO",
    ) -> None:
        """Emit a structured JSON event to stdout with sequence tracking."""
        self.sequence += 1
        if not self.enabled:
            return

        event = {
            "event_type": event_type,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "sequence": self.sequence,
        }
        if message:
            event["message"] = message
        if data is not None:
            event["data"] = safe_json_serialize(data)

        stream = self.stream or sys.stdout
        print(json.dumps(event), file=stream, flush=True)
        logger.trace(f"[EVENT] {event_type} #{self.sequence}")

    def operation_start(self, total_steps: int = TOTAL_UPGRADE_STEPS, pinned: Optional[str] = None):
        self.emit(
            "OPERATION_START",
            data={"operation": "upgrade", "total_steps": total_steps, "pinned_version": pinned},
        )

    def step_complete(self, step: int, total_steps: int, message: str) -> None:
        """Emit a step completion event with progress calculation."""
        self.emit(
            "STEP_COMPLETE",
            data={
                "step": step,
                "total_steps": total_steps,
                "percentage": round((step / total_steps) * 100),
            },
            message=message,
        )

    def warning(self, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        self.emit("UPGRADE_WARNING", data=data, message=message, level="WARNING")

    def operation_complete(
        self,
        success: bool,
        message: str,
        result: Optional[UpgradeResult] = None,
        error: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Emit the final operation event.

        Args:
            success: Overall run outcome
            message: Completion message
            result: Upgrade result summary, when the run produced one
            error: Error details for a failed run
        """
        data: Dict[str, Any] = {
            "success": success,
            "status": "SUCCESS" if success else "FAILED",
            "operation": "upgrade",
        }
        if result is not None:
            data["final_results"] = {
                "outcome": result.outcome,
                "initial_version": result.initial_version,
                "target_version": result.target_version,
                "version_action": result.version_action,
                "pinned": result.pinned,
                "asset": result.asset_name,
                "config_snapshot_taken": result.config_snapshot_taken,
                "config_restored": result.config_restored,
                "module_unloaded": result.module_unloaded,
                "duration": result.calculate_duration(),
                "warnings": result.warnings,
                "upgrade_steps": result.upgrade_steps,
            }
        if error is not None:
            data["error"] = error

        self.emit(
            "OPERATION_COMPLETE",
            data=data,
            message=message,
            level="SUCCESS" if success else "ERROR",
        )
