"""
Human-readable output formatting for console display.

Prints the end-of-run summary when JSON events are not requested.
"""

import sys
from typing import Optional, TextIO

from wireguard_upgrade.core.dataclasses import UpgradeResult
from wireguard_upgrade.core.enums import UpgradeOutcome


class HumanReadableFormatter:
    """
    Formats upgrade results for human-readable console output.
    """

    def __init__(self, stream: Optional[TextIO] = None, width: int = 72):
        self.stream = stream
        self.width = width

    def _print(self, text: str = ""):
        print(text, file=self.stream or sys.stdout)

    def print_banner(self, title: str):
        """
        Print formatted section banner.

        Args:
            title: Banner title text
        """
        self._print(f"\n{'=' * self.width}")
        self._print(f"🎯 {title.upper()}")
        self._print(f"{'=' * self.width}")

    def print_upgrade_results(self, result: UpgradeResult):
        """
        Print final upgrade results.

        Args:
            result: Completed upgrade result
        """
        self.print_banner("WireGuard upgrade results")

        status_text = {
            UpgradeOutcome.UP_TO_DATE: "✅ UP TO DATE",
            UpgradeOutcome.INSTALLED: "✅ INSTALLED",
            UpgradeOutcome.INSTALLED_WITH_WARNINGS: "⚠️  INSTALLED WITH WARNINGS",
        }.get(result.outcome, "❌ FAILED")
        self._print(f"\nOVERALL STATUS: {status_text}")

        if result.profile:
            self._print(
                f"\n🖥️  DEVICE: board {result.profile.board_id}, "
                f"firmware {result.profile.firmware_version or result.profile.firmware_generation.value}"
            )

        self._print("\n🔄 VERSION TRANSITION:")
        self._print(f"   From:   {result.initial_version or 'not installed'}")
        self._print(f"   To:     {result.target_version or 'N/A'}")
        if result.version_action:
            action = result.version_action.value.replace("_", " ").title()
            if result.pinned:
                action += " (pinned)"
            self._print(f"   Action: {action}")
        if result.asset_name:
            self._print(f"   Asset:  {result.asset_name}")

        if result.config_snapshot_taken:
            restored = "✅ Restored" if result.config_restored else "❌ Not restored"
            self._print(f"\n📄 CONFIGURATION: {restored}")

        self._print(f"\n⏱️  DURATION: {result.calculate_duration():.1f} seconds")

        if result.upgrade_steps:
            self._print(f"\n📋 UPGRADE STEPS:")
            self._print(f"{'─' * self.width}")
            for step in result.upgrade_steps:
                icon = "✅" if step.status == "completed" else "⊘"
                self._print(f"{step.step:<12} {icon} {step.message}")
            self._print(f"{'─' * self.width}")

        if result.warnings:
            self._print(f"\n⚠️  WARNINGS ({len(result.warnings)}):")
            for warning in result.warnings:
                self._print(f"   • {warning}")
