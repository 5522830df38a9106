from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Optional

from quorumvault.events import Event, EventKind

LOGGER = logging.getLogger(__name__)


class AuditLogger:
    """Notification sink writing every engine event to an audit log file.

    Each line carries a timestamp, the vault name, a tag for the event kind
    and the event payload as JSON. Lines are also forwarded to the standard
    ``logging`` tree under ``quorumvault.audit.<vault_name>``.
    """

    TAGS = {
        EventKind.DEPOSITED: "💰 DEPOSIT",
        EventKind.PROPOSED: "📨 PROPOSED",
        EventKind.CONFIRMED: "✅ CONFIRMED",
        EventKind.REVOKED: "↩️  REVOKED",
        EventKind.EXECUTED: "🔄 EXECUTED",
        EventKind.EXECUTION_FAILURE: "❌ EXECUTION FAILED",
    }

    def __init__(self, vault_name: str, log_file: Optional[str] = None) -> None:
        """Initialize the audit logger.

        Args:
            vault_name: Name shown on every line.
            log_file: Optional log file path; when omitted only the ``logging``
                tree receives the lines.
        """
        self.vault_name = vault_name
        self.log_file = Path(log_file) if log_file else None
        self._logger = logging.getLogger(f"quorumvault.audit.{vault_name}")

        if self.log_file is not None:
            try:
                self.log_file.parent.mkdir(parents=True, exist_ok=True)
                with open(self.log_file, "w", encoding="utf-8") as f:
                    f.write(f"=== {self.vault_name} Audit Log ===\n")
                    f.write(f"Started at: {time.strftime('%Y-%m-%d %H:%M:%S')}\n")
                    f.write("=" * 50 + "\n\n")
            except OSError as e:
                LOGGER.warning("Could not create audit log file %s: %s", self.log_file, e)
                self.log_file = None

    def format(self, event: Event) -> str:
        timestamp = time.strftime("%H:%M:%S")
        payload = json.dumps(event.to_payload(), sort_keys=True, default=str)
        return f"[{timestamp}] {self.vault_name}: {self.TAGS[event.kind]}: {payload}"

    def emit(self, event: Event) -> None:
        """Record *event*."""
        entry = self.format(event)

        if self.log_file is not None:
            try:
                with open(self.log_file, "a", encoding="utf-8") as f:
                    f.write(entry + "\n")
            except OSError as e:
                # the audit trail must not break the engine
                LOGGER.error("Failed to append to audit log %s: %s", self.log_file, e)

        if event.kind == EventKind.EXECUTION_FAILURE:
            self._logger.warning(entry)
        else:
            self._logger.info(entry)
