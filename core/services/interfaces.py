"""Core service interfaces and shared data structures.

This module defines simple dataclasses that represent batch mutation
results and user-facing notices used across the infrastructure and UI
layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from core.models import RemovalKind

LEVEL_INFO = "info"
LEVEL_WARNING = "warning"
LEVEL_ERROR = "error"


@dataclass
class Notice:
    """A transient toast message.

    Attributes:
        message: Text shown to the user.
        level: One of "info", "warning", "error".
    """

    message: str
    level: str = LEVEL_INFO

    @property
    def is_error(self) -> bool:
        return self.level == LEVEL_ERROR


@dataclass
class BatchResult:
    """Outcome of a batch discard/delete call.

    Attributes:
        kind: Mutation that was requested.
        requested: Filenames sent to the gateway.
        succeeded: Count reported by the gateway.
        error_count: Per-item failures reported by the gateway.
        ok_filenames: Filenames the gateway confirmed.
        failed_filenames: Requested filenames not confirmed.
        log_path: Optional path to the audit CSV.
    """

    kind: RemovalKind
    requested: list[str]
    succeeded: int
    error_count: int
    ok_filenames: list[str] = field(default_factory=list)
    failed_filenames: list[str] = field(default_factory=list)
    log_path: str | None = None

    @property
    def is_partial(self) -> bool:
        return self.error_count > 0


@dataclass
class UploadOutcome:
    """Outcome of a single file upload.

    Attributes:
        filename: Base name sent to the gateway.
        ok: Whether every step succeeded.
        error: Failure reason when `ok` is False.
    """

    filename: str
    ok: bool
    error: str | None = None


@dataclass
class UploadSummary:
    """Aggregate of an upload run."""

    outcomes: list[UploadOutcome] = field(default_factory=list)

    @property
    def ok_count(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def error_count(self) -> int:
        return sum(1 for o in self.outcomes if not o.ok)

    def to_notice(self) -> Notice | None:
        """Toast for the run, or None when nothing was attempted."""
        if self.ok_count > 0:
            msg = f"{self.ok_count} file(s) uploaded"
            if self.error_count:
                return Notice(f"{msg} · {self.error_count} error(s)", LEVEL_WARNING)
            return Notice(msg)
        if self.error_count > 0:
            return Notice(f"{self.error_count} error(s) while uploading", LEVEL_ERROR)
        return None
