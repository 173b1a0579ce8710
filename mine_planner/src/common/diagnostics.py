import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Any

"""Unified diagnostic collection for the whole planning pipeline."""

logger = logging.getLogger("mine_planner")


class DiagnosticSeverity(Enum):
    """Severity levels for planner diagnostics."""

    DEBUG = "debug"  # Internal planner information
    INFO = "info"  # Informational messages for users
    WARNING = "warning"  # Issues that don't prevent planning
    ERROR = "error"  # Issues that prevent a usable plan


_SEVERITY_ORDER = [
    DiagnosticSeverity.DEBUG,
    DiagnosticSeverity.INFO,
    DiagnosticSeverity.WARNING,
    DiagnosticSeverity.ERROR,
]

_LOG_LEVELS = {
    DiagnosticSeverity.DEBUG: logging.DEBUG,
    DiagnosticSeverity.INFO: logging.INFO,
    DiagnosticSeverity.WARNING: logging.WARNING,
    DiagnosticSeverity.ERROR: logging.ERROR,
}


@dataclass
class Diagnostic:
    """A single diagnostic message with context."""

    severity: DiagnosticSeverity
    message: str
    stage: str  # packing, routing, power, emitters, fluid, obstruction, emission
    position: Optional[Any] = None  # tile the message refers to, if any


class PlanDiagnostics:
    """Central diagnostic collection for one planning call.

    Every stage records into the same collector; messages are also forwarded
    to the ``mine_planner`` logger so a CLI run shows them at the configured
    log level.

    Usage:
        diagnostics = PlanDiagnostics()
        diagnostics.warning("Dropped 2 placeholders", stage="emission")
        if diagnostics.has_errors():
            print(diagnostics.format_for_user())
    """

    def __init__(self, verbose: bool = False, debug: bool = False):
        self.diagnostics: List[Diagnostic] = []
        self.verbose = verbose
        self.debug_enabled = debug
        self._error_count = 0
        self._warning_count = 0
        self.default_stage = "unknown"

    def debug(
        self, message: str, stage: str | None = None, position: Optional[Any] = None
    ) -> None:
        """Add an internal message (shown in debug mode)."""
        self._add(DiagnosticSeverity.DEBUG, message, stage, position)

    def info(
        self, message: str, stage: str | None = None, position: Optional[Any] = None
    ) -> None:
        """Add an informational message (shown in verbose mode)."""
        self._add(DiagnosticSeverity.INFO, message, stage, position)

    def warning(
        self, message: str, stage: str | None = None, position: Optional[Any] = None
    ) -> None:
        """Add a warning (always shown, doesn't stop planning)."""
        self._add(DiagnosticSeverity.WARNING, message, stage, position)
        self._warning_count += 1

    def error(
        self, message: str, stage: str | None = None, position: Optional[Any] = None
    ) -> None:
        """Add an error (always shown)."""
        self._add(DiagnosticSeverity.ERROR, message, stage, position)
        self._error_count += 1

    def _add(
        self,
        severity: DiagnosticSeverity,
        message: str,
        stage: str | None,
        position: Optional[Any],
    ) -> None:
        diag = Diagnostic(
            severity=severity,
            message=message,
            stage=stage or self.default_stage,
            position=position,
        )
        self.diagnostics.append(diag)
        logger.log(_LOG_LEVELS[severity], self._format_diagnostic(diag))

    def has_errors(self) -> bool:
        """Check if any errors have been recorded."""
        return self._error_count > 0

    def error_count(self) -> int:
        return self._error_count

    def warning_count(self) -> int:
        return self._warning_count

    def get_messages(
        self, min_severity: DiagnosticSeverity = DiagnosticSeverity.WARNING
    ) -> List[str]:
        """Get formatted messages at or above the specified severity level."""
        threshold = _SEVERITY_ORDER.index(min_severity)
        return [
            self._format_diagnostic(diag)
            for diag in self.diagnostics
            if _SEVERITY_ORDER.index(diag.severity) >= threshold
        ]

    def _format_diagnostic(self, diag: Diagnostic) -> str:
        # Format: SEVERITY [stage@x,y]: message
        location = diag.stage
        if diag.position is not None:
            location += "@{},{}".format(*diag.position)
        return f"{diag.severity.value.upper()} [{location}]: {diag.message}"

    def format_for_user(self) -> str:
        """Format all diagnostics for user-friendly output."""
        if not self.diagnostics:
            return "No diagnostics."

        if self.debug_enabled:
            min_severity = DiagnosticSeverity.DEBUG
        elif self.verbose:
            min_severity = DiagnosticSeverity.INFO
        else:
            min_severity = DiagnosticSeverity.WARNING

        messages = self.get_messages(min_severity)
        summary = f"\nPlanning summary: {self._error_count} error(s), {self._warning_count} warning(s)"
        return "\n".join(messages) + summary

    def merge(self, other: "PlanDiagnostics") -> None:
        """Merge diagnostics from another collector."""
        self.diagnostics.extend(other.diagnostics)
        self._error_count += other._error_count
        self._warning_count += other._warning_count
