"""Alert reporting.

The reporter is chosen once at startup (``APP_REPORTER``) and injected where
needed. The default is a no-op, so nothing in the request path has to check
whether an external integration is available.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Literal, Mapping

from app.core.errors import ValidationAppError

logger = logging.getLogger(__name__)

ReportLevel = Literal["info", "warning", "error"]
AlertLevel = Literal["info", "warning", "error", "critical"]


class AbstractReporter(ABC):
    """Sink for messages that should reach an operator."""

    @abstractmethod
    def capture_message(
        self,
        message: str,
        *,
        level: ReportLevel = "info",
        tags: Mapping[str, str] | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> None:
        raise NotImplementedError


class NoOpReporter(AbstractReporter):
    """Reporter that drops every message."""

    def capture_message(
        self,
        message: str,
        *,
        level: ReportLevel = "info",
        tags: Mapping[str, str] | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> None:
        return None


class LoggingReporter(AbstractReporter):
    """Reporter that emits each message as a structured log record."""

    _LEVELS = {
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }

    def __init__(self, logger_name: str = "app.reporter") -> None:
        self._logger = logging.getLogger(logger_name)

    def capture_message(
        self,
        message: str,
        *,
        level: ReportLevel = "info",
        tags: Mapping[str, str] | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> None:
        self._logger.log(
            self._LEVELS.get(level, logging.INFO),
            message,
            extra={
                "report_tags": dict(tags or {}),
                "report_extra": dict(extra or {}),
            },
        )


def build_reporter(backend: str) -> AbstractReporter:
    """Create the reporter selected by configuration.

    Args:
        backend: ``"none"`` or ``"log"`` (case-insensitive).

    Raises:
        ValidationAppError: If the backend name is not recognised.
    """

    normalized = backend.strip().lower()
    if normalized in ("", "none", "noop"):
        return NoOpReporter()
    if normalized == "log":
        return LoggingReporter()

    raise ValidationAppError(
        code="unsupported_reporter",
        message=f"Unsupported reporter backend: {backend}",
        details={"hint": "Set APP_REPORTER to 'none' or 'log'"},
    )


class AlertManager:
    """Escalates alerts to the reporter.

    Error and critical alerts are counted per endpoint (``tags["endpoint"]``);
    once an endpoint reaches ``error_threshold`` every further error is
    reported. Critical and warning alerts are always reported. Counters are
    cleared by ``reset_counts``, which the app runs periodically.
    """

    def __init__(self, reporter: AbstractReporter, *, error_threshold: int = 10) -> None:
        if error_threshold < 1:
            raise ValueError("error_threshold must be >= 1")
        self._reporter = reporter
        self._error_threshold = error_threshold
        self._error_counts: dict[str, int] = {}
        self._lock = threading.Lock()

    @property
    def reporter(self) -> AbstractReporter:
        return self._reporter

    def send_alert(
        self,
        level: AlertLevel,
        message: str,
        *,
        tags: Mapping[str, str] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        tags = dict(tags or {})
        context = dict(context or {})

        if level in ("error", "critical"):
            endpoint = tags.get("endpoint", "unknown")
            with self._lock:
                count = self._error_counts.get(endpoint, 0) + 1
                self._error_counts[endpoint] = count

            if count >= self._error_threshold:
                self._reporter.capture_message(
                    f"Alert: {message}",
                    level="error",
                    tags={**tags, "alert_type": "threshold_exceeded", "error_count": str(count)},
                    extra={**context, "threshold": self._error_threshold},
                )

        if level == "critical":
            self._reporter.capture_message(
                f"Critical: {message}",
                level="error",
                tags={**tags, "alert_type": "critical"},
                extra=context,
            )
        elif level == "warning":
            self._reporter.capture_message(
                f"Warning: {message}",
                level="warning",
                tags=tags,
                extra=context,
            )

    def error_count(self, endpoint: str) -> int:
        with self._lock:
            return self._error_counts.get(endpoint, 0)

    def reset_counts(self) -> int:
        """Clear all counters and return how many endpoints were tracked."""

        with self._lock:
            tracked = len(self._error_counts)
            self._error_counts.clear()
        return tracked
