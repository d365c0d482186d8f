"""Diagnostic sink for churn warnings and swallowed faults."""

from __future__ import annotations

import logging
from typing import Optional, Protocol


class DiagnosticSink(Protocol):
    def warn(self, message: str) -> None: ...

    def error(self, message: str, cause: Optional[BaseException] = None) -> None: ...


class LoggingDiagnostics:
    """Default sink: forwards to a standard logger."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger("domain.coordinator")

    def warn(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str, cause: Optional[BaseException] = None) -> None:
        if cause is None:
            self._logger.error(message)
        else:
            self._logger.error(
                "%s: %s", message, cause, exc_info=(type(cause), cause, cause.__traceback__)
            )
