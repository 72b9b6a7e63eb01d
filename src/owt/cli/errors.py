"""Error reporting for the owt command line tool.

Every failure surfaced by the CLI is a :class:`CliError`.  Its ``category``
decides the process exit status, so scripts can tell a singular weighting
apart from a malformed criteria file without parsing messages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from owt_core.errors import TemperamentError

__all__ = [
    "CliError",
    "ErrorPayload",
    "STATUS_CODES",
    "build_error_payload",
    "log_cli_error",
]


STATUS_CODES: Mapping[str, int] = {
    "runtime": 1,
    "usage": 2,
    "io": 3,
    "not_found": 4,
    "singular": 5,
    "criteria": 6,
}

_FALLBACK_CATEGORY = "runtime"
_LOGGER = logging.getLogger("owt.cli")

_Scalar = (str, int, float, bool, type(None))


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """What gets logged and printed for a CLI failure."""

    category: str
    message: str
    status_code: int
    context: Mapping[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "message": self.message,
            "status_code": self.status_code,
            "context": dict(self.context),
        }


def _loggable(value: Any) -> Any:
    if isinstance(value, _Scalar):
        return value
    if isinstance(value, (list, tuple)):
        return [item if isinstance(item, _Scalar) else str(item) for item in value]
    return str(value)


def build_error_payload(
    message: str,
    *,
    category: Optional[str] = None,
    status_code: Optional[int] = None,
    context: Optional[Mapping[str, Any]] = None,
) -> ErrorPayload:
    """Resolve the exit status for ``category`` and flatten ``context``."""

    category = category or _FALLBACK_CATEGORY
    if status_code is None:
        status_code = STATUS_CODES.get(category, STATUS_CODES[_FALLBACK_CATEGORY])
    flattened = {key: _loggable(value) for key, value in (context or {}).items()}
    return ErrorPayload(
        category=category,
        message=message,
        status_code=status_code,
        context=flattened,
    )


def log_cli_error(
    payload: ErrorPayload,
    *,
    logger: Optional[logging.Logger] = None,
    exc_info: Optional[BaseException] = None,
) -> None:
    (logger or _LOGGER).error(
        payload.message,
        extra={
            "event": "cli.error",
            "category": payload.category,
            "status_code": payload.status_code,
            "context": dict(payload.context),
        },
        exc_info=exc_info,
    )


class CliError(RuntimeError):
    """Failure reported to the user with a category-specific exit status.

    ``output`` holds command output produced before the failure; the CLI
    writes it ahead of the error message.
    """

    def __init__(
        self,
        message: str,
        *,
        category: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[Mapping[str, Any]] = None,
        logged: bool = False,
        output: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.payload = build_error_payload(
            message, category=category, status_code=status_code, context=context
        )
        self.logged = logged
        self.output = output

    @property
    def category(self) -> str:
        return self.payload.category

    @property
    def status_code(self) -> int:
        return self.payload.status_code

    @property
    def context(self) -> dict[str, Any]:
        return dict(self.payload.context)

    @classmethod
    def from_context(
        cls,
        message: str,
        *,
        category: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
        logger: Optional[logging.Logger] = None,
        cause: Optional[BaseException] = None,
        output: Optional[str] = None,
    ) -> "CliError":
        """Build the error and log it immediately."""

        error = cls(message, category=category, context=context, logged=True, output=output)
        log_cli_error(error.payload, logger=logger, exc_info=cause)
        return error

    @classmethod
    def from_temperament_error(
        cls,
        error: TemperamentError,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> "CliError":
        """Wrap a solver error, keeping its category and diagnostic context."""

        return cls.from_context(
            error.message,
            category=error.category,
            context=error.context,
            logger=logger,
            cause=error,
        )
