"""Central application exception hierarchy.

This module defines the base application exception ``AppError`` and a set of
specialized subclasses used throughout the build pipeline to represent its
failure modes (configuration, data validation, external services, logo
preparation and build I/O). Every fatal condition of a build surfaces to the
caller as one of these types.
"""

from __future__ import annotations

from typing import Any, Mapping


class AppError(Exception):
    """Base exception for all application-level errors.

    Parameters
    ----------
    code : str
        Machine-readable error code (e.g., ``'DATA_VALIDATION_ERROR'``).
    message : str
        Human-readable message describing the error.
    context : Mapping[str, Any] | None, optional
        Optional structured context for logging.
    transient : bool, optional
        Whether the error is temporary and may be retried.

    Attributes
    ----------
    code : str
        Stable machine-readable error code.
    message : str
        Human-readable message.
    context : dict
        Structured, non-sensitive context for logging.
    transient : bool
        True if the error is transient.

    Examples
    --------
    >>> e = AppError('CODE', 'message', context={'k': 'v'}, transient=True)
    >>> e.code
    'CODE'
    """

    __slots__ = ("code", "message", "context", "transient")

    def __init__(
        self,
        code: str,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = dict(context or {})
        self.transient = bool(transient)

    def __str__(self) -> str:
        """Return a compact string representation of the error."""
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Return a log-safe dictionary representation of the error."""
        return {
            "error_code": self.code,
            "message": self.message,
            "context": self.context,
            "is_transient": self.transient,
        }


class ConfigurationError(AppError):
    """Raised for invalid or missing configuration (settings, tunables)."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(
            "CONFIGURATION_ERROR", message, context=context, transient=False
        )


class DataValidationError(AppError):
    """Raised for landscape data that fails schema or content validation."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(
            "DATA_VALIDATION_ERROR", message, context=context, transient=False
        )


class ExternalServiceError(AppError):
    """Raised for failures from an external service (sources, collectors)."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        transient: bool = True,
    ) -> None:
        super().__init__(
            "EXTERNAL_SERVICE_ERROR", message, context=context, transient=transient
        )


class LogoError(AppError):
    """Raised when a single item's logo cannot be read, fetched or normalized."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("LOGO_ERROR", message, context=context, transient=False)


class AssetsNotFoundError(AppError):
    """Raised when the web application bundle is missing or incomplete."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(
            "ASSETS_NOT_FOUND_ERROR", message, context=context, transient=False
        )


class BuildError(AppError):
    """Raised for fatal I/O or serialization failures while writing the site."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("BUILD_ERROR", message, context=context, transient=False)
