"""Application-level exception types for the anchor service."""

from __future__ import annotations


class AnchorServiceError(Exception):
    """Base exception for the anchor service."""


class ConfigurationError(AnchorServiceError):
    """Base exception for configuration and startup validation errors."""


class StartupConfigError(ConfigurationError):
    """Raised when keys, chain id or backend selector cannot be parsed at startup."""


class EncodingError(AnchorServiceError):
    """Raised when an on-chain payload cannot be encoded."""


class InvalidHeight(EncodingError):
    """Raised when a block height does not fit in 48 bits."""


class SigningError(AnchorServiceError):
    """Raised when an anchor record cannot be marshalled or signed."""


class ProtocolCompositionError(AnchorServiceError):
    """Raised when a commit or reveal message cannot be composed."""


class TransportError(AnchorServiceError):
    """Raised when an HTTP request cannot be built or executed."""


class ServerRejection(AnchorServiceError):
    """Raised when the intermediary ledger answered a phase with a non-2xx status."""

    def __init__(self, message: str, *, statuses: dict[str, int]) -> None:
        super().__init__(message)
        self.statuses = statuses


class ResponseParseError(AnchorServiceError):
    """Raised when a response body is not a JSON-RPC 2.0 response."""


class BackendError(AnchorServiceError):
    """Raised when a backend cannot embed the payload in its chain."""
