"""Custom exception hierarchy for Saturator."""

from __future__ import annotations


class SaturatorError(Exception):
    """Base exception for all Saturator errors.

    All custom exceptions raised by Saturator inherit from this class,
    making it easy to catch any Saturator-specific error with a single
    except clause.
    """


class ConfigError(SaturatorError):
    """Raised when configuration is invalid or missing.

    Examples:
        - Required environment variable has an invalid value.
        - Concurrency is lower than 1 or the request count is negative.
        - A ``--header`` or ``--auth`` value cannot be parsed.
    """


class SetupError(SaturatorError):
    """Raised when the run cannot start, before any request is sent.

    Examples:
        - The HTTP client session or its TLS context cannot be built.
    """


class TransportError(SaturatorError):
    """Raised when a single request gets no response.

    Covers refused connections, DNS failures, timeouts and TLS errors.
    The engine records it as a network failure and keeps going.
    """
