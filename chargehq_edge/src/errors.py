"""
Exception types raised by the register reader, aggregator, and retry policy.

``TransportError`` and ``DecodeError`` share the ``ReadError`` base so a
polling cycle can abort on either with one ``except`` clause, while logs
still tell a connectivity problem apart from a data-integrity problem.

CHANGELOG:
- 2026-10-19: Add error_kind for logging non-read failures
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations


class ReadError(Exception):
    """A register read failed; the current polling cycle must abort.

    Args:
        message: Human-readable description of the failure.
        register: SunSpec name of the register being read, if known.
        address: Modbus start address of the read, if known.
    """

    kind = "read"

    def __init__(
        self,
        message: str,
        *,
        register: str | None = None,
        address: int | None = None,
    ) -> None:
        super().__init__(message)
        self.register = register
        self.address = address

    def __str__(self) -> str:
        base = super().__str__()
        if self.register is None:
            return base
        return f"{base} (register={self.register}, address={self.address})"


class TransportError(ReadError):
    """The Modbus session failed to deliver a response (connect, I/O, timeout)."""

    kind = "transport"


class DecodeError(ReadError):
    """A response arrived but its words do not fit the requested type."""

    kind = "decode"


class RetriesExhaustedError(Exception):
    """Every attempt allowed by the retry policy failed.

    Attributes:
        attempts: Number of attempts made.
        last_error: The exception raised by the final attempt.
    """

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"Giving up after {attempts} attempt(s): {last_error}")
        self.attempts = attempts
        self.last_error = last_error


def error_kind(exc: BaseException) -> str:
    """Return the log tag for *exc*: its ``kind`` or its class name."""
    if isinstance(exc, ReadError):
        return exc.kind
    return type(exc).__name__
