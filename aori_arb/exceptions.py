"""
Error taxonomy for the Aori client and strategy.
"""


class AoriError(Exception):
    """Base class for all errors raised by this package."""


class ExchangeConnectionError(AoriError, ConnectionError):
    """Socket connect or handshake failure. Fatal at startup, never retried."""


class TransportError(AoriError):
    """Read or write failure on an established socket."""


class SigningError(AoriError):
    """Missing key material or a malformed digest."""


class DecodeError(AoriError, ValueError):
    """Malformed or unrecognized exchange frame."""


class LockError(AoriError):
    """Shared state could not be locked."""


class ConfigError(AoriError, ValueError):
    """Missing or invalid configuration value."""
