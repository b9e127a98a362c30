"""Error taxonomy shared by the token core and the HTTP boundary."""
from __future__ import annotations


class TokenError(Exception):
    """Base class for failures raised while issuing a token."""


class ValidationError(TokenError, ValueError):
    """Raised when a caller supplied a missing or malformed channel, uid, or role."""


class ConfigurationError(TokenError, RuntimeError):
    """Raised when the app id or certificate is absent. Signals a deployment defect."""


class EncodingError(TokenError, ValueError):
    """Raised when a value cannot be represented in the token's binary layout."""


class RangeError(EncodingError):
    """Raised when an integer does not fit its fixed-width unsigned slot."""


class CryptoError(TokenError, RuntimeError):
    """Raised when the signing primitive fails."""
