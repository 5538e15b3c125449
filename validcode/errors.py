from enum import Enum
from typing import Optional


class AuthFailure(str, Enum):
    missing_header = 'missing_header'
    malformed_timestamp = 'malformed_timestamp'
    stale_timestamp = 'stale_timestamp'
    signature_mismatch = 'signature_mismatch'


class AuthError(Exception):
    def __init__(self, reason: AuthFailure):
        super().__init__(reason.value)
        self.reason = reason


class ProxyFailure(str, Enum):
    network_failure = 'network_failure'
    unparseable_response = 'unparseable_response'


class ProxyError(Exception):
    """The executor could not be reached or answered with something other than JSON."""

    def __init__(self, message: str, kind: ProxyFailure, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.cause = cause


class VerificationError(ValueError):
    pass
