import hashlib
import hmac
import time
from typing import Optional

from loguru import logger

from .errors import AuthError, AuthFailure


TIMESTAMP_HEADER = 'X-Timestamp'
SIGNATURE_HEADER = 'X-Auth'


def sign(timestamp, secret: str) -> str:
    """Signature a client attaches as X-Auth for the given X-Timestamp."""
    return hashlib.sha256(f'{timestamp}{secret}'.encode('utf-8')).hexdigest()


def now_millis() -> int:
    return int(time.time() * 1000)


class RequestAuthenticator:
    """Checks the X-Timestamp / X-Auth pair on inbound requests.

    Every failure is terminal; there is no partial credit and no retry.
    """

    def __init__(self, shared_secret: str, freshness_window_ms: int, clock=now_millis):
        self.shared_secret = shared_secret
        self.freshness_window_ms = freshness_window_ms
        self.clock = clock

    def check(self, timestamp: Optional[str], signature: Optional[str], now: Optional[int] = None) -> None:
        if not timestamp or not signature:
            raise AuthError(AuthFailure.missing_header)

        timestamp = timestamp.strip()
        if not (timestamp.isascii() and timestamp.isdigit()):
            raise AuthError(AuthFailure.malformed_timestamp)

        if now is None:
            now = self.clock()
        if abs(now - int(timestamp)) > self.freshness_window_ms:
            raise AuthError(AuthFailure.stale_timestamp)

        expected = sign(timestamp, self.shared_secret)
        provided = signature.strip().lower()
        if not hmac.compare_digest(provided.encode('utf-8'), expected.encode('utf-8')):
            raise AuthError(AuthFailure.signature_mismatch)

    def verify(self, timestamp: Optional[str], signature: Optional[str], now: Optional[int] = None) -> bool:
        try:
            self.check(timestamp, signature, now)
        except AuthError as e:
            logger.warning(f'Rejected request credential: {e.reason.value}')
            return False
        return True


def verify(timestamp, signature, shared_secret: str, now: int, freshness_window_ms: int = 300_000) -> bool:
    return RequestAuthenticator(shared_secret, freshness_window_ms).verify(
        None if timestamp is None else str(timestamp), signature, now
    )
