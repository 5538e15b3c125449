from typing import Dict, Iterable, Optional


ALLOW_METHODS = 'GET, POST, PUT, DELETE, OPTIONS'
ALLOW_HEADERS = 'Content-Type, Authorization, X-Timestamp, X-Auth'


class AccessPolicy:
    """Cross-origin headers for every response.

    An allow-list containing ``*`` admits all origins. Requests from other
    origins are still served, only without an Allow-Origin header.
    """

    def __init__(self, allowed_origins: Iterable[str]):
        self.allowed_origins = frozenset(allowed_origins)
        self.allow_all = '*' in self.allowed_origins

    def is_preflight(self, method: str) -> bool:
        return method.upper() == 'OPTIONS'

    def decorate(self, origin: Optional[str], method: str) -> Dict[str, str]:
        headers = {
            'Access-Control-Allow-Methods': ALLOW_METHODS,
            'Access-Control-Allow-Headers': ALLOW_HEADERS,
        }
        if self.allow_all:
            headers['Access-Control-Allow-Origin'] = '*'
        elif origin and origin in self.allowed_origins:
            headers['Access-Control-Allow-Origin'] = origin
            headers['Access-Control-Allow-Credentials'] = 'true'
            headers['Vary'] = 'Origin'
        return headers
