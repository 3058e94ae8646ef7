"""
Builds signed query-protocol HTTP requests.
"""
from datetime import datetime, timezone
from typing import Callable, Mapping, Optional
from urllib.parse import urlparse

import requests

from logger_config import get_logger
from .context import Auth
from .signer import encode_params, sign

logger = get_logger(__name__)

API_VERSION = '2009-02-01'
TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%SZ'
FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded; charset=utf-8'
DEFAULT_PORTS = {'https': 443, 'http': 80}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RequestBuilder:
    """Assembles a signed requests.PreparedRequest for one action."""

    def __init__(
        self,
        auth: Auth,
        endpoint: str,
        clock: Optional[Callable[[], datetime]] = None
    ) -> None:
        """
        Initialize request builder.

        Args:
            auth: Credentials passed to the signer
            endpoint: Service endpoint, scheme and host (e.g. https://sqs.us-east-1.amazonaws.com)
            clock: Returns the current UTC time; injectable for tests
        """
        parsed = urlparse(endpoint)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Endpoint must include scheme and host: {endpoint!r}")
        host = parsed.netloc
        # The Host header omits a default port, so the signed host must too
        if parsed.port is not None and parsed.port == DEFAULT_PORTS.get(parsed.scheme):
            host = host.rsplit(':', 1)[0]
        self.auth = auth
        self.endpoint = f'{parsed.scheme}://{host}'
        self.host = host
        self.clock = clock or utc_now

    @staticmethod
    def resource_path(path_or_url: str) -> str:
        """Reduce a queue URL or bare path to its path component."""
        return urlparse(path_or_url or '/').path or '/'

    def build(
        self,
        method: str,
        action: str,
        path_or_url: str,
        params: Optional[Mapping[str, str]] = None
    ) -> requests.PreparedRequest:
        """
        Build a signed request.

        Args:
            method: 'GET' (params in the query string) or 'POST' (params
                in a form-encoded body)
            action: Remote action name (e.g., 'SendMessage')
            path_or_url: Queue path, queue URL, or '/' for service-level actions
            params: Action parameters; never mutated

        Returns:
            Prepared request ready for a requests.Session

        Raises:
            ValueError: If method is not GET or POST
            AuthError: If credentials are absent or malformed
        """
        method = method.upper()
        if method not in ('GET', 'POST'):
            raise ValueError(f"Unsupported HTTP method: {method}")

        path = self.resource_path(path_or_url)
        unsigned = dict(params or {})
        unsigned['Action'] = action
        # Fresh per request; the service rejects stale timestamps
        unsigned['Timestamp'] = self.clock().astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)
        unsigned['Version'] = API_VERSION

        signed = sign(self.auth, method, self.host, path, unsigned)
        encoded = encode_params(signed)
        url = self.endpoint + path

        if method == 'GET':
            request = requests.Request('GET', f'{url}?{encoded}')
        else:
            request = requests.Request(
                'POST',
                url,
                data=encoded.encode('utf-8'),
                headers={'Content-Type': FORM_CONTENT_TYPE},
            )

        logger.debug(f"Built {method} {action} request for {path}")
        return request.prepare()
