"""
Query-protocol request signing (Signature Version 2, HmacSHA256).

The signature is computed over a canonical string built from the HTTP
method, the lower-cased host, the resource path and every request
parameter sorted by name. sign() returns a new parameter mapping and
never mutates its input, so identical inputs always give identical output.
"""
import base64
import hashlib
import hmac
from typing import Dict, Mapping, Optional
from urllib.parse import quote

from logger_config import get_logger
from utils.exceptions import AuthError
from .context import Auth

logger = get_logger(__name__)

SIGNATURE_VERSION = '2'
SIGNATURE_METHOD = 'HmacSHA256'

# RFC 3986 unreserved characters are never escaped
_SAFE_CHARS = '-_.~'


def encode(value: str) -> str:
    """Percent-encode a key or value the way the service canonicalizes it."""
    return quote(value, safe=_SAFE_CHARS)


def encode_params(params: Mapping[str, str]) -> str:
    """
    Encode parameters as key=value pairs sorted by key.

    Used for the signing canonical form as well as the query string or
    form body actually sent, so both always agree.
    """
    return '&'.join(
        f'{encode(key)}={encode(params[key])}' for key in sorted(params)
    )


def string_to_sign(method: str, host: str, path: str, params: Mapping[str, str]) -> str:
    """Build the canonical string the signature is computed over."""
    return '\n'.join([
        method.upper(),
        host.lower(),
        path or '/',
        encode_params(params),
    ])


def _check_auth(auth: Optional[Auth]) -> Auth:
    if auth is None:
        raise AuthError("No credentials supplied for request signing")
    if not isinstance(auth.access_key, str) or not auth.access_key.strip():
        raise AuthError("Access key is missing or malformed")
    if not isinstance(auth.secret_key, str) or not auth.secret_key:
        raise AuthError("Secret key is missing or malformed")
    return auth


def sign(
    auth: Optional[Auth],
    method: str,
    host: str,
    path: str,
    params: Mapping[str, str]
) -> Dict[str, str]:
    """
    Sign a request's parameter set.

    Args:
        auth: Credentials to sign with
        method: HTTP method ('GET' or 'POST')
        host: Endpoint host (with port if non-default)
        path: Canonical resource path
        params: Every other request parameter, including Action,
            Timestamp and Version

    Returns:
        A new mapping holding params plus the access key id, the
        signature algorithm markers, the session token if any, and
        the computed Signature

    Raises:
        AuthError: If credentials are absent or malformed
    """
    auth = _check_auth(auth)

    signed = dict(params)
    signed.pop('Signature', None)
    signed['AWSAccessKeyId'] = auth.access_key
    signed['SignatureVersion'] = SIGNATURE_VERSION
    signed['SignatureMethod'] = SIGNATURE_METHOD
    if auth.token:
        signed['SecurityToken'] = auth.token

    payload = string_to_sign(method, host, path, signed)
    digest = hmac.new(
        auth.secret_key.encode('utf-8'),
        payload.encode('utf-8'),
        hashlib.sha256
    ).digest()
    signed['Signature'] = base64.b64encode(digest).decode('ascii')

    logger.debug(
        f"Signed {method.upper()} {path or '/'} with key {auth.access_key[:4]}..."
    )
    return signed
