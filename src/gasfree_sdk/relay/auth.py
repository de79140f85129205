"""Request signing for the GasFree relay API.

The relay authenticates every call with an HMAC over the method, the full
request path (network segment included) and a Unix timestamp in seconds:

    Authorization: ApiKey <key>:<base64(HMAC-SHA256(secret, METHOD + path + ts))>
    Timestamp: <ts>

The request body is not covered by the signature.
"""

import base64
import hashlib
import hmac
import time
from typing import Dict, Optional


def generate_api_signature(api_secret: str, method: str, path: str, timestamp: int) -> str:
    """Sign ``method + path + timestamp`` with the API secret.

    Args:
        api_secret: Relay API secret
        method: Upper-case HTTP method
        path: Full request path, e.g. ``/nile/api/v1/config/token/all``
        timestamp: Unix time in seconds

    Returns:
        Base64 encoded HMAC-SHA256 digest
    """
    message = f"{method}{path}{timestamp}".encode("utf-8")
    digest = hmac.new(api_secret.encode("utf-8"), message, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def build_auth_headers(
    api_key: str,
    api_secret: str,
    method: str,
    path: str,
    timestamp: Optional[int] = None,
) -> Dict[str, str]:
    """Build the headers for one authenticated relay request."""
    ts = int(time.time()) if timestamp is None else timestamp
    signature = generate_api_signature(api_secret, method.upper(), path, ts)
    return {
        "Content-Type": "application/json",
        "Timestamp": str(ts),
        "Authorization": f"ApiKey {api_key}:{signature}",
    }
