"""
servermock Common Utilities

Small helpers for turning raw HTTP pieces into the plain values stored on
captured requests and rendered responses.
"""

import json
import socket
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple


def safe_json_parse(json_string: Optional[str], default: Any = None) -> Any:
    """
    Safely parse JSON string with error handling.

    Args:
        json_string: JSON string to parse
        default: Default value to return if parsing fails

    Returns:
        Parsed JSON object, or default if parsing fails

    Example:
        body = safe_json_parse(request.payload, default={})
    """
    if not json_string:
        return default

    try:
        return json.loads(json_string)
    except (json.JSONDecodeError, TypeError, ValueError):
        return default


def decode_body(body: Optional[bytes], encoding: str = 'utf-8') -> Optional[str]:
    """
    Decode a raw request body into text.

    An absent or empty body yields None rather than an empty string, so
    callers can tell "nothing was sent" apart from any real payload.
    Undecodable bytes are replaced instead of failing the request.

    Args:
        body: Raw body bytes as read from the connection
        encoding: Text encoding to decode with

    Returns:
        Decoded text, or None when there was no body
    """
    if not body:
        return None
    return body.decode(encoding, errors='replace')


def last_value_dict(items: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    """
    Collapse multi-valued (name, value) pairs into a plain dict.

    When a name repeats, the last value wins.

    Example:
        last_value_dict([('a', '1'), ('a', '2')])  # {'a': '2'}
    """
    result: Dict[str, str] = {}
    for key, value in items:
        result[key] = value
    return result


def drop_headers(headers: Mapping[str, str], names: Iterable[str]) -> Dict[str, str]:
    """
    Copy headers without the given names (case-insensitive match).

    Args:
        headers: Headers to filter
        names: Header names to remove

    Returns:
        New dictionary without the named headers
    """
    skip = {name.lower() for name in names}
    return {k: v for k, v in headers.items() if k.lower() not in skip}


def find_free_port(host: str = '127.0.0.1') -> int:
    """Ask the OS for a currently unused TCP port on host."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]
