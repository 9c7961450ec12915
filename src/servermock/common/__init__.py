"""
servermock Common Utilities

Shared helpers used across servermock modules.
"""

from .utils import (
    safe_json_parse,
    decode_body,
    last_value_dict,
    drop_headers,
    find_free_port,
)

__all__ = [
    'safe_json_parse',
    'decode_body',
    'last_value_dict',
    'drop_headers',
    'find_free_port',
]
