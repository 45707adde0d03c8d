"""
Field Codec

Graph node properties can only hold primitives and flat lists, so nested
lesson/tutorial/model content is stored as JSON strings. The codec converts
the named fields on the way in (encode) and on the way out (decode).
"""

import json
from typing import Any, Dict, Iterable, Optional


def encode_fields(entity: Dict[str, Any], field_names: Iterable[str]) -> Dict[str, Any]:
    """
    Serialize the named fields that are not already strings.

    Args:
        entity: Node properties
        field_names: Codec-managed fields of the entity type

    Returns:
        A copy of the entity; absent fields and string values are untouched
    """
    encoded = dict(entity)
    for name in field_names:
        if name in encoded and not isinstance(encoded[name], str):
            encoded[name] = json.dumps(encoded[name])
    return encoded


def decode_fields(entity: Optional[Dict[str, Any]], field_names: Iterable[str]) -> Optional[Dict[str, Any]]:
    """
    Parse the named fields back into structured values.

    A value that is not valid JSON is kept as the original string, so legacy
    plain-text properties read back unchanged. Never raises.
    """
    if entity is None:
        return None
    decoded = dict(entity)
    for name in field_names:
        value = decoded.get(name)
        if isinstance(value, str) and value:
            try:
                decoded[name] = json.loads(value)
            except ValueError:
                pass
    return decoded
