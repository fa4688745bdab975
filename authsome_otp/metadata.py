"""Metadata envelope stored next to each OTP record.

The engine never looks inside the envelope. It is encoded to JSON text when a
record is written and decoded back when it is read, so whatever the caller
issued with is what a later fetch or validation hands back. ``None`` stays
``None`` and an empty mapping stays an empty mapping.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Optional

from authsome_otp.errors import MetadataEncodingError

Metadata = dict[str, Any]


def encode_metadata(value: Optional[Mapping[str, Any]]) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise MetadataEncodingError("Metadata must be a mapping")
    for key in value:
        if not isinstance(key, str):
            raise MetadataEncodingError("Metadata keys must be strings")
    try:
        return json.dumps(dict(value), separators=(",", ":"), sort_keys=True)
    except (TypeError, ValueError) as exc:
        raise MetadataEncodingError("Metadata is not JSON serializable") from exc


def decode_metadata(raw: Optional[str | bytes]) -> Optional[Metadata]:
    if raw is None:
        return None
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except ValueError as exc:
        raise MetadataEncodingError("Stored metadata is not valid JSON") from exc
    if not isinstance(value, dict):
        raise MetadataEncodingError("Stored metadata is not a mapping")
    return value
