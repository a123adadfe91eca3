"""Composite identifier for a set of invalidations.

The identifier is a canonical JSON object mapping distribution id to
invalidation id, e.g. ``{"E1ABC":"I2XYZ","E3DEF":""}``. An empty invalidation
id means no invalidation was created for that distribution. Keys are sorted,
so the same mapping always encodes to the same string regardless of the order
distributions were requested in.
"""

import json
from typing import Dict, Mapping, Sequence

from shared.errors import IdentifierEncodingError

LEGACY_SEPARATOR = ";"


def encode_identifier(ids: Mapping[str, str]) -> str:
    return json.dumps(dict(ids), sort_keys=True, separators=(",", ":"))


def decode_identifier(value: str) -> Dict[str, str]:
    """Resolve a composite identifier back to ``{distribution_id: invalidation_id}``."""
    try:
        decoded = json.loads(value)
    except (TypeError, ValueError) as e:
        raise IdentifierEncodingError(f"Malformed invalidation identifier {value!r}: {str(e)}") from e

    if not isinstance(decoded, dict):
        raise IdentifierEncodingError(f"Invalidation identifier must be a JSON object, got {value!r}")

    for target, invalidation_id in decoded.items():
        if not target or not isinstance(invalidation_id, str):
            raise IdentifierEncodingError(f"Invalid entry {target!r}: {invalidation_id!r} in invalidation identifier")

    return decoded


def decode_positional(value: str, targets: Sequence[str]) -> Dict[str, str]:
    """Read the older ``;``-joined form whose positions align with ``targets``.

    Extra ids beyond the number of targets are ignored; targets without a
    matching position get an empty id.
    """
    ids = value.split(LEGACY_SEPARATOR) if value else []
    return {target: (ids[i] if i < len(ids) else "") for i, target in enumerate(targets)}
