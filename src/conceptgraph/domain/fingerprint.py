"""Content fingerprint of an aggregate payload.

The fingerprint tags emitted events and the stored canonical node. It is not
used to skip writes: an unchanged payload is still fully re-applied.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from conceptgraph.domain.model import AggregatedConcept

_DIGEST_SIZE = 8


def fingerprint(aggregate: AggregatedConcept) -> str:
    """Return a stable decimal hash of an already normalized aggregate."""

    payload = asdict(aggregate)
    payload.pop("aggregated_hash", None)
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.blake2b(encoded.encode("utf-8"), digest_size=_DIGEST_SIZE).digest()
    return str(int.from_bytes(digest, "big"))
