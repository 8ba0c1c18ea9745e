from __future__ import annotations

import json
import re
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from conceptgraph.app import build_concept_service, new_transaction_id, write_payload

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def test_transaction_ids_are_prefixed_and_unique() -> None:
    first, second = new_transaction_id(), new_transaction_id()

    assert re.fullmatch(r"tid_[0-9a-f]{10}", first)
    assert first != second


def test_write_payload_decodes_and_writes(sqlite_engine: Engine) -> None:
    service = build_concept_service(engine=sqlite_engine, clock=lambda: datetime(2024, 5, 1, tzinfo=UTC))
    payload = {
        "prefUUID": "p",
        "prefLabel": "Brand",
        "type": "Brand",
        "sourceRepresentations": [
            {
                "uuid": "p",
                "prefLabel": "Brand",
                "type": "Brand",
                "authority": "TME",
                "authorityValue": "tme-p",
            }
        ],
    }

    changes = write_payload(service, json.dumps(payload))

    assert changes.updated_ids == ["p"]
    assert re.fullmatch(r"tid_[0-9a-f]{10}", changes.changed_records[0].transaction_id)
    stored = service.read("p", "tid_test")
    assert stored is not None
    assert stored.source_representations[0].authority_value == "tme-p"
