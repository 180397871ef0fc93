"""Chain endpoints: list, mine and replace.

``GET /blocks``
    Full snapshot, ascending by index.

``POST /mine``
    Body ``{"data": "<payload>"}``.  Appends one record and returns it.
    ``400`` for an empty payload, ``500`` only if the freshly built record
    unexpectedly fails validation.

``POST /replace``
    Body is a JSON array of records.  Returns the adopted chain when the
    candidate is adopted, ``400`` when it is rejected (not longer, or
    invalid).  Rejection is a normal outcome, not a server fault.

Unparsable bodies are turned into ``400 invalid payload`` by the exception
handler installed in :func:`~ledger_server.api.server.create_app`.

Handlers are plain ``def`` functions, so FastAPI runs them on its worker
threadpool and concurrent requests meet at the ledger's reader/writer lock
rather than on the event loop.
"""

import logging

from fastapi import APIRouter, HTTPException

from ledger_server.api.models import MineRequest, RecordModel
from ledger_server.core.errors import InvalidRecord
from ledger_server.core.ledger import Ledger
from ledger_server.core.records import record_to_wire

logger = logging.getLogger(__name__)


def router(ledger: Ledger) -> APIRouter:
    """Build the chain router bound to ``ledger``."""
    api = APIRouter()

    @api.get("/blocks", response_model=list[RecordModel])
    def list_blocks():
        """Return every record in the chain."""
        return [record_to_wire(record) for record in ledger.snapshot()]

    @api.post("/mine", response_model=RecordModel)
    def mine_block(request: MineRequest):
        """Append a record carrying the submitted payload."""
        if request.data == "":
            raise HTTPException(status_code=400, detail="data is required")

        try:
            record = ledger.append(request.data)
        except InvalidRecord as exc:
            logger.error("Append failed validation: %s", exc)
            raise HTTPException(status_code=500, detail=str(exc)) from exc

        return record_to_wire(record)

    @api.post("/replace", response_model=list[RecordModel])
    def replace_chain(candidate: list[RecordModel]):
        """Adopt the submitted chain if it is longer and valid."""
        records = [item.to_record() for item in candidate]
        if not ledger.replace(records):
            raise HTTPException(status_code=400, detail="replacement failed")

        # The adopted chain is exactly the candidate. A fresh snapshot could
        # already include writes that landed after the swap.
        return [record_to_wire(record) for record in records]

    return api
