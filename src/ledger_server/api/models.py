"""
Pydantic models for API requests and responses.

These models describe the JSON bodies exchanged between the HTTP layer and
its clients. They provide:
- Request validation (bad bodies become 400 responses)
- Clear API documentation via FastAPI's automatic OpenAPI schema generation
- Conversion to and from the core :class:`~ledger_server.core.records.Record`

Field names on the wire are camelCase (``previousHash``) so chains can be
exchanged with other nodes unchanged.
"""

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator

from ledger_server.core.records import Record, record_from_wire
from ledger_server.core.timestamps import parse_rfc3339_nano

# ============================================================================
# REQUEST MODELS (Client → Server)
# ============================================================================


class MineRequest(BaseModel):
    """
    Request to append a record carrying ``data``.

    Attributes:
        data: Opaque payload for the new record. Must be non-empty; the route
            rejects ``""`` with a 400.
    """

    data: StrictStr


# ============================================================================
# SHARED MODELS
# ============================================================================


class RecordModel(BaseModel):
    """
    Wire representation of one ledger record.

    Used both for replacement request bodies and for response documentation.
    The digest fields are opaque strings and are never interpreted here.

    Attributes:
        index: Zero-based sequence number.
        timestamp: RFC 3339 timestamp, any offset, up to nanosecond precision.
        data: Record payload.
        previous_hash: Digest of the preceding record (``"0"`` for genesis).
        hash: Digest of this record.
    """

    model_config = ConfigDict(populate_by_name=True)

    index: StrictInt
    timestamp: StrictStr
    data: StrictStr
    previous_hash: StrictStr = Field(alias="previousHash")
    hash: StrictStr

    @field_validator("timestamp")
    @classmethod
    def _timestamp_is_rfc3339(cls, value: str) -> str:
        parse_rfc3339_nano(value)
        return value

    def to_record(self) -> Record:
        """Convert to a core record through the shared wire codec."""
        return record_from_wire(self.model_dump(by_alias=True))


# ============================================================================
# RESPONSE MODELS (Server → Client)
# ============================================================================


class HealthResponse(BaseModel):
    """
    Liveness and integrity summary.

    Attributes:
        status: ``"ok"`` if the held chain re-validates, else ``"corrupt"``.
        length: Number of records held.
        tip: Digest of the last record.
    """

    status: str
    length: int
    tip: str
