"""Error taxonomy of the concept graph core.

Each error carries a transport-neutral ``status`` so callers (HTTP handlers,
the CLI) can map failures to their own status codes.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorStatus(StrEnum):
    BAD_REQUEST = "bad_request"
    CONFLICT = "conflict"
    UNPROCESSABLE = "unprocessable"
    UNAVAILABLE = "unavailable"


class ConceptGraphError(Exception):
    """Base class for all errors raised by the concept graph core."""

    status: ErrorStatus = ErrorStatus.UNAVAILABLE


class InvalidRequestError(ConceptGraphError):
    """Payload is malformed or incomplete; the write was not attempted."""

    status = ErrorStatus.BAD_REQUEST

    def __init__(self, message: str, *, field: str | None = None, uuid: str | None = None) -> None:
        super().__init__(message)
        self.field = field
        self.uuid = uuid

    @classmethod
    def missing(cls, field: str, uuid: str | None) -> InvalidRequestError:
        return cls(
            f"Invalid request, no {field} has been supplied (uuid={uuid})",
            field=field,
            uuid=uuid,
        )


class ConcordanceNotSupportedError(InvalidRequestError):
    """The aggregate's kind does not allow more than one source record."""


class ConcordanceConflictError(ConceptGraphError):
    """The write would take the anchor of another concordance."""

    status = ErrorStatus.CONFLICT

    def __init__(self, source_uuid: str, foreign_pref_uuid: str) -> None:
        super().__init__(
            "Cannot currently process this record as it will break an existing "
            f"concordance with prefUUID: {foreign_pref_uuid}"
        )
        self.source_uuid = source_uuid
        self.foreign_pref_uuid = foreign_pref_uuid


class DataIntegrityError(ConceptGraphError):
    """Stored concordance state contradicts the graph invariants."""

    status = ErrorStatus.UNPROCESSABLE


class UnrecognizedTypeError(ConceptGraphError):
    """A node's labels do not resolve to a known concept kind."""

    status = ErrorStatus.UNPROCESSABLE


class StoreError(ConceptGraphError):
    """The graph store rejected or failed to execute a request."""

    status = ErrorStatus.UNAVAILABLE


class StoreUnavailableError(StoreError):
    """The graph store could not be reached."""
