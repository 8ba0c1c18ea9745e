"""Transaction boundary the concept service works through.

Every service call opens one unit of work: the reads that feed concordance
resolution and the resulting graph operations run in the same store
transaction, which is committed explicitly and rolled back when the ``with``
block exits with an exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from conceptgraph.domain.ports.persistence import ConceptGraphRepository


@dataclass(frozen=True, slots=True)
class ConceptGraphRepositories:
    """Repositories bound to one open transaction."""

    concepts: ConceptGraphRepository


@runtime_checkable
class ConceptGraphUnitOfWork(Protocol):
    @property
    def repositories(self) -> ConceptGraphRepositories: ...

    def __enter__(self) -> ConceptGraphUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
