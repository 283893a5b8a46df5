"""Document store interface and optimistic transactions.

Transactions read documents through a snapshot that records each document's
revision, stage full-document writes, and commit them all at once on the
condition that none of the documents read has changed since. A conflicting
commit re-runs the whole transaction function.
"""

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, TypeVar

from client_portal.domain.errors import NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 5


class _DeleteField:
    def __repr__(self) -> str:
        return "DELETE_FIELD"


DELETE_FIELD = _DeleteField()


class TransactionConflictError(RuntimeError):
    """Raised when a transaction keeps losing to concurrent writers."""


@dataclass(frozen=True)
class DocumentSnapshot:
    """A document as read, with the revision it was read at."""

    path: str
    data: dict[str, object] | None
    revision: int = 0

    @property
    def exists(self) -> bool:
        """Return True when the document exists."""
        return self.data is not None


@dataclass(frozen=True)
class DocumentWrite:
    """Full replacement content for one document."""

    path: str
    data: dict[str, object]


class DocumentStore(Protocol):
    """Persistence interface for path-addressed JSON documents."""

    def get(self, path: str) -> DocumentSnapshot:
        """Return the current snapshot of a document (revision 0 if absent)."""

    def commit(
        self, writes: list[DocumentWrite], preconditions: dict[str, int]
    ) -> bool:
        """Apply all writes atomically if every precondition revision matches.

        Returns False without writing anything on a conflict.
        """


def merge_document(
    existing: dict[str, object] | None, patch: dict[str, object]
) -> dict[str, object]:
    """Deep-merge ``patch`` into ``existing``; DELETE_FIELD removes keys."""
    merged = copy.deepcopy(existing) if existing else {}
    for key, value in patch.items():
        if value is DELETE_FIELD:
            merged.pop(key, None)
        elif isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_document(merged[key], value)  # type: ignore[arg-type]
        else:
            merged[key] = strip_deletes(value) if isinstance(value, dict) else value
    return merged


def strip_deletes(data: dict[str, object]) -> dict[str, object]:
    """Return a copy of ``data`` without DELETE_FIELD markers."""
    return {
        key: strip_deletes(value) if isinstance(value, dict) else value
        for key, value in data.items()
        if value is not DELETE_FIELD
    }


class Transaction:
    """Snapshot reads plus staged writes against a document store."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._reads: dict[str, DocumentSnapshot] = {}
        self._writes: dict[str, dict[str, object]] = {}

    def get(self, path: str) -> DocumentSnapshot:
        """Read a document, recording its revision as a commit precondition."""
        if path not in self._reads:
            self._reads[path] = self._store.get(path)
        return self._reads[path]

    def set(self, path: str, data: dict[str, object], merge: bool = False) -> None:
        """Stage a document write, replacing it unless ``merge`` is set."""
        if merge:
            self._writes[path] = merge_document(self._current(path), data)
        else:
            self._writes[path] = strip_deletes(data)

    def update(self, path: str, data: dict[str, object]) -> None:
        """Stage a merge into a document that must already exist."""
        current = self._current(path)
        if current is None:
            raise NotFoundError("Document not found.")
        self._writes[path] = merge_document(current, data)

    def commit(self) -> bool:
        """Commit staged writes; return False on a conflict."""
        if not self._writes:
            return True
        preconditions = {path: snap.revision for path, snap in self._reads.items()}
        writes = [DocumentWrite(path, data) for path, data in self._writes.items()]
        return self._store.commit(writes, preconditions)

    def _current(self, path: str) -> dict[str, object] | None:
        if path in self._writes:
            return self._writes[path]
        return self.get(path).data


def run_transaction(
    store: DocumentStore,
    operation: Callable[[Transaction], T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> T:
    """Run ``operation`` in a transaction, retrying it on commit conflicts."""
    for attempt in range(1, max_attempts + 1):
        transaction = Transaction(store)
        result = operation(transaction)
        if transaction.commit():
            return result
        logger.info("Transaction conflict, retrying", extra={"attempt": attempt})
    raise TransactionConflictError(
        f"Transaction did not commit after {max_attempts} attempts"
    )
