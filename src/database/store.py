"""Record store abstraction shared by the Firestore and in-memory backends.

Documents are addressed by slash-separated paths (``gigs/g1/testers/t1``) and
written with merge semantics. Field values may be one of the transforms below,
which each backend applies atomically per document.
"""
from typing import Any, Dict, List, Optional, Tuple


class Increment:
    """Add ``amount`` to a numeric field (missing fields count as 0)."""

    def __init__(self, amount):
        self.amount = amount

    def __repr__(self):
        return f"Increment({self.amount!r})"


class ArrayUnion:
    """Append values to an array field, skipping ones already present."""

    def __init__(self, values):
        self.values = list(values)

    def __repr__(self):
        return f"ArrayUnion({self.values!r})"


class _ServerTimestamp:
    def __repr__(self):
        return "SERVER_TIMESTAMP"


# Replaced by the store's own clock at write time
SERVER_TIMESTAMP = _ServerTimestamp()


def split_path(path: str) -> Tuple[str, str]:
    """Split a document path into its collection path and document id."""
    parts = path.strip('/').split('/')
    if len(parts) < 2 or len(parts) % 2:
        raise ValueError(f"Not a document path: {path}")
    return '/'.join(parts[:-1]), parts[-1]


class RecordStore:
    """Interface every backend implements."""

    def read(self, path: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def merge_write(self, path: str, fields: Dict[str, Any]) -> None:
        raise NotImplementedError

    def query(self, collection: str, order_by: Optional[str] = None, descending: bool = False,
              limit: Optional[int] = None) -> List[Tuple[str, Dict[str, Any]]]:
        """Return ``(doc_id, data)`` pairs from a collection."""
        raise NotImplementedError

    def atomic_increment(self, path: str, field: str, delta) -> None:
        self.merge_write(path, {field: Increment(delta)})

    def atomic_set_union(self, path: str, field: str, values) -> None:
        self.merge_write(path, {field: ArrayUnion(values)})
