import copy
import logging
import threading
from src.database.store import RecordStore, Increment, ArrayUnion, SERVER_TIMESTAMP, split_path
from src.utils.clock import SystemClock

logger = logging.getLogger(__name__)


class InMemoryRecordStore(RecordStore):
    """Process-local record store with Firestore merge semantics.

    Used for tests and local development. Every write to a document runs under
    a single lock, so increments and unions from concurrent threads commute the
    same way they do in Firestore.
    """

    def __init__(self, clock=None):
        self.clock = clock or SystemClock()
        self.collections = {}
        self._lock = threading.Lock()

    def _apply(self, current, value):
        if isinstance(value, Increment):
            base = current if isinstance(current, (int, float)) and not isinstance(current, bool) else 0
            return base + value.amount
        if isinstance(value, ArrayUnion):
            merged = list(current) if isinstance(current, list) else []
            for item in value.values:
                if item not in merged:
                    merged.append(item)
            return merged
        if value is SERVER_TIMESTAMP:
            return self.clock.now()
        if isinstance(value, dict):
            merged = dict(current) if isinstance(current, dict) else {}
            for key, nested in value.items():
                merged[key] = self._apply(merged.get(key), nested)
            return merged
        return copy.deepcopy(value)

    def read(self, path):
        collection, doc_id = split_path(path)
        with self._lock:
            doc = self.collections.get(collection, {}).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def merge_write(self, path, fields):
        collection, doc_id = split_path(path)
        with self._lock:
            docs = self.collections.setdefault(collection, {})
            docs[doc_id] = self._apply(docs.get(doc_id), fields)

    def query(self, collection, order_by=None, descending=False, limit=None):
        with self._lock:
            docs = list(self.collections.get(collection.strip('/'), {}).items())

        if order_by:
            # Firestore leaves out documents that lack the ordering field
            docs = [(doc_id, data) for doc_id, data in docs if data.get(order_by) is not None]
            docs.sort(key=lambda item: item[1][order_by], reverse=descending)

        if limit is not None:
            docs = docs[:limit]
        return [(doc_id, copy.deepcopy(data)) for doc_id, data in docs]
