from .store import (
    RecordStore,
    Increment,
    ArrayUnion,
    SERVER_TIMESTAMP
)
from .memory import InMemoryRecordStore
