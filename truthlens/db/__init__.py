"""truthlens.db – in-memory analysis history."""
from .database import (
    MAX_HISTORY,
    HistoryRecord,
    build_record,
    clear_history,
    configure,
    query_history,
    record_history,
)

__all__ = [
    "MAX_HISTORY",
    "HistoryRecord",
    "build_record",
    "clear_history",
    "configure",
    "query_history",
    "record_history",
]
