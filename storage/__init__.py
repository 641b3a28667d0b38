from .schema import DIFFICULTIES, DTYPES, QuizResultRow
from .store import (
    DATA_FILE,
    ParquetHistoryStore,
    init_store,
    validate_records,
    load_all,
    export_ndjson,
)

__all__ = [
    "DIFFICULTIES",
    "DTYPES",
    "QuizResultRow",
    "DATA_FILE",
    "ParquetHistoryStore",
    "init_store",
    "validate_records",
    "load_all",
    "export_ndjson",
]
