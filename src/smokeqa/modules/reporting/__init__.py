from .evidence import EvidenceStore, sanitize_prefix
from .recorder import RecordEntry, ResultRecorder, cell_address
from .sheets import GoogleSheetsSink, LogSink, ResultSink

__all__ = [
    "EvidenceStore",
    "sanitize_prefix",
    "RecordEntry",
    "ResultRecorder",
    "cell_address",
    "GoogleSheetsSink",
    "LogSink",
    "ResultSink",
]
