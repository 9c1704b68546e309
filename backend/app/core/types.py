"""Custom SQLAlchemy types and column helpers shared by all models"""
from datetime import datetime
from sqlalchemy import TypeDecorator, String
import threading
import time
import uuid

_sequence_lock = threading.Lock()
_last_sequence = 0


def generate_uuid():
    """Generate a UUID string"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every DateTime column stores"""
    return datetime.utcnow()


def next_sequence() -> int:
    """Strictly increasing in this process, nanosecond wall-clock order across processes"""
    global _last_sequence
    with _sequence_lock:
        _last_sequence = max(time.time_ns(), _last_sequence + 1)
        return _last_sequence


class GUID(TypeDecorator):
    """Platform-independent GUID type that stores UUIDs as VARCHAR(36)"""
    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return str(value)
        return value
