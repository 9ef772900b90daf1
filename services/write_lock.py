# services/write_lock.py
"""
Single-writer serialization for folder graph mutations.

Validation (existence, cycle check) and the write it guards run under one
process-wide lock, so two concurrent moves cannot both pass the cycle check
against the same pre-mutation snapshot. Re-entrant because FolderStore.delete
hands off to CascadeDeleter while holding it.
"""
import threading
from functools import wraps

_write_lock = threading.RLock()


def serialized(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        with _write_lock:
            return func(*args, **kwargs)
    return wrapper
