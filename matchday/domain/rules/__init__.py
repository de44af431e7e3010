from .lock import compute_lock_at, is_locked, parse_timestamp
from .result import effective_pair, resolve_result

__all__ = [
    "compute_lock_at",
    "effective_pair",
    "is_locked",
    "parse_timestamp",
    "resolve_result",
]
