from datetime import datetime, timezone


def utcnow() -> datetime:
    """Python-side timestamp default; keeps sub-second ordering that SQLite's CURRENT_TIMESTAMP drops."""
    return datetime.now(timezone.utc)
