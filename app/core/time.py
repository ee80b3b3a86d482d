from datetime import datetime, timezone


def utc_now() -> datetime:
    """Timezone-aware now; sub-second precision keeps newest-first listings stable."""
    return datetime.now(timezone.utc)
