from datetime import datetime, timedelta, timezone

API_KEY = "test-internal-key"
NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def days_from_now(days: float) -> datetime:
    return NOW + timedelta(days=days)
