from datetime import datetime, timezone


def utc_now() -> datetime:
    """Heure courante en UTC, sans fuseau (convention de stockage des colonnes DateTime)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Ramène une date avec fuseau en UTC sans fuseau; une date naïve est supposée déjà en UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
