"""Small helpers shared by models, services and the bot."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current UTC time without tzinfo; every stored timestamp is naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def full_name(first_name: str | None, last_name: str | None) -> str:
    return " ".join(part for part in (first_name, last_name) if part)


def format_order_number(sequence: int) -> str:
    """000042 for the 42nd order."""
    return f"{sequence:06d}"
