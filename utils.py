from typing import TypeVar

T = TypeVar("T")


def not_none(value: T | None, what: str = "value") -> T:
    """Narrow an Optional that the caller knows is set, e.g. a row read back right after writing it"""
    if value is None:
        raise LookupError(f"Expected {what} to exist, found nothing")
    return value
