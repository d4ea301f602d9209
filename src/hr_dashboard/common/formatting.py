from __future__ import annotations


def format_enum_value(value: str) -> str:
    """'dental_care' -> 'Dental Care'."""
    return " ".join(word[:1].upper() + word[1:] for word in str(value).split("_"))


def format_pkr(amount: int) -> str:
    return f"Rs. {int(amount):,}"
