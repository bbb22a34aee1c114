from __future__ import annotations


def _or_placeholder(value: str, placeholder: str) -> str:
    value = value.strip()
    return value if value else placeholder
