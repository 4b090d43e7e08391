"""Uniqueness helpers for collected topic ids and slugs."""

from __future__ import annotations

from typing import Protocol


class KeyStore(Protocol):
    def has(self, key: str) -> bool: ...  # noqa: D401
    def add(self, key: str) -> None: ...  # noqa: D401


class InMemoryKeyStore:
    """Simple in-memory keystore scoped to one run."""

    def __init__(self) -> None:
        self._set: set[str] = set()

    def has(self, key: str) -> bool:
        return key in self._set

    def add(self, key: str) -> None:
        self._set.add(key)

    def __len__(self) -> int:
        return len(self._set)


def claim(keystore: KeyStore, key: str) -> bool:
    """Register ``key``; return False if it was already seen."""
    if keystore.has(key):
        return False
    keystore.add(key)
    return True
