"""In-memory key/value store in which every key holds an ordered list of values."""

from __future__ import annotations


class KVStore:
    """Maps each key to an ordered list of byte-string values."""

    def __init__(self, internal: dict[str, list[bytes]] | None = None) -> None:
        self._internal: dict[str, list[bytes]] = {} if internal is None else internal

    def put(self, key: str, value: bytes) -> None:
        """Append ``value`` to the values held under ``key``."""
        self._internal.setdefault(key, []).append(bytes(value))

    def get(self, key: str) -> list[bytes]:
        """Return the values held under ``key``, oldest first; empty if none."""
        return list(self._internal.get(key, ()))

    def delete(self, key: str) -> None:
        """Remove every value held under ``key``."""
        self._internal.pop(key, None)

    def update(self, key: str, old_value: bytes, new_value: bytes) -> None:
        """Replace the first ``old_value`` under ``key`` with ``new_value``.

        The new value always goes to the end of the list. If ``old_value`` is
        not present, ``new_value`` is simply appended.
        """
        values = self._internal.setdefault(key, [])
        try:
            values.remove(bytes(old_value))
        except ValueError:
            pass
        values.append(bytes(new_value))


def create_with_backdoor() -> tuple[KVStore, dict[str, list[bytes]]]:
    """Create a store together with a live handle on its inner mapping."""
    internal: dict[str, list[bytes]] = {}
    return KVStore(internal), internal