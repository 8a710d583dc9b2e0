"""Searches a nonce range for the smallest hash."""

from __future__ import annotations

from distkit.message import Message, MsgType, hash_nonce, new_result


def mine(msg: str, lower: int, upper: int) -> tuple[int, int]:
    """Return ``(hash, nonce)`` with the smallest hash over ``lower``..``upper``.

    The range is inclusive; on ties the lowest nonce wins. If ``lower`` is
    above ``upper`` the hash of ``lower`` itself is returned.
    """
    best_hash, best_nonce = hash_nonce(msg, lower), lower
    for nonce in range(lower + 1, upper + 1):
        current = hash_nonce(msg, nonce)
        if current < best_hash:
            best_hash, best_nonce = current, nonce
    return best_hash, best_nonce


def handle_request(message: Message) -> Message:
    """Mine the range of a request message and return the result message."""
    if message.type is not MsgType.REQUEST:
        raise ValueError(f"expected a request, got {message}")
    best_hash, best_nonce = mine(message.data, message.lower, message.upper)
    return new_result(best_hash, best_nonce)