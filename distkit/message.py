"""Messages exchanged between mining clients, the scheduler and miners."""

from __future__ import annotations

import enum
import hashlib
import json
from dataclasses import dataclass

_UINT64_LIMIT = 1 << 64


class MsgType(enum.IntEnum):
    """Kind of a message; the numeric values are part of the wire format."""

    JOIN = 0
    REQUEST = 1
    RESULT = 2


def hash_nonce(msg: str, nonce: int) -> int:
    """Hash ``"<msg> <nonce>"`` with SHA-256 and return its first 8 bytes as an integer."""
    digest = hashlib.sha256(f"{msg} {nonce}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


@dataclass(frozen=True)
class Message:
    """A Join, Request or Result message.

    Requests carry ``data`` and the inclusive nonce range ``lower``..``upper``;
    results carry the smallest ``hash_value`` found and its ``nonce``.
    """

    type: MsgType
    data: str = ""
    lower: int = 0
    upper: int = 0
    hash_value: int = 0
    nonce: int = 0

    def __str__(self) -> str:
        if self.type is MsgType.REQUEST:
            return f"[Request {self.data} {self.lower} {self.upper}]"
        if self.type is MsgType.RESULT:
            return f"[Result {self.hash_value} {self.nonce}]"
        return "[Join]"

    def to_json(self) -> bytes:
        """Encode the message as a JSON object for sending over the network."""
        return json.dumps(
            {
                "Type": int(self.type),
                "Data": self.data,
                "Lower": self.lower,
                "Upper": self.upper,
                "Hash": self.hash_value,
                "Nonce": self.nonce,
            },
            separators=(",", ":"),
        ).encode("utf-8")

    @classmethod
    def from_json(cls, payload: bytes | str) -> Message:
        """Decode a message; missing fields take their zero value.

        Field names match case-insensitively and unknown fields are ignored.
        Raises ``ValueError`` on malformed input.
        """
        try:
            obj = json.loads(payload)
        except (ValueError, UnicodeDecodeError) as err:
            raise ValueError(f"malformed message: {err}") from err
        if not isinstance(obj, dict):
            raise ValueError("message must be a JSON object")
        fields = {str(key).lower(): value for key, value in obj.items()}

        raw_type = fields.get("type", 0)
        if raw_type is None:
            raw_type = 0
        if isinstance(raw_type, bool) or not isinstance(raw_type, int):
            raise ValueError(f"invalid message type: {raw_type!r}")
        try:
            msg_type = MsgType(raw_type)
        except ValueError as err:
            raise ValueError(f"unknown message type: {raw_type}") from err

        data = fields.get("data", "")
        if data is None:
            data = ""
        if not isinstance(data, str):
            raise ValueError(f"invalid message data: {data!r}")

        return cls(
            type=msg_type,
            data=data,
            lower=_uint64(fields, "lower"),
            upper=_uint64(fields, "upper"),
            hash_value=_uint64(fields, "hash"),
            nonce=_uint64(fields, "nonce"),
        )


def _uint64(fields: dict, name: str) -> int:
    value = fields.get(name, 0)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {name!r} must be an unsigned integer, got {value!r}")
    if not 0 <= value < _UINT64_LIMIT:
        raise ValueError(f"field {name!r} out of range: {value}")
    return value


def new_request(data: str, lower: int, upper: int) -> Message:
    """A request to search nonces ``lower``..``upper`` for ``data``."""
    return Message(MsgType.REQUEST, data=data, lower=lower, upper=upper)


def new_result(hash_value: int, nonce: int) -> Message:
    """A result carrying the smallest hash found and its nonce."""
    return Message(MsgType.RESULT, hash_value=hash_value, nonce=nonce)


def new_join() -> Message:
    """A message by which a miner announces itself to the scheduler."""
    return Message(MsgType.JOIN)