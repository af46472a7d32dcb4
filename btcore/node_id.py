"""Node identifiers for a Kademlia-style DHT and the XOR distance between them."""

import hashlib
import os
from collections.abc import Iterable

NODE_ID_BITS = 160
NODE_ID_BYTES = NODE_ID_BITS // 8


class NodeId:
    """An immutable 160-bit node identifier.

    Identifiers are compared through `distance` only; there is no ordering
    between them.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: bytes):
        if isinstance(raw, (str, int)):
            raise TypeError(f"NodeId expects bytes, got {type(raw).__name__}")

        raw = bytes(raw)
        if len(raw) != NODE_ID_BYTES:
            raise ValueError(f"NodeId must be {NODE_ID_BYTES} bytes, got {len(raw)}")

        object.__setattr__(self, "_raw", raw)

    def __setattr__(self, name, value):
        raise AttributeError("NodeId is immutable")

    def __bytes__(self) -> bytes:
        return self._raw

    def __int__(self) -> int:
        return int.from_bytes(self._raw, byteorder="big")

    def __len__(self) -> int:
        return NODE_ID_BYTES

    def __eq__(self, other) -> bool:
        if not isinstance(other, NodeId):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        return hash(self._raw)

    def __repr__(self) -> str:
        return f"NodeId({self.hex()})"

    def hex(self) -> str:
        return self._raw.hex()

    def distance(self, other: "NodeId") -> int:
        """XOR of both identifiers read as unsigned big-endian integers."""
        return int(self) ^ int(other)

    def closest(self, node_ids: Iterable["NodeId"]) -> "NodeId":
        """Return the node id nearest to this one.

        Ties go to the first candidate; with no candidates this id is returned.
        """
        return min(node_ids, key=self.distance, default=self)

    @classmethod
    def generate(cls) -> "NodeId":
        return cls(os.urandom(NODE_ID_BYTES))

    @classmethod
    def from_key(cls, key: str | bytes) -> "NodeId":
        if isinstance(key, str):
            key = key.encode()
        return cls(hashlib.sha1(key).digest())

    @classmethod
    def from_hex(cls, text: str) -> "NodeId":
        return cls(bytes.fromhex(text))


def distance(a: NodeId, b: NodeId) -> int:
    return a.distance(b)
