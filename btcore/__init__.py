from .bencode import (
    DEFAULT_MAX_DEPTH,
    MAX_STRING_LENGTH,
    Decoder,
    Dictionary,
    Integer,
    List,
    Text,
    Value,
    decode,
    decode_partial,
)
from .errors import (
    DecodeError,
    InvalidLength,
    MalformedNumber,
    NestingTooDeep,
    NonStringKey,
    NumberOutOfRange,
    TrailingData,
    UnexpectedEof,
    UnexpectedToken,
)
from .node_id import NODE_ID_BITS, NODE_ID_BYTES, NodeId, distance

__version__ = "0.1.0"
