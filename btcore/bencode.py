import functools
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from .errors import (
    DecodeError,
    InvalidLength,
    MalformedNumber,
    NestingTooDeep,
    NonStringKey,
    TrailingData,
    UnexpectedEof,
    UnexpectedToken,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 128
MAX_STRING_LENGTH = 2**32 - 1

# Below the smallest limit sys.set_int_max_str_digits accepts
DIGIT_CHUNK = 600


@dataclass(frozen=True)
class Text:
    """A bencoded byte string.

    `value` is the payload decoded as UTF-8, with invalid sequences replaced.
    `raw` holds the payload bytes untouched and does not take part in
    equality.
    """

    value: str
    raw: bytes | None = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if self.raw is None:
            object.__setattr__(self, "raw", self.value.encode())

    @classmethod
    def from_bytes(cls, raw: bytes) -> "Text":
        return cls(raw.decode("utf-8", errors="replace"), raw)


@dataclass(frozen=True)
class Integer:
    value: int


@dataclass(frozen=True)
class List:
    items: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))

    def __getitem__(self, index):
        return self.items[index]

    def __iter__(self):
        return iter(self.items)

    def __len__(self):
        return len(self.items)


@dataclass(frozen=True, eq=False)
class Dictionary:
    """A bencoded dictionary; entries are copied and read-only."""

    entries: MappingProxyType = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Dictionary):
            return NotImplemented
        return dict(self.entries) == dict(other.entries)

    def __hash__(self) -> int:
        return hash(frozenset(self.entries.items()))

    def __getitem__(self, key: str):
        return self.entries[key]

    def __contains__(self, key) -> bool:
        return key in self.entries

    def __iter__(self):
        return iter(self.entries)

    def __len__(self):
        return len(self.entries)


Value = Text | Integer | List | Dictionary


def atomic(production):
    """Put the cursor back where it was if `production` fails."""

    @functools.wraps(production)
    def wrapper(self, *args, **kwargs):
        current, depth = self.current, self.depth
        try:
            return production(self, *args, **kwargs)
        except DecodeError:
            self.current, self.depth = current, depth
            raise

    return wrapper


def starts_string(c: bytes) -> bool:
    return c.isdigit() or c == b"-"


def parse_digits(digits: bytes) -> int:
    """Convert a run of ASCII digits of any length to an int.

    Converts in chunks that stay under the interpreter's int/str digit limit.
    """
    n = 0
    for i in range(0, len(digits), DIGIT_CHUNK):
        chunk = digits[i : i + DIGIT_CHUNK]
        n = n * 10 ** len(chunk) + int(chunk)
    return n


class Decoder:
    def __init__(self, source: bytes, max_depth: int = DEFAULT_MAX_DEPTH):
        if isinstance(source, (str, int)):
            raise TypeError(f"Decoder expects bytes, got {type(source).__name__}")
        if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
            raise ValueError(f"max_depth must be a positive integer, got {max_depth!r}")

        self.source = bytes(source)
        self.current = 0
        self.depth = 0
        self.max_depth = max_depth

    def decode(self) -> Value:
        """Decode exactly one value spanning the rest of the input."""
        try:
            value = self.read_value()
            if not self.is_at_end():
                raise TrailingData(
                    f"{len(self.source) - self.current} unconsumed byte(s)",
                    self.current,
                )
        except DecodeError as e:
            logger.debug(f"Failed to decode bencoded data: {e}")
            raise

        return value

    def decode_partial(self) -> tuple[Value, bytes]:
        """Decode one value and return it with the bytes that follow it."""
        try:
            value = self.read_value()
        except DecodeError as e:
            logger.debug(f"Failed to decode bencoded data: {e}")
            raise

        return value, self.source[self.current :]

    def read_value(self) -> Value:
        current, depth = self.current, self.depth
        try:
            return self.decode_one()
        except RecursionError:
            # max_depth was set beyond what the interpreter stack can hold
            self.current, self.depth = current, depth
            raise NestingTooDeep("nesting exceeds the interpreter recursion limit", current) from None

    def decode_one(self) -> Value:
        c = self.peek()
        match c:
            case b"":
                raise UnexpectedEof("expected a value, reached end of input", self.current)

            case b"i":
                return self.read_integer()

            case b"l":
                return self.read_list()

            case b"d":
                return self.read_dict()

            case _ if starts_string(c):
                return self.read_string()

            case _:
                raise UnexpectedToken(f"expected a value, got {c!r}", self.current)

    @atomic
    def read_string(self) -> Text:
        start = self.current
        length = self.read_number()
        if not 0 <= length <= MAX_STRING_LENGTH:
            if length < 0:
                raise InvalidLength("negative string length", start)
            raise InvalidLength(f"string length exceeds {MAX_STRING_LENGTH}", start)

        self.expect(b":")

        end = self.current + length
        if end > len(self.source):
            raise UnexpectedEof(
                f"string of length {length} is missing {end - len(self.source)} byte(s)",
                self.current,
            )

        raw = self.source[self.current : end]
        self.current = end

        return Text.from_bytes(raw)

    @atomic
    def read_integer(self) -> Integer:
        self.expect(b"i")

        # TODO: reject leading zeros and "-0" once strict decoding is wanted
        n = self.read_number()

        self.expect(b"e")

        return Integer(n)

    @atomic
    def read_list(self) -> List:
        self.expect(b"l")
        self.enter()

        items = []
        while self.peek() != b"e":
            items.append(self.decode_one())

        self.expect(b"e")
        self.depth -= 1

        return List(items)

    @atomic
    def read_dict(self) -> Dictionary:
        self.expect(b"d")
        self.enter()

        entries = {}
        while self.peek() != b"e":
            c = self.peek()
            if not c:
                raise UnexpectedEof("expected a key, reached end of input", self.current)
            if not starts_string(c):
                raise NonStringKey(f"dictionary key must be a string, got {c!r}", self.current)

            key = self.read_string()
            if self.peek() == b"e":
                raise UnexpectedToken(f"missing value for key {key.value!r}", self.current)

            # Duplicate keys: the last one wins
            entries[key.value] = self.decode_one()

        self.expect(b"e")
        self.depth -= 1

        return Dictionary(entries)

    @atomic
    def read_number(self) -> int:
        start = self.current
        if self.peek() == b"-":
            self.advance()

        digits = self.current
        while self.peek().isdigit():
            self.advance()

        if self.current == digits:
            raise MalformedNumber("expected at least one digit", self.current)

        n = parse_digits(self.source[digits : self.current])
        return -n if start != digits else n

    def enter(self):
        self.depth += 1
        if self.depth > self.max_depth:
            raise NestingTooDeep(
                f"nesting exceeds the maximum depth of {self.max_depth}",
                self.current - 1,
            )

    def peek(self) -> bytes:
        return self.source[self.current : self.current + 1]

    def advance(self) -> bytes:
        if self.is_at_end():
            raise UnexpectedEof("unexpected end of input", self.current)

        c = self.peek()
        self.current += 1
        return c

    def expect(self, char: bytes) -> bytes:
        c = self.peek()
        if c != char:
            if not c:
                raise UnexpectedEof(f"expected {char!r}, reached end of input", self.current)
            raise UnexpectedToken(f"expected {char!r}, got {c!r}", self.current)

        return self.advance()

    def is_at_end(self) -> bool:
        return self.current >= len(self.source)

    @classmethod
    def from_file(cls, file: str | Path, max_depth: int = DEFAULT_MAX_DEPTH) -> "Decoder":
        with open(file, mode="rb") as f:
            data = f.read()
        logger.debug(f"Read {len(data)} bytes from {file}")
        return cls(data, max_depth=max_depth)


def decode(data: bytes, max_depth: int = DEFAULT_MAX_DEPTH) -> Value:
    return Decoder(data, max_depth=max_depth).decode()


def decode_partial(data: bytes, max_depth: int = DEFAULT_MAX_DEPTH) -> tuple[Value, bytes]:
    return Decoder(data, max_depth=max_depth).decode_partial()
