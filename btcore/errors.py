class DecodeError(ValueError):
    """Raised when a bencoded buffer cannot be decoded.

    `position` is the byte offset in the input where decoding failed.
    """

    def __init__(self, reason: str, position: int):
        super().__init__(f"{reason} at offset {position}")
        self.reason = reason
        self.position = position


class MalformedNumber(DecodeError):
    pass


class NumberOutOfRange(DecodeError):
    pass


class InvalidLength(NumberOutOfRange):
    pass


class UnexpectedEof(DecodeError):
    pass


class UnexpectedToken(DecodeError):
    pass


class NonStringKey(DecodeError):
    pass


class TrailingData(DecodeError):
    pass


class NestingTooDeep(DecodeError):
    pass
