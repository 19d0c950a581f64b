"""
Record identifiers.

Every table is keyed by a 16-byte ``Token`` written as 32 hex characters on
the wire. The visibility table is the exception and uses a small integer
``VisibilityToken`` written as a decimal string.
"""
import binascii
from functools import total_ordering
from typing import Any, Union

from pydantic_core import core_schema

from ..exceptions import TokenParseError

TOKEN_LENGTH = 16


@total_ordering
class Token:
    __slots__ = ("_bytes",)

    def __init__(self, value: bytes):
        if len(value) != TOKEN_LENGTH:
            raise TokenParseError(
                f"invalid token length: expected {TOKEN_LENGTH} bytes, but found {len(value)}"
            )
        object.__setattr__(self, "_bytes", bytes(value))

    @classmethod
    def from_str(cls, text: str) -> "Token":
        if not isinstance(text, str):
            raise TokenParseError(f"cannot decode token from {type(text).__name__}")
        if len(text) != TOKEN_LENGTH * 2:
            raise TokenParseError(
                f"invalid length: expected length {TOKEN_LENGTH * 2}, but found {len(text)}",
                {"text": text},
            )
        try:
            return cls(binascii.unhexlify(text))
        except (binascii.Error, ValueError) as e:
            raise TokenParseError(f"cannot decode token {text!r}: {e}", {"text": text})

    @classmethod
    def from_bytes(cls, value: bytes) -> "Token":
        return cls(value)

    @property
    def bytes(self) -> bytes:
        return self._bytes

    def __setattr__(self, name, value):
        raise AttributeError("Token is immutable")

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return self._bytes == other._bytes

    def __lt__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return self._bytes < other._bytes

    def __hash__(self):
        return hash(self._bytes)

    def __str__(self):
        return self._bytes.hex()

    def __repr__(self):
        return f"Token('{self}')"

    def __reduce__(self):
        return (Token, (self._bytes,))

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            _validate_token,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )


def _validate_token(value: Any) -> Token:
    if isinstance(value, Token):
        return value
    return Token.from_str(value)


@total_ordering
class VisibilityToken:
    __slots__ = ("_value",)

    def __init__(self, value: int):
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise TokenParseError(f"invalid visibility token {value!r}")
        object.__setattr__(self, "_value", value)

    @classmethod
    def from_str(cls, text: str) -> "VisibilityToken":
        if not isinstance(text, str) or not (text.isascii() and text.isdigit()):
            raise TokenParseError(f'invalid visibility token "{text}"', {"text": text})
        return cls(int(text))

    @property
    def value(self) -> int:
        return self._value

    def __setattr__(self, name, value):
        raise AttributeError("VisibilityToken is immutable")

    def __eq__(self, other):
        if not isinstance(other, VisibilityToken):
            return NotImplemented
        return self._value == other._value

    def __lt__(self, other):
        if not isinstance(other, VisibilityToken):
            return NotImplemented
        return self._value < other._value

    def __hash__(self):
        return hash(("visibility", self._value))

    def __str__(self):
        return str(self._value)

    def __repr__(self):
        return f"VisibilityToken({self._value})"

    def __reduce__(self):
        return (VisibilityToken, (self._value,))

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            _validate_visibility_token,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )


def _validate_visibility_token(value: Any) -> VisibilityToken:
    if isinstance(value, VisibilityToken):
        return value
    return VisibilityToken.from_str(value)


def as_token(value: Union[Token, str]) -> Token:
    """Accept a token or its hex text"""
    if isinstance(value, Token):
        return value
    return Token.from_str(value)


def as_visibility_token(value: Union[VisibilityToken, int, str]) -> VisibilityToken:
    if isinstance(value, VisibilityToken):
        return value
    if isinstance(value, int):
        return VisibilityToken(value)
    return VisibilityToken.from_str(value)
