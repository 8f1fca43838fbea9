"""C/C++ type spelling parser using Lark."""

import functools
import os
from typing import Any

from lark import Lark, Token
from lark.exceptions import LarkError
from lark.visitors import Transformer

from .types import Array, Const, Native, NativeType, Pointer, Reference

_g_parser: Lark | None = None


class SpellingError(RuntimeError):
    """Raised when a type spelling cannot be parsed."""


# Builtin integer spellings and their fixed-width equivalents (LP64).
ALIASES: dict[str, str] = {
    "_Bool": "bool",
    "signed char": "int8_t",
    "unsigned char": "uint8_t",
    "short": "int16_t",
    "short int": "int16_t",
    "signed short": "int16_t",
    "signed short int": "int16_t",
    "unsigned short": "uint16_t",
    "unsigned short int": "uint16_t",
    "int": "int32_t",
    "signed": "int32_t",
    "signed int": "int32_t",
    "unsigned": "uint32_t",
    "unsigned int": "uint32_t",
    "long": "int64_t",
    "long int": "int64_t",
    "signed long": "int64_t",
    "unsigned long": "uint64_t",
    "unsigned long int": "uint64_t",
    "long long": "int64_t",
    "long long int": "int64_t",
    "signed long long": "int64_t",
    "unsigned long long": "uint64_t",
    "unsigned long long int": "uint64_t",
    "size_t": "uint64_t",
    "ssize_t": "int64_t",
}

FIXED_WIDTH = frozenset(
    [
        "int8_t",
        "uint8_t",
        "int16_t",
        "uint16_t",
        "int32_t",
        "uint32_t",
        "int64_t",
        "uint64_t",
        "size_t",
    ]
)


def canonical_name(name: str) -> str:
    """Normalize a base type name to the spelling used by the registry."""
    if name.startswith("std::") and name[5:] in FIXED_WIDTH:
        name = name[5:]
    return ALIASES.get(name, name)


class _Pointer:
    def __init__(self, is_const: bool) -> None:
        self.is_const = is_const


class _Base:
    def __init__(self, native: NativeType, is_const: bool) -> None:
        self.native = native
        self.is_const = is_const


class _Dimension:
    def __init__(self, length: int) -> None:
        self.length = length


class _Reference:
    pass


class SpellingTransformer(Transformer):
    """Transform a spelling parse tree into a native type."""

    def cv(self, args: list[Token]) -> str:
        return str(args[0])

    def base(self, args: list[Any]) -> _Base:
        words = [str(a) for a in args if isinstance(a, Token)]
        return _Base(NativeType(canonical_name(" ".join(words))), "const" in args)

    def pointer(self, args: list[str]) -> _Pointer:
        return _Pointer(is_const="const" in args)

    def dimension(self, args: list[Token]) -> _Dimension:
        return _Dimension(int(args[0]))

    def lvalue(self, _args: list[Any]) -> _Reference:
        return _Reference()

    def rvalue(self, _args: list[Any]) -> _Reference:
        return _Reference()

    def start(self, args: list[Any]) -> Native:
        base = next(a for a in args if isinstance(a, _Base))
        t: Native = base.native
        if base.is_const or "const" in args:
            t = Const(t)

        for p in (a for a in args if isinstance(a, _Pointer)):
            t = Pointer(t)
            if p.is_const:
                t = Const(t)

        # char[2][3] is an array of 2 arrays of 3 chars
        for d in reversed([a for a in args if isinstance(a, _Dimension)]):
            t = Array(t, d.length)

        if any(isinstance(a, _Reference) for a in args):
            t = Reference(t)
        return t


def _parser() -> Lark:
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/spelling.lark", encoding="utf-8") as f:
            grammar = f.read()
        _g_parser = Lark(grammar, parser="lalr")
    return _g_parser


@functools.lru_cache(maxsize=None)
def parse_type(text: str) -> Native:
    """Parse a C/C++ type spelling such as ``"const char*"``.

    Raises:
        SpellingError: The spelling is not a supported type expression.
    """
    try:
        tree = _parser().parse(text)
    except LarkError as e:
        raise SpellingError(f"Cannot parse type spelling {text!r}") from e
    return SpellingTransformer().transform(tree)
