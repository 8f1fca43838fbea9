"""Mapping of native types onto D-Bus wire type codes.

A signature is derived once, when the module that declares a vtable asks for
it, and cached from then on. Every type in the argument list must map to
exactly one code; there is no best-effort fallback because a wrong code would
silently corrupt wire compatibility.
"""

import ctypes
import functools
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from .spelling import parse_type
from .types import (
    BOOL,
    CHAR,
    CHAR_PTR,
    DOUBLE,
    FLOAT,
    INT8,
    INT16,
    INT32,
    INT64,
    STRING,
    STRING_VIEW,
    UINT8,
    UINT16,
    UINT32,
    UINT64,
    Array,
    Const,
    Native,
    NativeType,
    Pointer,
    Reference,
)

logger = logging.getLogger(__name__)


class SignatureError(RuntimeError):
    """Base class for signature derivation failures."""


class UnmappedTypeError(SignatureError):
    """Raised when a type has no D-Bus type code."""


class InvalidSignatureError(SignatureError):
    """Raised when a signature string contains unknown type codes."""


class RegistryConflictError(SignatureError):
    """Raised when extending a registry would change an existing mapping."""


@dataclass(frozen=True, slots=True)
class Signature:
    """A D-Bus type signature: one code per argument plus a NUL terminator."""

    codes: tuple[str, ...]

    @property
    def chars(self) -> tuple[str, ...]:
        """All characters of the C string, terminator included."""
        return (*self.codes, "\0")

    def __len__(self) -> int:
        return len(self.codes) + 1

    def __iter__(self) -> Iterator[str]:
        return iter(self.chars)

    def __getitem__(self, index: int) -> str:
        return self.chars[index]

    def __str__(self) -> str:
        return "".join(self.codes)

    def __bytes__(self) -> bytes:
        return str(self).encode("ascii") + b"\0"


EMPTY = Signature(())


@dataclass(frozen=True, slots=True)
class MappingEntry:
    """Associates one decayed native type with one wire type code."""

    type: Native
    code: str


CANONICAL_ENTRIES = (
    MappingEntry(BOOL, "b"),
    MappingEntry(UINT8, "y"),
    # int8_t isn't supported by D-Bus.
    MappingEntry(UINT16, "q"),
    MappingEntry(INT16, "n"),
    MappingEntry(UINT32, "u"),
    MappingEntry(INT32, "i"),
    MappingEntry(UINT64, "t"),
    MappingEntry(INT64, "x"),
    # float isn't supported by D-Bus.
    MappingEntry(DOUBLE, "d"),
    MappingEntry(CHAR_PTR, "s"),
    MappingEntry(Pointer(Const(CHAR)), "s"),
    MappingEntry(STRING, "s"),
    MappingEntry(STRING_VIEW, "s"),
)

# Python builtins with an unambiguous native width.
PYTHON_TYPES: dict[type, Native] = {
    bool: BOOL,
    float: DOUBLE,
    str: STRING,
}

CTYPES_TYPES: dict[Any, Native] = {
    ctypes.c_bool: BOOL,
    ctypes.c_char: CHAR,
    ctypes.c_char_p: Pointer(Const(CHAR)),
    ctypes.c_int8: INT8,
    ctypes.c_uint8: UINT8,
    ctypes.c_int16: INT16,
    ctypes.c_uint16: UINT16,
    ctypes.c_int32: INT32,
    ctypes.c_uint32: UINT32,
    ctypes.c_int64: INT64,
    ctypes.c_uint64: UINT64,
    ctypes.c_float: FLOAT,
    ctypes.c_double: DOUBLE,
}


def _to_native(t: Any) -> Native:
    """Convert any accepted type designator into the native type model."""
    if isinstance(t, (NativeType, Const, Reference, Pointer, Array)):
        return t
    if isinstance(t, str):
        return parse_type(t)
    if isinstance(t, type):
        if t in CTYPES_TYPES:
            return CTYPES_TYPES[t]
        if issubclass(t, ctypes.Array):
            return Array(_to_native(t._type_), t._length_)
        if t in PYTHON_TYPES:
            return PYTHON_TYPES[t]
        return NativeType(f"{t.__module__}.{t.__qualname__}")
    raise TypeError(f"Not a type designator: {t!r}")


def _strip_cv(t: Native) -> Native:
    while isinstance(t, Const):
        t = t.inner
    return t


def decay(t: Any) -> Native:
    """Normalize a type to the representative used for code lookup.

    1. Remove references and const.
    2. Remove const from array elements.
    3. Convert 'char[N]' to 'char*'.
    """
    t = _to_native(t)
    while isinstance(t, (Const, Reference)):
        t = t.inner

    if isinstance(t, Array):
        element = _strip_cv(t.inner)
        if element == CHAR:
            return CHAR_PTR
        return Array(element, t.length)
    return t


class TypeRegistry:
    """A closed table of type mapping entries.

    Registries never change after construction. ``extend`` returns a new
    registry so the encoding of already-mapped types stays fixed.
    """

    def __init__(self, entries: Iterable[MappingEntry]) -> None:
        self._codes: dict[Native, str] = {}
        for entry in entries:
            key = decay(entry.type)
            if len(entry.code) != 1 or entry.code == "\0" or not entry.code.isascii():
                raise SignatureError(f"Type code must be one ASCII character: {entry.code!r}")
            existing = self._codes.get(key)
            if existing is not None and existing != entry.code:
                raise RegistryConflictError(f"{key} is already mapped to {existing!r}")
            self._codes[key] = entry.code

        self._compose = functools.lru_cache(maxsize=None)(self._compose_uncached)

    @property
    def entries(self) -> tuple[MappingEntry, ...]:
        return tuple(MappingEntry(t, c) for t, c in self._codes.items())

    @property
    def alphabet(self) -> frozenset[str]:
        """Every code this registry can produce."""
        return frozenset(self._codes.values())

    def __contains__(self, t: Any) -> bool:
        return decay(t) in self._codes

    def extend(self, t: Any, code: str) -> "TypeRegistry":
        """Return a new registry that also maps ``t`` to ``code``."""
        registry = TypeRegistry([*self.entries, MappingEntry(decay(t), code)])
        logger.debug("Extended type registry with %s -> %r", decay(t), code)
        return registry

    def map_type(self, t: Any) -> str:
        """Get the single type code for ``t`` after decay.

        Raises:
            UnmappedTypeError: No entry exists for the decayed type.
        """
        key = decay(t)
        code = self._codes.get(key)
        if code is None:
            raise UnmappedTypeError(f"No D-Bus type conversion provided for type {key}")
        return code

    def compose(self, *types: Any) -> Signature:
        """Get the signature for a sequence of types, in argument order."""
        return self._compose(*types)

    def _compose_uncached(self, *types: Any) -> Signature:
        return Signature(tuple(self.map_type(t) for t in types))

    def parse_signature(self, text: str) -> Signature:
        """Check a hand-written signature against this registry's alphabet.

        Raises:
            InvalidSignatureError: The text holds a code this registry does not produce.
        """
        alphabet = self.alphabet
        for i, c in enumerate(text):
            if c not in alphabet:
                raise InvalidSignatureError(f"Unknown type code {c!r} at position {i} in {text!r}")
        return Signature(tuple(text))


default_registry = TypeRegistry(CANONICAL_ENTRIES)


def map_type(t: Any) -> str:
    """Get the type code for ``t`` from the default registry."""
    return default_registry.map_type(t)


def compose(*types: Any) -> Signature:
    """Get the signature for ``types`` from the default registry."""
    return default_registry.compose(*types)


def parse_signature(text: str) -> Signature:
    """Validate ``text`` against the default registry's alphabet."""
    return default_registry.parse_signature(text)
