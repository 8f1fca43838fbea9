"""Native type descriptors used for D-Bus signature derivation.

These frozen dataclasses describe C/C++ value types as they appear in a
handler's parameter list. Qualifiers wrap the type they apply to, so
``const std::string&`` is ``Reference(Const(STRING))``.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class NativeType:
    """A named scalar or user-defined type."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Const:
    """A const-qualified type."""

    inner: "Native"

    def __str__(self) -> str:
        return f"const {self.inner}"


@dataclass(frozen=True, slots=True)
class Reference:
    """An lvalue or rvalue reference to a type."""

    inner: "Native"

    def __str__(self) -> str:
        return f"{self.inner}&"


@dataclass(frozen=True, slots=True)
class Pointer:
    """A pointer to a type."""

    inner: "Native"

    def __str__(self) -> str:
        return f"{self.inner}*"


@dataclass(frozen=True, slots=True)
class Array:
    """A fixed-size array of a type."""

    inner: "Native"
    length: int

    def __post_init__(self) -> None:
        if self.length < 0:
            raise ValueError(f"Array length must not be negative: {self.length}")

    def __str__(self) -> str:
        return f"{self.inner}[{self.length}]"


Native = NativeType | Const | Reference | Pointer | Array


BOOL = NativeType("bool")
CHAR = NativeType("char")
INT8 = NativeType("int8_t")
UINT8 = NativeType("uint8_t")
INT16 = NativeType("int16_t")
UINT16 = NativeType("uint16_t")
INT32 = NativeType("int32_t")
UINT32 = NativeType("uint32_t")
INT64 = NativeType("int64_t")
UINT64 = NativeType("uint64_t")
FLOAT = NativeType("float")
DOUBLE = NativeType("double")
STRING = NativeType("std::string")
STRING_VIEW = NativeType("std::string_view")
CHAR_PTR = Pointer(CHAR)


def const(t: Native) -> Const:
    """Return ``t`` const-qualified."""
    return Const(t)


def ref(t: Native) -> Reference:
    """Return a reference to ``t``."""
    return Reference(t)


def pointer(t: Native) -> Pointer:
    """Return a pointer to ``t``."""
    return Pointer(t)


def array(t: Native, length: int) -> Array:
    """Return a fixed-size array of ``t``."""
    return Array(t, length)


def is_qualified(t: Native) -> bool:
    """Check if a type carries a const or reference qualifier."""
    return isinstance(t, (Const, Reference))
