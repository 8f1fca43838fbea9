"""Vtable entry flags.

Values match sd-bus's ``SD_BUS_VTABLE_*`` constants. Flags from the common
domain apply to every entry; method and property flags only apply to entries
of their own kind. Combine them with ``|``.
"""

from enum import IntFlag


class VtableError(RuntimeError):
    """Base class for descriptor table failures."""


class FlagDomainError(VtableError):
    """Raised when a flag is applied to an entry kind it has no meaning for."""


class CommonFlag(IntFlag):
    """Flags valid on any entry."""

    NONE = 0
    DEPRECATED = 1 << 0
    HIDDEN = 1 << 1
    UNPRIVILEGED = 1 << 2
    SENSITIVE = 1 << 8
    ABSOLUTE_OFFSET = 1 << 9


class MethodFlag(IntFlag):
    """Flags valid on method entries."""

    NONE = 0
    NO_REPLY = 1 << 3


class PropertyFlag(IntFlag):
    """Flags valid on property entries."""

    NONE = 0
    CONST = 1 << 4
    EMITS_CHANGE = 1 << 5
    EMITS_INVALIDATION = 1 << 6
    EXPLICIT = 1 << 7


CAPABILITY_SHIFT = 40
CAPABILITY_MASK = 0xFFFF << CAPABILITY_SHIFT

# The native flags field is a 56-bit bitfield.
FLAGS_MASK = (1 << 56) - 1

COMMON_MASK = int(
    CommonFlag.DEPRECATED
    | CommonFlag.HIDDEN
    | CommonFlag.UNPRIVILEGED
    | CommonFlag.SENSITIVE
    | CommonFlag.ABSOLUTE_OFFSET
) | CAPABILITY_MASK
METHOD_MASK = COMMON_MASK | int(MethodFlag.NO_REPLY)
PROPERTY_MASK = COMMON_MASK | int(
    PropertyFlag.CONST
    | PropertyFlag.EMITS_CHANGE
    | PropertyFlag.EMITS_INVALIDATION
    | PropertyFlag.EXPLICIT
)


def capability(cap: int) -> CommonFlag:
    """Require the given Linux capability (e.g. CAP_SYS_ADMIN = 21) for access."""
    if not 0 <= cap < 0xFFFF:
        raise ValueError(f"Capability out of range: {cap}")
    return CommonFlag((cap + 1) << CAPABILITY_SHIFT)


def check_flags(flags: int, allowed: int, what: str) -> int:
    """Return ``flags`` as an int if every bit is allowed for ``what``.

    Raises:
        FlagDomainError: A bit outside ``allowed`` is set.
    """
    value = int(flags)
    if value < 0 or value > FLAGS_MASK:
        raise FlagDomainError(f"Flags {value:#x} do not fit the 56-bit flags field")
    foreign = value & ~int(allowed)
    if foreign:
        raise FlagDomainError(f"Flags {foreign:#x} are not valid on {what} entries")
    return value


FLAG_NAMES: dict[str, IntFlag] = {
    name.lower(): flag
    for enum in (CommonFlag, MethodFlag, PropertyFlag)
    for name, flag in enum.__members__.items()
    if flag
}


def flag_by_name(name: str) -> IntFlag:
    """Look up a flag by its lower-case name, e.g. ``"emits_change"``."""
    try:
        return FLAG_NAMES[name.lower()]
    except KeyError:
        raise FlagDomainError(f"Unknown flag {name!r}") from None


def describe_flags(flags: int) -> list[str]:
    """Names of the flags set in ``flags``, capability bits as ``capability(N)``."""
    value = int(flags)
    names = [name for name, flag in FLAG_NAMES.items() if value & flag]
    cap = (value & CAPABILITY_MASK) >> CAPABILITY_SHIFT
    if cap:
        names.append(f"capability({cap - 1})")
    return names
