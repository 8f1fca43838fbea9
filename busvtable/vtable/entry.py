"""Descriptor entries: one row of an object's vtable."""

import errno
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any

from busvtable.signature import EMPTY, Signature

# (message, userdata, error) -> status
MessageHandler = Callable[[Any, Any, Any], int]
# (bus, path, interface, property, reply, userdata, error) -> status
PropertyGetter = Callable[[Any, Any, Any, Any, Any, Any, Any], int]
# (bus, path, interface, property, value, userdata, error) -> status
PropertySetter = Callable[[Any, Any, Any, Any, Any, Any, Any], int]


class HandlerStatus(IntEnum):
    """Return codes for handlers and property accessors.

    Non-negative means the call was handled. A negative errno fails the call;
    with the error argument filled in, the caller receives that error, with
    FATAL the dispatch itself is aborted.
    """

    SUCCESS = 1
    CALL_ERROR = -errno.EINVAL
    FATAL = -errno.EIO


class EntryKind(str, Enum):
    """Entry discriminator, using sd-bus's type characters."""

    START = "<"
    END = ">"
    METHOD = "M"
    SIGNAL = "S"
    PROPERTY = "P"
    WRITABLE_PROPERTY = "W"

    @property
    def is_member(self) -> bool:
        return self not in (EntryKind.START, EntryKind.END)

    @property
    def is_property(self) -> bool:
        return self in (EntryKind.PROPERTY, EntryKind.WRITABLE_PROPERTY)


@dataclass(frozen=True, slots=True)
class VtableEntry:
    """One vtable row. Which fields are populated depends on ``kind``.

    ``names`` holds the argument names as one nil-delimited string
    (``"a\\0b\\0"``), the same form sd-bus concatenates from its
    ``SD_BUS_PARAM`` macros.
    """

    kind: EntryKind
    member: str | None = None
    signature: Signature = EMPTY
    result: Signature = EMPTY
    names: str = ""
    result_names: str = ""
    handler: MessageHandler | None = None
    get: PropertyGetter | None = None
    set: PropertySetter | None = None
    offset: int = 0
    flags: int = 0

    @property
    def argument_names(self) -> tuple[str, ...]:
        return split_names(self.names)

    @property
    def is_writable(self) -> bool:
        return self.kind == EntryKind.WRITABLE_PROPERTY


def join_names(names: str | Iterable[str]) -> str:
    """Return ``names`` as one nil-delimited string.

    A string is taken to be nil-delimited already; the final terminator is
    added when missing. Empty names are rejected since an empty name ends the
    list.
    """
    if isinstance(names, str):
        if not names:
            return ""
        names = names.removesuffix("\0").split("\0")
    joined = []
    for name in names:
        if not name or "\0" in name:
            raise ValueError(f"Invalid argument name: {name!r}")
        joined.append(name + "\0")
    return "".join(joined)


def split_names(names: str) -> tuple[str, ...]:
    """Split a nil-delimited name list."""
    if not names:
        return ()
    return tuple(names.rstrip("\0").split("\0"))
