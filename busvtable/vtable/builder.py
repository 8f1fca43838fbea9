"""Builders for vtable entries.

Each function returns a new immutable ``VtableEntry`` and has no side effects,
so vtables can be declared as module-level constants::

    VTABLE = Vtable.build(
        CommonFlag.NONE,
        method("Ping", "", "", on_ping),
        property("Name", compose(str), get_name, PropertyFlag.CONST),
    )

Whether a handler actually reads and writes the declared signature cannot be
checked here; keeping them in agreement is the caller's job.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any, overload

from busvtable.signature import Signature, compose, parse_signature

from .entry import (
    EntryKind,
    MessageHandler,
    PropertyGetter,
    PropertySetter,
    VtableEntry,
    join_names,
)
from .flags import COMMON_MASK, METHOD_MASK, PROPERTY_MASK, check_flags

logger = logging.getLogger(__name__)

SignatureLike = Signature | str | Sequence[Any]


def as_signature(sig: SignatureLike) -> Signature:
    """Accept a Signature, a signature string, or a sequence of types."""
    if isinstance(sig, Signature):
        return sig
    if isinstance(sig, str):
        return parse_signature(sig)
    return compose(*sig)


def _check_member(member: str) -> str:
    if not member:
        raise ValueError("Member name must not be empty")
    return member


def _check_callable(fn: Any, what: str) -> Any:
    if not callable(fn):
        raise TypeError(f"{what} must be callable, got {fn!r}")
    return fn


def _check_offset(offset: int) -> int:
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise ValueError(f"Offset must be a non-negative int, got {offset!r}")
    return offset


def start(flags: int = 0) -> VtableEntry:
    """Create the START entry that opens every vtable."""
    return VtableEntry(EntryKind.START, flags=check_flags(flags, COMMON_MASK, "start"))


def end() -> VtableEntry:
    """Create the END entry that closes every vtable."""
    return VtableEntry(EntryKind.END)


def method(
    member: str,
    signature: SignatureLike,
    result: SignatureLike,
    handler: MessageHandler,
    flags: int = 0,
) -> VtableEntry:
    """Create a METHOD entry.

    Args:
        member: Name of method.
        signature: Signature of method.
        result: Signature of result.
        handler: Callable invoked on method call.
        flags: Optional CommonFlag / MethodFlag value.
    """
    return VtableEntry(
        EntryKind.METHOD,
        member=_check_member(member),
        signature=as_signature(signature),
        result=as_signature(result),
        handler=_check_callable(handler, "handler"),
        flags=check_flags(flags, METHOD_MASK, "method"),
    )


def method_with_offset(
    member: str,
    signature: SignatureLike,
    result: SignatureLike,
    handler: MessageHandler,
    offset: int,
    flags: int = 0,
) -> VtableEntry:
    """Create a METHOD entry whose userdata is located at ``offset`` in the object."""
    return VtableEntry(
        EntryKind.METHOD,
        member=_check_member(member),
        signature=as_signature(signature),
        result=as_signature(result),
        handler=_check_callable(handler, "handler"),
        offset=_check_offset(offset),
        flags=check_flags(flags, METHOD_MASK, "method"),
    )


def method_with_names(
    member: str,
    signature: SignatureLike,
    result: SignatureLike,
    names: str | Iterable[str],
    handler: MessageHandler,
    flags: int = 0,
    result_names: str | Iterable[str] | None = None,
) -> VtableEntry:
    """Create a METHOD entry with argument names for introspection.

    ``names`` is stored as given. ``result_names`` is not kept: the entry's
    result-name slot is always empty, so result names that should appear in
    introspection have to be appended to ``names``.
    """
    if result_names:
        logger.debug("Dropping result names of method %s", member)
    return VtableEntry(
        EntryKind.METHOD,
        member=_check_member(member),
        signature=as_signature(signature),
        result=as_signature(result),
        names=join_names(names),
        handler=_check_callable(handler, "handler"),
        flags=check_flags(flags, METHOD_MASK, "method"),
    )


def signal(member: str, signature: SignatureLike, flags: int = 0) -> VtableEntry:
    """Create a SIGNAL entry."""
    return VtableEntry(
        EntryKind.SIGNAL,
        member=_check_member(member),
        signature=as_signature(signature),
        flags=check_flags(flags, COMMON_MASK, "signal"),
    )


def signal_with_names(
    member: str,
    signature: SignatureLike,
    names: str | Iterable[str],
    flags: int = 0,
) -> VtableEntry:
    """Create a SIGNAL entry with argument names for introspection."""
    return VtableEntry(
        EntryKind.SIGNAL,
        member=_check_member(member),
        signature=as_signature(signature),
        names=join_names(names),
        flags=check_flags(flags, COMMON_MASK, "signal"),
    )


@overload
def property(
    member: str, signature: SignatureLike, get: PropertyGetter, flags: int = 0
) -> VtableEntry: ...


@overload
def property(
    member: str,
    signature: SignatureLike,
    get: PropertyGetter,
    set: PropertySetter,
    flags: int = 0,
) -> VtableEntry: ...


def property(
    member: str,
    signature: SignatureLike,
    get: PropertyGetter,
    set: PropertySetter | int | None = None,
    flags: int = 0,
) -> VtableEntry:
    """Create a PROPERTY entry, or a WRITABLE_PROPERTY entry when ``set`` is given.

    An int in the ``set`` position is taken as ``flags``.
    """
    if isinstance(set, int):
        set, flags = None, set

    if set is None:
        return VtableEntry(
            EntryKind.PROPERTY,
            member=_check_member(member),
            signature=as_signature(signature),
            get=_check_callable(get, "get"),
            flags=check_flags(flags, PROPERTY_MASK, "property"),
        )
    return VtableEntry(
        EntryKind.WRITABLE_PROPERTY,
        member=_check_member(member),
        signature=as_signature(signature),
        get=_check_callable(get, "get"),
        set=_check_callable(set, "set"),
        flags=check_flags(flags, PROPERTY_MASK, "property"),
    )


@overload
def property_by_offset(
    member: str, signature: SignatureLike, offset: int, flags: int = 0
) -> VtableEntry: ...


@overload
def property_by_offset(
    member: str,
    signature: SignatureLike,
    set: PropertySetter,
    offset: int,
    flags: int = 0,
) -> VtableEntry: ...


def property_by_offset(
    member: str,
    signature: SignatureLike,
    *args: Any,
    **kwargs: Any,
) -> VtableEntry:
    """Create a property entry read straight from a field at ``offset``.

    Called as ``(member, signature, offset, flags=0)`` for a read-only
    property, or ``(member, signature, set, offset, flags=0)`` for a writable
    one whose writes go through ``set``.
    """
    set_ = kwargs.pop("set", None)
    if args and callable(args[0]):
        set_, args = args[0], args[1:]
    offset, flags = _offset_args(args, kwargs)

    if set_ is None:
        return VtableEntry(
            EntryKind.PROPERTY,
            member=_check_member(member),
            signature=as_signature(signature),
            offset=_check_offset(offset),
            flags=check_flags(flags, PROPERTY_MASK, "property"),
        )
    return VtableEntry(
        EntryKind.WRITABLE_PROPERTY,
        member=_check_member(member),
        signature=as_signature(signature),
        set=_check_callable(set_, "set"),
        offset=_check_offset(offset),
        flags=check_flags(flags, PROPERTY_MASK, "property"),
    )


def _offset_args(args: tuple[Any, ...], kwargs: dict[str, Any]) -> tuple[Any, int]:
    names = ("offset", "flags")
    if len(args) > len(names):
        raise TypeError(f"Too many positional arguments: {args!r}")
    values = dict(zip(names, args))
    for key, value in kwargs.items():
        if key not in names:
            raise TypeError(f"Unexpected keyword argument {key!r}")
        if key in values:
            raise TypeError(f"Got multiple values for argument {key!r}")
        values[key] = value
    if "offset" not in values:
        raise TypeError("Missing required argument 'offset'")
    return values["offset"], values.get("flags", 0)
