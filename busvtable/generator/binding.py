"""Build vtables from parsed interface definitions."""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from busvtable.vtable import (
    HandlerStatus,
    Vtable,
    VtableEntry,
    method,
    method_with_names,
    property,
    signal,
    signal_with_names,
)
from busvtable.vtable.flags import COMMON_MASK, METHOD_MASK, PROPERTY_MASK

from .parser import flags_value
from .types import Interface

logger = logging.getLogger(__name__)


class BindingError(RuntimeError):
    """Raised when an interface member has no handler to bind to."""


def not_implemented(*_args: Any) -> int:
    """Placeholder handler for tables that are only described, never served."""
    return int(HandlerStatus.CALL_ERROR)


def _lookup(handlers: Mapping[str, Any] | object | None, key: str) -> Callable[..., int]:
    if handlers is None:
        return not_implemented

    if isinstance(handlers, Mapping):
        fn = handlers.get(key)
    else:
        fn = getattr(handlers, key, None)

    if fn is None:
        raise BindingError(f"No handler provided for {key}")
    if not callable(fn):
        raise BindingError(f"Handler for {key} is not callable")
    return fn


def bind(interface: Interface, handlers: Mapping[str, Any] | object | None = None) -> Vtable:
    """Build the vtable for ``interface``.

    Methods are looked up under their own name, property accessors under
    ``get_<Name>`` and ``set_<Name>``. ``handlers`` may be a mapping or any
    object with those attributes. Without handlers every member is bound to
    ``not_implemented``, which is enough for introspection.

    Entries appear as methods, then signals, then properties, each in
    declaration order.
    """
    entries: list[VtableEntry] = []

    for m in interface.methods:
        flags = flags_value(m.flags, METHOD_MASK, f"method {m.name}")
        handler = _lookup(handlers, m.name)
        if m.arguments or m.results:
            # result names go into the same list; sd-bus splits them by signature
            names = [a.name for a in m.arguments] + [a.name for a in m.results]
            entries.append(
                method_with_names(m.name, m.signature(), m.result(), names, handler, flags)
            )
        else:
            entries.append(method(m.name, m.signature(), m.result(), handler, flags))

    for s in interface.signals:
        flags = flags_value(s.flags, COMMON_MASK, f"signal {s.name}")
        if s.arguments:
            names = [a.name for a in s.arguments]
            entries.append(signal_with_names(s.name, s.signature(), names, flags))
        else:
            entries.append(signal(s.name, s.signature(), flags))

    for p in interface.properties:
        flags = flags_value(p.flags, PROPERTY_MASK, f"property {p.name}")
        get = _lookup(handlers, f"get_{p.name}")
        if p.writable:
            set_ = _lookup(handlers, f"set_{p.name}")
            entries.append(property(p.name, p.signature(), get, set_, flags))
        else:
            entries.append(property(p.name, p.signature(), get, flags))

    table = Vtable.build(flags_value(interface.flags, COMMON_MASK, interface.name), *entries)
    logger.debug("Bound %s with %d members", interface.name, len(entries))
    return table
