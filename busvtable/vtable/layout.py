"""ctypes rendition of sd-bus's ``sd_bus_vtable`` structure.

``to_native`` turns a ``Vtable`` into a C array that can be handed to
``sd_bus_add_object_vtable``. The returned ``NativeVtable`` owns every string
and callback thunk the array points at, so it has to outlive the
registration.
"""

import ctypes
import ctypes.util
import functools
import logging
from collections.abc import Callable
from typing import Any

from .entry import EntryKind, HandlerStatus, VtableEntry
from .table import Vtable

logger = logging.getLogger(__name__)

# sd-bus vtable feature bits
FEATURE_PARAM_NAMES = 1 << 0

MESSAGE_HANDLER = ctypes.CFUNCTYPE(ctypes.c_int, ctypes.c_void_p, ctypes.c_void_p, ctypes.c_void_p)
PROPERTY_GET = ctypes.CFUNCTYPE(
    ctypes.c_int,
    ctypes.c_void_p,  # sd_bus *bus
    ctypes.c_char_p,  # path
    ctypes.c_char_p,  # interface
    ctypes.c_char_p,  # property
    ctypes.c_void_p,  # sd_bus_message *reply
    ctypes.c_void_p,  # userdata
    ctypes.c_void_p,  # sd_bus_error *ret_error
)
PROPERTY_SET = ctypes.CFUNCTYPE(
    ctypes.c_int,
    ctypes.c_void_p,  # sd_bus *bus
    ctypes.c_char_p,  # path
    ctypes.c_char_p,  # interface
    ctypes.c_char_p,  # property
    ctypes.c_void_p,  # sd_bus_message *value
    ctypes.c_void_p,  # userdata
    ctypes.c_void_p,  # sd_bus_error *ret_error
)


class _Start(ctypes.Structure):
    _fields_ = [
        ("element_size", ctypes.c_size_t),
        ("features", ctypes.c_uint64),
        ("vtable_format_reference", ctypes.POINTER(ctypes.c_uint)),
    ]


class _Method(ctypes.Structure):
    _fields_ = [
        ("member", ctypes.c_char_p),
        ("signature", ctypes.c_char_p),
        ("result", ctypes.c_char_p),
        ("handler", MESSAGE_HANDLER),
        ("offset", ctypes.c_size_t),
        ("names", ctypes.c_char_p),
    ]


class _Signal(ctypes.Structure):
    _fields_ = [
        ("member", ctypes.c_char_p),
        ("signature", ctypes.c_char_p),
        ("names", ctypes.c_char_p),
    ]


class _Property(ctypes.Structure):
    _fields_ = [
        ("member", ctypes.c_char_p),
        ("signature", ctypes.c_char_p),
        ("get", PROPERTY_GET),
        ("set", PROPERTY_SET),
        ("offset", ctypes.c_size_t),
    ]


class _Union(ctypes.Union):
    _fields_ = [
        ("start", _Start),
        ("method", _Method),
        ("signal", _Signal),
        ("property", _Property),
    ]


class SdBusVtable(ctypes.Structure):
    """Binary-compatible ``sd_bus_vtable``."""

    _fields_ = [
        ("type", ctypes.c_uint64, 8),
        ("flags", ctypes.c_uint64, 56),
        ("x", _Union),
    ]


@functools.cache
def vtable_format_reference() -> Any:
    """Pointer to libsystemd's ``sd_bus_object_vtable_format``, or NULL."""
    name = ctypes.util.find_library("systemd")
    if name is None:
        logger.debug("libsystemd not found, vtable format reference left NULL")
        return ctypes.POINTER(ctypes.c_uint)()
    try:
        lib = ctypes.CDLL(name)
        return ctypes.pointer(ctypes.c_uint.in_dll(lib, "sd_bus_object_vtable_format"))
    except (OSError, ValueError) as e:
        logger.debug("Cannot resolve sd_bus_object_vtable_format in %s: %s", name, e)
        return ctypes.POINTER(ctypes.c_uint)()


def _guard(fn: Callable[..., int], what: str) -> Callable[..., int]:
    """Keep Python exceptions from unwinding into the C dispatcher."""

    @functools.wraps(fn)
    def wrapper(*args: Any) -> int:
        try:
            return int(fn(*args))
        except Exception:
            logger.exception("Unhandled exception in %s", what)
            return int(HandlerStatus.FATAL)

    return wrapper


class NativeVtable:
    """A native ``sd_bus_vtable`` array and the objects it references."""

    def __init__(self, vtable: Vtable) -> None:
        self.vtable = vtable
        self._keepalive: list[Any] = []
        self.array = (SdBusVtable * len(vtable))()

        for slot, entry in zip(self.array, vtable):
            self._fill(slot, entry)

        logger.debug("Built native vtable with %d entries", len(vtable))

    def __len__(self) -> int:
        return len(self.array)

    @property
    def address(self) -> int:
        return ctypes.addressof(self.array)

    def _bytes(self, text: str | None) -> bytes | None:
        if text is None:
            return None
        data = text.encode("utf-8")
        self._keepalive.append(data)
        return data

    def _thunk(self, proto: Any, fn: Callable[..., int] | None, what: str) -> Any:
        if fn is None:
            return proto()
        thunk = proto(_guard(fn, what))
        self._keepalive.append(thunk)
        return thunk

    def _fill(self, slot: SdBusVtable, entry: VtableEntry) -> None:
        slot.type = ord(entry.kind.value)
        slot.flags = entry.flags

        if entry.kind == EntryKind.START:
            slot.x.start.element_size = ctypes.sizeof(SdBusVtable)
            slot.x.start.features = FEATURE_PARAM_NAMES
            slot.x.start.vtable_format_reference = vtable_format_reference()
        elif entry.kind == EntryKind.METHOD:
            m = slot.x.method
            m.member = self._bytes(entry.member)
            m.signature = self._bytes(str(entry.signature))
            m.result = self._bytes(str(entry.result))
            m.handler = self._thunk(MESSAGE_HANDLER, entry.handler, f"method {entry.member}")
            m.offset = entry.offset
            m.names = self._bytes(entry.names + entry.result_names)
        elif entry.kind == EntryKind.SIGNAL:
            s = slot.x.signal
            s.member = self._bytes(entry.member)
            s.signature = self._bytes(str(entry.signature))
            s.names = self._bytes(entry.names)
        elif entry.kind.is_property:
            p = slot.x.property
            p.member = self._bytes(entry.member)
            p.signature = self._bytes(str(entry.signature))
            p.get = self._thunk(PROPERTY_GET, entry.get, f"getter of {entry.member}")
            p.set = self._thunk(PROPERTY_SET, entry.set, f"setter of {entry.member}")
            p.offset = entry.offset


def to_native(vtable: Vtable) -> NativeVtable:
    """Build the native array for ``vtable``."""
    return NativeVtable(vtable)
