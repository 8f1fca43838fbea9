"""Counter object vtable, declared once at import time."""

import ctypes

from busvtable.signature import STRING, UINT32, UINT64, compose, const, ref
from busvtable.vtable import (
    CommonFlag,
    HandlerStatus,
    MethodFlag,
    PropertyFlag,
    Vtable,
    method,
    method_with_names,
    property,
    property_by_offset,
    signal_with_names,
)
from busvtable.vtable.layout import to_native


class CounterState(ctypes.Structure):
    _fields_ = [
        ("count", ctypes.c_uint64),
        ("step", ctypes.c_uint32),
    ]


def on_increment(message, userdata, error):
    return int(HandlerStatus.SUCCESS)


def on_reset(message, userdata, error):
    return int(HandlerStatus.SUCCESS)


def get_name(bus, path, interface, prop, reply, userdata, error):
    return int(HandlerStatus.SUCCESS)


def set_step(bus, path, interface, prop, value, userdata, error):
    return int(HandlerStatus.SUCCESS)


VTABLE = Vtable.build(
    CommonFlag.UNPRIVILEGED,
    method_with_names(
        "Increment", compose(UINT32), compose(UINT64), ["amount", "total"], on_increment
    ),
    method("Reset", "", "", on_reset, MethodFlag.NO_REPLY),
    signal_with_names("Overflow", compose(UINT64), ["previous"]),
    property("Name", compose(ref(const(STRING))), get_name, PropertyFlag.CONST),
    property_by_offset("Count", "t", CounterState.count.offset, PropertyFlag.EMITS_CHANGE),
    property_by_offset("Step", "u", set_step, CounterState.step.offset, PropertyFlag.EMITS_CHANGE),
).validate()

NATIVE_VTABLE = to_native(VTABLE)


if __name__ == "__main__":
    for entry in VTABLE:
        print(entry.kind.name, entry.member or "", str(entry.signature), str(entry.result))
    print(f"native table at {NATIVE_VTABLE.address:#x}, {len(NATIVE_VTABLE)} entries")
