"""Tests for the native sd_bus_vtable layout."""

import ctypes

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
from busvtable.vtable.layout import FEATURE_PARAM_NAMES, SdBusVtable, to_native


def handler(message, userdata, error):
    return 1


def getter(*args):
    return 1


def setter(*args):
    return 1


def failing_handler(message, userdata, error):
    raise RuntimeError("boom")


def describe_sd_bus_vtable():
    def matches_native_size(expect):
        expect(ctypes.sizeof(SdBusVtable)) == 8 + 6 * ctypes.sizeof(ctypes.c_void_p)

    def packs_type_and_flags_into_one_word(expect):
        entry = SdBusVtable()
        entry.type = ord("M")
        entry.flags = int(MethodFlag.NO_REPLY)
        raw = ctypes.cast(ctypes.pointer(entry), ctypes.POINTER(ctypes.c_uint64)).contents.value
        expect(raw) == ord("M") | (8 << 8)


def describe_to_native():
    def writes_delimiters(expect):
        native = to_native(Vtable.build(CommonFlag.UNPRIVILEGED))

        expect(len(native)) == 2
        expect(native.array[0].type) == ord("<")
        expect(native.array[0].flags) == int(CommonFlag.UNPRIVILEGED)
        expect(native.array[0].x.start.element_size) == ctypes.sizeof(SdBusVtable)
        expect(native.array[0].x.start.features) == FEATURE_PARAM_NAMES
        expect(native.array[1].type) == ord(">")

    def writes_methods(expect):
        entry = method_with_names("Add", "ii", "i", ["a", "b", "sum"], handler)
        native = to_native(Vtable.build(0, entry))
        m = native.array[1].x.method

        expect(native.array[1].type) == ord("M")
        expect(m.member) == b"Add"
        expect(m.signature) == b"ii"
        expect(m.result) == b"i"
        names = ctypes.c_void_p.from_buffer(m, type(m).names.offset).value
        expect(ctypes.string_at(names, 9)) == b"a\0b\0sum\0\0"
        expect(m.handler(None, None, None)) == 1

    def terminates_names_given_as_string(expect):
        native = to_native(Vtable.build(0, method_with_names("Add", "ii", "i", "a\0b", handler)))
        m = native.array[1].x.method

        names = ctypes.c_void_p.from_buffer(m, type(m).names.offset).value
        expect(ctypes.string_at(names, 5)) == b"a\0b\0\0"

    def writes_signals(expect):
        native = to_native(Vtable.build(0, signal_with_names("Changed", "su", ["name", "value"])))
        s = native.array[1].x.signal

        expect(native.array[1].type) == ord("S")
        expect(s.member) == b"Changed"
        expect(s.signature) == b"su"
        expect(s.names) == b"name"

    def writes_properties(expect):
        native = to_native(
            Vtable.build(
                0,
                property("Name", "s", getter, PropertyFlag.CONST),
                property("Count", "t", getter, setter, PropertyFlag.EMITS_CHANGE),
                property_by_offset("Raw", "u", 16),
            )
        )

        expect([native.array[i].type for i in range(1, 4)]) == [ord("P"), ord("W"), ord("P")]
        expect(native.array[1].flags) == int(PropertyFlag.CONST)
        expect(bool(native.array[1].x.property.get)) == True
        expect(bool(native.array[1].x.property.set)) == False
        expect(bool(native.array[2].x.property.set)) == True
        expect(native.array[3].x.property.offset) == 16
        expect(bool(native.array[3].x.property.get)) == False

    def guards_handler_exceptions(expect):
        native = to_native(Vtable.build(0, method("Boom", "", "", failing_handler)))
        expect(native.array[1].x.method.handler(None, None, None)) == int(HandlerStatus.FATAL)

    def exposes_array_address(expect):
        native = to_native(Vtable.build(0))
        expect(native.address) == ctypes.addressof(native.array)
