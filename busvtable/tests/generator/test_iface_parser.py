"""Tests for interface definition parser."""

import os

import pytest

from busvtable.generator import Interface, parse
from busvtable.generator.parser import ValidationError

FILE_DIR = os.path.dirname(os.path.realpath(__file__))


def describe_parse_interface():
    def parses_empty_file(expect):
        expect(parse("")) == []

    def parses_empty_interface(expect):
        interfaces = parse("interface a.b.C {}")
        expect(len(interfaces)) == 1
        expect(interfaces[0].name) == "a.b.C"
        expect(interfaces[0].methods) == []
        expect(interfaces[0].flags) == []

    def parses_interface_flags(expect):
        interfaces = parse("interface a.b.C [unprivileged, deprecated] {}")
        expect(interfaces[0].flags) == ["unprivileged", "deprecated"]

    def parses_example_file(expect):
        with open(f"{FILE_DIR}/counter.iface", encoding="utf-8") as f:
            interfaces = parse(f.read())

        expect([i.name for i in interfaces]) == ["net.example.Counter", "net.example.Empty"]
        counter = interfaces[0]
        expect([m.name for m in counter.methods]) == ["Increment", "Reset", "Describe"]
        expect([s.name for s in counter.signals]) == ["Overflow", "Cleared"]
        expect([p.name for p in counter.properties]) == ["Name", "Count", "Legacy"]


def describe_parse_method():
    def parses_arguments_and_results(expect):
        (iface,) = parse(
            """
            interface a.b.C {
                method Add(a: int32_t, b: int32_t) -> (sum: int32_t)
            }
            """
        )
        m = iface.methods[0]
        expect([a.name for a in m.arguments]) == ["a", "b"]
        expect([a.type for a in m.arguments]) == ["int32_t", "int32_t"]
        expect([a.name for a in m.results]) == ["sum"]
        expect(str(m.signature())) == "ii"
        expect(str(m.result())) == "i"

    def parses_multiword_and_qualified_types(expect):
        (iface,) = parse(
            """
            interface a.b.C {
                method Put(key: const std::string&, buf: const char[16], n: unsigned long long)
            }
            """
        )
        m = iface.methods[0]
        types = [a.type for a in m.arguments]
        expect(types) == ["const std::string&", "const char[16]", "unsigned long long"]
        expect(str(m.signature())) == "sst"

    def parses_method_flags(expect):
        (iface,) = parse("interface a.b.C { method Fire() [no_reply] }")
        expect(iface.methods[0].flags) == ["no_reply"]
        expect(iface.methods[0].results) == []


def describe_parse_property():
    def parses_writable_pseudo_flag(expect):
        (iface,) = parse(
            """
            interface a.b.C {
                property Count: uint64_t [writable, emits_change]
                property Name: std::string
            }
            """
        )
        count, name = iface.properties
        expect(count.writable) == True
        expect(count.flags) == ["emits_change"]
        expect(name.writable) == False
        expect(name.flags) == []

    def parses_array_types_before_flags(expect):
        (iface,) = parse("interface a.b.C { property Tag: char[8] [const] }")
        expect(iface.properties[0].type) == "char[8]"
        expect(iface.properties[0].flags) == ["const"]


def describe_validation():
    def rejects_duplicate_members(expect):
        with pytest.raises(ValidationError, match="Duplicate method"):
            parse("interface a.b.C { method A() method A() }")

    def rejects_duplicate_interfaces(expect):
        with pytest.raises(ValidationError, match="Duplicate interface"):
            parse("interface a.b.C {} interface a.b.C {}")

    def rejects_unknown_flags(expect):
        with pytest.raises(ValidationError, match="sticky"):
            parse("interface a.b.C { method A() [sticky] }")

    def rejects_flags_from_other_domains(expect):
        with pytest.raises(ValidationError):
            parse("interface a.b.C { property P: bool [no_reply] }")
        with pytest.raises(ValidationError):
            parse("interface a.b.C { signal S() [const] }")

    def rejects_unmapped_types(expect):
        with pytest.raises(ValidationError, match="float"):
            parse("interface a.b.C { signal S(x: float) }")

    def rejects_syntax_errors(expect):
        with pytest.raises(ValidationError, match="Syntax error"):
            parse("interface a.b.C { method }")


def describe_json():
    def round_trips_through_dict(expect):
        (iface,) = parse("interface a.b.C { method A(x: bool) }")
        data = iface.to_dict()
        expect(data["methods"][0]["arguments"][0]) == {"name": "x", "type": "bool"}
        expect(Interface.from_dict(data)) == iface
