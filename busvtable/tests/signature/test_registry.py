"""Tests for type mapping and signature composition."""

import ctypes
from dataclasses import dataclass

import pytest

from busvtable.signature import (
    BOOL,
    CHAR,
    CHAR_PTR,
    DOUBLE,
    EMPTY,
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
    InvalidSignatureError,
    MappingEntry,
    NativeType,
    RegistryConflictError,
    SignatureError,
    Signature,
    TypeRegistry,
    UnmappedTypeError,
    array,
    compose,
    const,
    decay,
    default_registry,
    map_type,
    parse_signature,
    pointer,
    ref,
)


@dataclass
class UserStruct:
    x: int


CANONICAL = [
    (BOOL, "b"),
    (UINT8, "y"),
    (UINT16, "q"),
    (INT16, "n"),
    (UINT32, "u"),
    (INT32, "i"),
    (UINT64, "t"),
    (INT64, "x"),
    (DOUBLE, "d"),
    (STRING, "s"),
    (STRING_VIEW, "s"),
    (CHAR_PTR, "s"),
    (pointer(const(CHAR)), "s"),
]


def describe_map_type():
    @pytest.mark.parametrize(("t", "code"), CANONICAL)
    def maps_canonical_types(expect, t, code):
        expect(map_type(t)) == code

    @pytest.mark.parametrize(("t", "code"), CANONICAL)
    def is_stable_across_calls(expect, t, code):
        expect(map_type(t)) == map_type(t)

    def maps_qualified_types_like_their_base(expect):
        expect(map_type(const(UINT32))) == "u"
        expect(map_type(ref(const(STRING)))) == "s"
        expect(map_type(ref(DOUBLE))) == "d"

    def maps_char_arrays_to_string(expect):
        expect(map_type(array(CHAR, 16))) == "s"
        expect(map_type(array(const(CHAR), 6))) == "s"

    def maps_python_builtins(expect):
        expect(map_type(bool)) == "b"
        expect(map_type(float)) == "d"
        expect(map_type(str)) == "s"

    def maps_ctypes(expect):
        expect(map_type(ctypes.c_bool)) == "b"
        expect(map_type(ctypes.c_uint8)) == "y"
        expect(map_type(ctypes.c_int16)) == "n"
        expect(map_type(ctypes.c_uint32)) == "u"
        expect(map_type(ctypes.c_int64)) == "x"
        expect(map_type(ctypes.c_double)) == "d"
        expect(map_type(ctypes.c_char_p)) == "s"
        expect(map_type(ctypes.c_char * 8)) == "s"

    def maps_spellings(expect):
        expect(map_type("const std::string&")) == "s"
        expect(map_type("unsigned short")) == "q"

    def rejects_int8(expect):
        with pytest.raises(UnmappedTypeError):
            map_type(INT8)
        with pytest.raises(UnmappedTypeError):
            map_type(ctypes.c_int8)

    def rejects_float(expect):
        with pytest.raises(UnmappedTypeError):
            map_type(FLOAT)
        with pytest.raises(UnmappedTypeError):
            map_type(ctypes.c_float)

    def rejects_user_types(expect):
        with pytest.raises(UnmappedTypeError, match="UserStruct"):
            map_type(UserStruct)
        with pytest.raises(UnmappedTypeError):
            map_type(NativeType("MyStruct"))

    def rejects_python_int(expect):
        with pytest.raises(UnmappedTypeError, match="builtins.int"):
            map_type(int)

    def rejects_non_char_arrays(expect):
        with pytest.raises(UnmappedTypeError):
            map_type(array(UINT32, 4))

    def rejects_non_types(expect):
        with pytest.raises(TypeError):
            map_type(42)


def describe_decay():
    def strips_const_and_reference(expect):
        expect(decay(ref(const(STRING)))) == STRING
        expect(decay(const(ref(UINT16)))) == UINT16

    def keeps_plain_types(expect):
        for t, _ in CANONICAL:
            expect(decay(t)) == t

    def is_idempotent(expect):
        for t in [ref(const(STRING)), array(CHAR, 3), array(const(UINT8), 2), const(pointer(CHAR))]:
            expect(decay(decay(t))) == decay(t)

    def unifies_char_arrays_of_any_length(expect):
        for n in (0, 1, 6, 255):
            expect(decay(array(CHAR, n))) == decay(CHAR_PTR)
            expect(decay(const(array(CHAR, n)))) == decay(CHAR_PTR)

    def keeps_pointer_to_const(expect):
        expect(decay(pointer(const(CHAR)))) == pointer(const(CHAR))

    def strips_const_from_array_elements(expect):
        expect(decay(array(const(UINT8), 4))) == array(UINT8, 4)


def describe_compose():
    def composes_in_order(expect):
        sig = compose(BOOL, UINT32, STRING)
        expect(sig.chars) == ("b", "u", "s", "\0")
        expect(str(sig)) == "bus"
        expect(bytes(sig)) == b"bus\0"

    def has_length_n_plus_one(expect):
        expect(len(compose(BOOL, UINT32, STRING))) == 4
        expect(len(compose(DOUBLE))) == 2

    def composes_empty_signature(expect):
        sig = compose()
        expect(sig) == EMPTY
        expect(len(sig)) == 1
        expect(list(sig)) == ["\0"]

    def concatenates_each_mapping(expect):
        types = [UINT8, const(INT64), "char[4]", ref(STRING_VIEW), DOUBLE]
        expected = tuple(map_type(decay(t)) for t in types) + ("\0",)
        expect(tuple(compose(*types))) == expected

    def preserves_argument_order(expect):
        expect(str(compose(UINT32, STRING))) == "us"
        expect(str(compose(STRING, UINT32))) == "su"

    def keeps_duplicates(expect):
        expect(str(compose(INT32, INT32, INT32))) == "iii"

    def caches_results(expect):
        expect(compose(BOOL, STRING) is compose(BOOL, STRING)) == True

    def fails_on_any_unmapped_type(expect):
        with pytest.raises(UnmappedTypeError):
            compose(BOOL, FLOAT, STRING)

    def indexes_like_a_c_string(expect):
        sig = compose(BOOL, UINT32)
        expect(sig[0]) == "b"
        expect(sig[-1]) == "\0"


def describe_parse_signature():
    def accepts_known_codes(expect):
        expect(parse_signature("bus")) == Signature(("b", "u", "s"))
        expect(parse_signature("")) == EMPTY

    def rejects_unknown_codes(expect):
        with pytest.raises(InvalidSignatureError, match="'a'"):
            parse_signature("as")


def describe_type_registry():
    def exposes_alphabet(expect):
        expect(default_registry.alphabet) == frozenset("byqnuitxds")

    def extends_without_touching_the_original(expect):
        point = NativeType("Point")
        registry = default_registry.extend(point, "r")

        expect(registry.map_type(point)) == "r"
        expect(str(registry.compose(UINT32, point))) == "ur"
        expect(point in registry) == True
        expect(point in default_registry) == False

    def allows_repeating_an_existing_mapping(expect):
        registry = default_registry.extend(ref(const(UINT32)), "u")
        expect(registry.map_type(UINT32)) == "u"

    def refuses_to_change_an_existing_mapping(expect):
        with pytest.raises(RegistryConflictError):
            default_registry.extend(UINT32, "i")

    def rejects_multi_character_codes(expect):
        with pytest.raises(SignatureError):
            TypeRegistry([MappingEntry(NativeType("Pair"), "(ii)")])

    def starts_empty(expect):
        registry = TypeRegistry([])
        expect(registry.alphabet) == frozenset()
        with pytest.raises(UnmappedTypeError):
            registry.map_type(BOOL)
