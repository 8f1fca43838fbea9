"""Interface definition parser using Lark."""

import os
from dataclasses import dataclass
from typing import Any, TypeVar

from lark import Lark
from lark.exceptions import LarkError
from lark.visitors import Transformer

from busvtable.signature import SignatureError, SpellingError
from busvtable.vtable.flags import (
    COMMON_MASK,
    METHOD_MASK,
    PROPERTY_MASK,
    FlagDomainError,
    check_flags,
    flag_by_name,
)

from .types import Argument, Interface, Method, Property, Signal

_g_parser: Lark | None = None

WRITABLE = "writable"


class ValidationError(RuntimeError):
    """Raised when interface validation fails."""


@dataclass
class _Name:
    value: str


@dataclass
class _Type:
    value: str


@dataclass
class _Flags:
    values: list[str]


@dataclass
class _Arguments:
    values: list[Argument]


@dataclass
class _Results:
    values: list[Argument]


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_one(args: list[Any], class_type: type[object]) -> Any:
    filtered = _filter(args, class_type)
    if len(filtered) == 0:
        return None
    if len(filtered) > 1:
        raise RuntimeError(f"Found more than one {class_type}")
    return filtered[0]


def _values(args: list[Any], class_type: type[object]) -> list[Any]:
    found = _find_one(args, class_type)
    return list(found.values) if found else []


class TreeTransformer(Transformer):
    """Transform parse tree into interface types."""

    def NAME(self, token: Any) -> _Name:
        return _Name(value=str(token))

    def INTERFACE_NAME(self, token: Any) -> _Name:
        return _Name(value=str(token))

    def TYPE(self, token: Any) -> _Type:
        return _Type(value=str(token).strip())

    def argument(self, args: list[Any]) -> Argument:
        return Argument(name=args[0].value, type=args[1].value)

    def arguments(self, args: list[Any]) -> _Arguments:
        return _Arguments(values=args)

    def results(self, args: list[Any]) -> _Results:
        return _Results(values=_values(args, _Arguments))

    def flag_list(self, args: list[Any]) -> _Flags:
        return _Flags(values=[a.value for a in args])

    def method(self, args: list[Any]) -> Method:
        return Method(
            name=args[0].value,
            arguments=_values(args, _Arguments),
            results=_values(args, _Results),
            flags=_values(args, _Flags),
        )

    def signal(self, args: list[Any]) -> Signal:
        return Signal(
            name=args[0].value,
            arguments=_values(args, _Arguments),
            flags=_values(args, _Flags),
        )

    def property(self, args: list[Any]) -> Property:
        flags = _values(args, _Flags)
        return Property(
            name=args[0].value,
            type=_find_one(args, _Type).value,
            writable=WRITABLE in flags,
            flags=[f for f in flags if f != WRITABLE],
        )

    def interface(self, args: list[Any]) -> Interface:
        return Interface(
            name=args[0].value,
            methods=_filter(args, Method),
            signals=_filter(args, Signal),
            properties=_filter(args, Property),
            flags=_values(args, _Flags),
        )

    def start(self, args: list[Any]) -> list[Interface]:
        return _filter(args, Interface)


def flags_value(names: list[str], allowed: int, what: str) -> int:
    """Combine flag names into one value, checking them against ``allowed``."""
    value = 0
    for name in names:
        value |= int(flag_by_name(name))
    return check_flags(value, allowed, what)


def _check_unique(names: list[str], what: str, interface: str) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise ValidationError(f"Duplicate {what} {name} in {interface}")
        seen.add(name)


def validate(interfaces: list[Interface]) -> None:
    """Validate parsed interface definitions."""
    _check_unique([i.name for i in interfaces], "interface", "file")

    for iface in interfaces:
        _check_unique([m.name for m in iface.methods], "method", iface.name)
        _check_unique([s.name for s in iface.signals], "signal", iface.name)
        _check_unique([p.name for p in iface.properties], "property", iface.name)

        try:
            flags_value(iface.flags, COMMON_MASK, f"interface {iface.name}")
            for m in iface.methods:
                flags_value(m.flags, METHOD_MASK, f"method {m.name}")
                m.signature()
                m.result()
            for s in iface.signals:
                flags_value(s.flags, COMMON_MASK, f"signal {s.name}")
                s.signature()
            for p in iface.properties:
                flags_value(p.flags, PROPERTY_MASK, f"property {p.name}")
                p.signature()
        except (FlagDomainError, SignatureError, SpellingError) as e:
            raise ValidationError(f"{iface.name}: {e}") from e


def parse(text: str) -> list[Interface]:
    """Parse an interface definition file."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/interface.lark", encoding="utf-8") as f:
            grammar = f.read()
        _g_parser = Lark(grammar, parser="lalr")

    try:
        tree = _g_parser.parse(text)
    except LarkError as e:
        raise ValidationError(f"Syntax error: {e}") from e

    interfaces = TreeTransformer().transform(tree)
    validate(interfaces)
    return interfaces
