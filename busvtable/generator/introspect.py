"""D-Bus introspection XML rendering."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from jinja2 import Environment, PackageLoader

from busvtable.vtable import CommonFlag, EntryKind, MethodFlag, PropertyFlag, Vtable, VtableEntry

env = Environment(
    loader=PackageLoader("busvtable.generator", "templates"),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("introspect.xml.j2")

ANNOTATION_DEPRECATED = "org.freedesktop.DBus.Deprecated"
ANNOTATION_NO_REPLY = "org.freedesktop.DBus.Method.NoReply"
ANNOTATION_EMITS_CHANGED = "org.freedesktop.DBus.Property.EmitsChangedSignal"
ANNOTATION_EXPLICIT = "org.freedesktop.systemd1.Explicit"


@dataclass
class _Arg:
    name: str | None
    type: str
    direction: str | None = None


@dataclass
class _Member:
    name: str
    args: list[_Arg] = field(default_factory=list)
    annotations: dict[str, str] = field(default_factory=dict)
    type: str = ""
    access: str = ""


@dataclass
class _Interface:
    name: str
    methods: list[_Member]
    signals: list[_Member]
    properties: list[_Member]
    annotations: dict[str, str]


def _args(codes: tuple[str, ...], names: list[str], direction: str | None) -> list[_Arg]:
    """Pair type codes with names, consuming names from the front of ``names``."""
    args = []
    for code in codes:
        name = names.pop(0) if names else None
        args.append(_Arg(name=name, type=code, direction=direction))
    return args


def _common_annotations(entry: VtableEntry) -> dict[str, str]:
    if entry.flags & CommonFlag.DEPRECATED:
        return {ANNOTATION_DEPRECATED: "true"}
    return {}


def _method(entry: VtableEntry) -> _Member:
    names = list(entry.argument_names)
    member = _Member(
        name=entry.member or "",
        args=_args(entry.signature.codes, names, "in") + _args(entry.result.codes, names, "out"),
        annotations=_common_annotations(entry),
    )
    if entry.flags & MethodFlag.NO_REPLY:
        member.annotations[ANNOTATION_NO_REPLY] = "true"
    return member


def _signal(entry: VtableEntry) -> _Member:
    return _Member(
        name=entry.member or "",
        args=_args(entry.signature.codes, list(entry.argument_names), None),
        annotations=_common_annotations(entry),
    )


def _property(entry: VtableEntry) -> _Member:
    member = _Member(
        name=entry.member or "",
        annotations=_common_annotations(entry),
        type=str(entry.signature),
        access="readwrite" if entry.is_writable else "read",
    )
    if entry.flags & PropertyFlag.CONST:
        member.annotations[ANNOTATION_EMITS_CHANGED] = "const"
    elif entry.flags & PropertyFlag.EMITS_INVALIDATION:
        member.annotations[ANNOTATION_EMITS_CHANGED] = "invalidates"
    elif not entry.flags & PropertyFlag.EMITS_CHANGE:
        member.annotations[ANNOTATION_EMITS_CHANGED] = "false"
    if entry.flags & PropertyFlag.EXPLICIT:
        member.annotations[ANNOTATION_EXPLICIT] = "true"
    return member


def _interface(name: str, vtable: Vtable) -> _Interface:
    visible = [e for e in vtable.members if not e.flags & CommonFlag.HIDDEN]
    annotations = {}
    if vtable.flags & CommonFlag.DEPRECATED:
        annotations[ANNOTATION_DEPRECATED] = "true"

    return _Interface(
        name=name,
        methods=[_method(e) for e in visible if e.kind == EntryKind.METHOD],
        signals=[_signal(e) for e in visible if e.kind == EntryKind.SIGNAL],
        properties=[_property(e) for e in visible if e.kind.is_property],
        annotations=annotations,
    )


def render(interfaces: Iterable[tuple[str, Vtable]]) -> str:
    """Render introspection XML for ``(interface name, vtable)`` pairs.

    Hidden members are left out, as sd-bus does.
    """
    return template.render(interfaces=[_interface(name, vtable) for name, vtable in interfaces])
