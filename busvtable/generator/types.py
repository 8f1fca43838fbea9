"""Type definitions for interface definition parsing."""

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin

from busvtable.signature import Signature, compose


@dataclass
class Argument(DataClassJsonMixin):
    """A named method or signal argument with its C/C++ type spelling."""

    name: str
    type: str


@dataclass
class Method(DataClassJsonMixin):
    """Represents a method declaration."""

    name: str
    arguments: list[Argument]
    results: list[Argument]
    flags: list[str] = field(default_factory=list)

    def signature(self) -> Signature:
        return compose(*(a.type for a in self.arguments))

    def result(self) -> Signature:
        return compose(*(a.type for a in self.results))


@dataclass
class Signal(DataClassJsonMixin):
    """Represents a signal declaration."""

    name: str
    arguments: list[Argument]
    flags: list[str] = field(default_factory=list)

    def signature(self) -> Signature:
        return compose(*(a.type for a in self.arguments))


@dataclass
class Property(DataClassJsonMixin):
    """Represents a property declaration.

    ``writable`` comes from the ``writable`` pseudo-flag and is not kept in
    ``flags``.
    """

    name: str
    type: str
    writable: bool
    flags: list[str] = field(default_factory=list)

    def signature(self) -> Signature:
        return compose(self.type)


@dataclass
class Interface(DataClassJsonMixin):
    """Represents a complete interface definition."""

    name: str
    methods: list[Method]
    signals: list[Signal]
    properties: list[Property]
    flags: list[str] = field(default_factory=list)
