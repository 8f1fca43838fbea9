"""Ordered vtables."""

from collections.abc import Iterable, Iterator
from typing import overload

from .builder import end, start
from .entry import EntryKind, VtableEntry
from .flags import VtableError


class MalformedTableError(VtableError):
    """Raised when a vtable is not framed by START/END or repeats a member."""


class Vtable:
    """An immutable, ordered sequence of vtable entries.

    Entry order is the enumeration order seen by the bus runtime. Framing is
    not checked on construction; the bus runtime checks it when the table is
    registered, and ``validate`` runs the same checks up front.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[VtableEntry]) -> None:
        self._entries = tuple(entries)
        for entry in self._entries:
            if not isinstance(entry, VtableEntry):
                raise TypeError(f"Not a vtable entry: {entry!r}")

    @classmethod
    def build(cls, flags: int, *members: VtableEntry) -> "Vtable":
        """Frame ``members`` with ``start(flags)`` and ``end()``."""
        return cls([start(flags), *members, end()])

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[VtableEntry]:
        return iter(self._entries)

    @overload
    def __getitem__(self, index: int) -> VtableEntry: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[VtableEntry, ...]: ...

    def __getitem__(self, index: int | slice) -> VtableEntry | tuple[VtableEntry, ...]:
        return self._entries[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vtable):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"Vtable({list(self._entries)!r})"

    @property
    def entries(self) -> tuple[VtableEntry, ...]:
        return self._entries

    @property
    def flags(self) -> int:
        """Table-wide flags carried by the START entry."""
        if self._entries and self._entries[0].kind == EntryKind.START:
            return self._entries[0].flags
        return 0

    @property
    def members(self) -> tuple[VtableEntry, ...]:
        return tuple(e for e in self._entries if e.kind.is_member)

    @property
    def methods(self) -> tuple[VtableEntry, ...]:
        return tuple(e for e in self._entries if e.kind == EntryKind.METHOD)

    @property
    def signals(self) -> tuple[VtableEntry, ...]:
        return tuple(e for e in self._entries if e.kind == EntryKind.SIGNAL)

    @property
    def properties(self) -> tuple[VtableEntry, ...]:
        return tuple(e for e in self._entries if e.kind.is_property)

    def find(self, member: str) -> VtableEntry | None:
        """Get the first member entry named ``member``."""
        for entry in self._entries:
            if entry.kind.is_member and entry.member == member:
                return entry
        return None

    def validate(self) -> "Vtable":
        """Check framing and member uniqueness, returning self.

        Raises:
            MalformedTableError: The table is not well formed.
        """
        if not self._entries or self._entries[0].kind != EntryKind.START:
            raise MalformedTableError("Vtable must begin with a START entry")
        if len(self._entries) < 2 or self._entries[-1].kind != EntryKind.END:
            raise MalformedTableError("Vtable must end with an END entry")

        seen: set[tuple[str, str | None]] = set()
        for i, entry in enumerate(self._entries[1:-1], start=1):
            if not entry.kind.is_member:
                raise MalformedTableError(f"Unexpected {entry.kind.name} entry at index {i}")
            # Methods, signals and properties live in separate namespaces
            key = ("property" if entry.kind.is_property else entry.kind.name, entry.member)
            if key in seen:
                raise MalformedTableError(f"Duplicate {key[0].lower()} {entry.member!r}")
            seen.add(key)
        return self
