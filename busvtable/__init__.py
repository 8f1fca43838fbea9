"""busvtable - D-Bus signatures and vtable descriptors for native types."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("busvtable")
except PackageNotFoundError:
    __version__ = "(local)"
