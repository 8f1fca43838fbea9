"""Vtable descriptor entries and tables."""

from .builder import as_signature as as_signature
from .builder import end as end
from .builder import method as method
from .builder import method_with_names as method_with_names
from .builder import method_with_offset as method_with_offset
from .builder import property as property
from .builder import property_by_offset as property_by_offset
from .builder import signal as signal
from .builder import signal_with_names as signal_with_names
from .builder import start as start
from .entry import EntryKind as EntryKind
from .entry import HandlerStatus as HandlerStatus
from .entry import VtableEntry as VtableEntry
from .entry import join_names as join_names
from .entry import split_names as split_names
from .flags import CommonFlag as CommonFlag
from .flags import FlagDomainError as FlagDomainError
from .flags import MethodFlag as MethodFlag
from .flags import PropertyFlag as PropertyFlag
from .flags import VtableError as VtableError
from .flags import capability as capability
from .flags import describe_flags as describe_flags
from .flags import flag_by_name as flag_by_name
from .table import MalformedTableError as MalformedTableError
from .table import Vtable as Vtable
