"""Interface definition tooling for busvtable."""

from .binding import BindingError as BindingError
from .binding import bind as bind
from .binding import not_implemented as not_implemented
from .parser import ValidationError as ValidationError
from .parser import parse as parse
from .types import *
