"""D-Bus type signature registry and composer."""

from .registry import EMPTY as EMPTY
from .registry import InvalidSignatureError as InvalidSignatureError
from .registry import MappingEntry as MappingEntry
from .registry import RegistryConflictError as RegistryConflictError
from .registry import Signature as Signature
from .registry import SignatureError as SignatureError
from .registry import TypeRegistry as TypeRegistry
from .registry import UnmappedTypeError as UnmappedTypeError
from .registry import compose as compose
from .registry import decay as decay
from .registry import default_registry as default_registry
from .registry import map_type as map_type
from .registry import parse_signature as parse_signature
from .spelling import SpellingError as SpellingError
from .spelling import parse_type as parse_type
from .types import *
