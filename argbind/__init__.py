'''
Bind the command-line arguments to the fields of a dataclass.
'''
from .errors import (
    ArgumentSyntaxError,
    BindError,
    CoercionError,
    CoercionNotImplementedError,
    RequiredMissingError,
    SchemaError,
    UnknownArgumentError,
    UnsupportedTypeError,
    report,
)
from .parser import BindingParser, bind
from .types import Argument, AtomicInt, AtomicLong, Float32, Int8, Int16, Int32, Int64

Field = Argument
