'''
defined the data classes to describe the fields bound from the command-line.
'''
import threading
from dataclasses import MISSING, dataclass, field
from enum import Enum
from typing import Any, Callable, NewType, Optional, Tuple, TypeVar

DataclassType = TypeVar('DataclassType')

# Fixed-width numeric annotations. At runtime these are plain `int` and
# `float` values, the width only drives the range check of the coercion.
Int8 = NewType('Int8', int)
Int16 = NewType('Int16', int)
Int32 = NewType('Int32', int)
Int64 = NewType('Int64', int)
Float32 = NewType('Float32', float)


class SemanticType(Enum):
    '''
        Enum representing the semantic type of a bound field.

        The semantic type is inferred from the annotation of the dataclass field and
        determines the conversion method used to turn a raw command-line string into
        the final field value.

        Semantic Types:
        - Text: `str` (also `object` and `Any`, which receive the raw string).
        - Byte, Short, Int, Long: signed integers of 8, 16, 32 and 64 bits.
        - Float, Double: single and double precision floating point.
        - Boolean: `true` or `false`, case-insensitive.
        - BigInteger: `int`, unbounded.
        - BigDecimal: `decimal.Decimal`.
        - AtomicInt, AtomicLong: counters built from a parsed 32 or 64 bit integer.
        - Sequence: collections of the above, declared but not convertible.
        - Custom: a field converted by its own initializer.
        - Unsupported: any other annotation.
    '''
    Text = 'text'
    Byte = 'byte'
    Short = 'short'
    Int = 'int'
    Long = 'long'
    Float = 'float'
    Double = 'double'
    Boolean = 'boolean'
    BigInteger = 'big integer'
    BigDecimal = 'big decimal'
    AtomicInt = 'atomic int'
    AtomicLong = 'atomic long'
    Sequence = 'sequence'
    Custom = 'custom'
    Unsupported = 'unsupported'

    @staticmethod
    def integer_bits(type: 'SemanticType') -> Optional[int]:
        if type is SemanticType.Byte:
            return 8
        if type is SemanticType.Short:
            return 16
        if type is SemanticType.Int or type is SemanticType.AtomicInt:
            return 32
        if type is SemanticType.Long or type is SemanticType.AtomicLong:
            return 64
        return None


def _wrap(value: int, bits: int) -> int:
    mask = (1 << bits) - 1
    value &= mask
    if value >> (bits - 1):
        value -= 1 << bits
    return value


class AtomicCounter:
    '''
        A thread-safe integer counter with two's complement overflow.

        Parameters:
        - value (`int`, optional): the initial value, defaults to 0.
    '''
    bits = 64

    def __init__(self, value: int = 0) -> None:
        self._lock = threading.Lock()
        self._value = _wrap(value, self.bits)

    def get(self) -> int:
        with self._lock:
            return self._value

    def set(self, value: int) -> None:
        with self._lock:
            self._value = _wrap(value, self.bits)

    def add_and_get(self, delta: int) -> int:
        with self._lock:
            self._value = _wrap(self._value + delta, self.bits)
            return self._value

    def increment_and_get(self) -> int:
        return self.add_and_get(1)

    def decrement_and_get(self) -> int:
        return self.add_and_get(-1)

    def __int__(self) -> int:
        return self.get()

    def __index__(self) -> int:
        return self.get()

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, AtomicCounter):
            return type(self) is type(other) and self.get() == other.get()
        if isinstance(other, int) and not isinstance(other, bool):
            return self.get() == other
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.get()})'


class AtomicInt(AtomicCounter):
    bits = 32


class AtomicLong(AtomicCounter):
    bits = 64


@dataclass(frozen=True)
class ArgumentMeta:
    '''
        The argument metadata attached to a dataclass field.

        Attributes:
        - short_name (str):
            The name used with the short form, `-name value`.
        - long_names (Tuple[str, ...], optional):
            Additional names used with the long form, `--name=value`.
        - required (bool, optional):
            Whether the binding fails when the argument is absent and no default is declared.
        - default_value (str, optional):
            A literal default converted like a command-line value, empty means no default.
        - default_creator (Optional[Callable[[], Any]], optional):
            A factory whose result is assigned as is when the argument is absent.
        - initializer (Optional[Callable[[str], Any]], optional):
            A custom converter replacing the conversion by type.

        Every name, short or long, is accepted with both forms.
    '''
    short_name: str
    long_names: Tuple[str, ...] = ()
    required: bool = False
    default_value: str = ''
    default_creator: Optional[Callable[[], Any]] = None
    initializer: Optional[Callable[[str], Any]] = None

    @property
    def names(self) -> Tuple[str, ...]:
        return (self.short_name, ) + self.long_names

    @property
    def has_default(self) -> bool:
        return self.default_creator is not None or self.default_value != ''


@dataclass(frozen=True, eq=False)
class FieldDescriptor:
    '''
        One settable slot of the target dataclass.

        Attributes:
        - name (str): the attribute name of the field.
        - owner (type): the dataclass declaring the field.
        - annotation (Any): the resolved annotation, or the `type` override from the metadata.
        - semantic_type (SemanticType): the conversion category of the field.
        - nullable (bool): whether the annotation is `Optional[...]`.
        - meta (Optional[ArgumentMeta]): the argument metadata, `None` for unbound fields.

        Descriptors compare by identity, so two fields never collapse in a set.
    '''
    name: str
    owner: type
    annotation: Any
    semantic_type: SemanticType
    nullable: bool = False
    meta: Optional[ArgumentMeta] = None

    @property
    def label(self) -> str:
        return f'{self.owner.__qualname__}.{self.name}'


def Argument(
    short_name: str,
    *long_names: str,
    required: bool = False,
    default_value: str = '',
    default_creator: Optional[Callable[[], Any]] = None,
    initializer: Optional[Callable[[str], Any]] = None,
    type: Optional[Any] = None,
    default: Optional[Any] = MISSING,
    default_factory: Optional[Callable] = MISSING
):
    '''
        Create a dataclass field bound to a command-line argument.

        This function generates a dataclass field whose metadata declares the names, the
        defaults and the conversion of the argument. A field declared without this metadata
        is never bound.

        Note: `default` and `default_factory` are the plain dataclass defaults, used when the
        argument is absent and declares no default of its own.

        Parameters:
        - short_name (`str`):
            The name used with `-name value`. Must not start with a dash nor contain whitespace.
        - long_names (`str`, variadic):
            Additional names used with `--name=value`, same rules as the short name.
        - required (`bool`, optional):
            Indicates whether the argument must be given. Defaults to False.
        - default_value (`str`, optional):
            Literal default, converted like a value from the command-line.
        - default_creator (`Optional[Callable[[], Any]]`, optional):
            Factory for the default value, its result is not converted.
        - initializer (`Optional[Callable[[str], Any]]`, optional):
            Custom conversion function from the raw string to the field value.
        - type (`Optional[Any]`, optional):
            Annotation used for the conversion instead of the field annotation.
        - default (`Optional[Any]`, optional):
            Dataclass default for the field. Defaults to MISSING.
        - default_factory (`Optional[Callable]`, optional):
            Dataclass default factory for the field. Defaults to MISSING.

        Returns:
        - `dataclasses.Field`:
            A dataclass field with the specified metadata.

        Example:
        ```python
        @dataclass
        class Options:
            count: int = Argument('c', 'count', default_value='1')
            name: str = Argument('n', 'name', required=True)
        ```
    '''
    meta_info = {
        'short_name': short_name,
        'long_names': long_names,
        'required': required,
        'default_value': default_value
    }
    if default_creator is not None:
        meta_info['default_creator'] = default_creator
    if initializer is not None:
        meta_info['initializer'] = initializer
    if type is not None:
        meta_info['type'] = type

    if default is not MISSING:
        return field(default=default, metadata=meta_info)
    elif default_factory is not MISSING:
        return field(default_factory=default_factory, metadata=meta_info)
    else:
        return field(metadata=meta_info)
