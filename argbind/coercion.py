'''
methods to convert the raw command-line strings to the values of the bound fields.
'''
import math
import re
import struct
from decimal import Decimal, InvalidOperation
from functools import partial
from typing import Any, Callable, Dict, Optional

from .errors import CoercionError, CoercionNotImplementedError, UnsupportedTypeError
from .types import AtomicInt, AtomicLong, FieldDescriptor, SemanticType

_INTEGER = re.compile(r'[+-]?[0-9]+')


def text_type_fn(val: str) -> str:
    return val


def integer_type_fn(val: str, bits: Optional[int] = None) -> int:
    '''
        Convert a string to an integer.

        Only an optional sign followed by decimal digits is accepted, without whitespace
        nor underscores.

        Parameters:
        - val (`str`): the string to convert.
        - bits (`Optional[int]`, optional):
            The width of a two's complement integer to check the range against.
            `None` accepts any integer.

        Raises:
        - `ValueError`: if the string is not an integer, or out of the range.
    '''
    if _INTEGER.fullmatch(val) is None:
        raise ValueError(f'invalid integer literal: {val!r}')
    number = int(val)
    if bits is not None:
        lowest, highest = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        if not lowest <= number <= highest:
            raise ValueError(
                f'value {val} out of range for a {bits}-bit integer'
            )

    return number


def float_type_fn(val: str, single: bool = False) -> float:
    '''
        Convert a string to a float, rounded to single precision if `single` is set.

        A single precision overflow gives an infinity of the same sign.
    '''
    if val != val.strip() or '_' in val:
        raise ValueError(f'invalid float literal: {val!r}')
    number = float(val)
    if single:
        try:
            number = struct.unpack('f', struct.pack('f', number))[0]
        except OverflowError:
            number = math.copysign(math.inf, number)

    return number


def bool_type_fn(val: str) -> bool:
    lowered = val.lower()
    if lowered == 'true':
        return True
    if lowered == 'false':
        return False
    raise ValueError(f'invalid boolean literal: {val!r}, expect "true" or "false"')


def decimal_type_fn(val: str) -> Decimal:
    '''
        Convert a string to a finite `decimal.Decimal`.
    '''
    if val != val.strip() or '_' in val:
        raise ValueError(f'invalid decimal literal: {val!r}')
    try:
        number = Decimal(val)
    except InvalidOperation as e:
        raise ValueError(f'invalid decimal literal: {val!r}') from e
    if not number.is_finite():
        raise ValueError(f'decimal value must be finite: {val!r}')

    return number


def atomic_type_fn(val: str, counter_type: type) -> Any:
    return counter_type(integer_type_fn(val, bits=counter_type.bits))


# Text first, it is by far the most common.
TYPE_FNS: Dict[SemanticType, Callable[[str], Any]] = {
    SemanticType.Text: text_type_fn,
    SemanticType.Byte: partial(integer_type_fn, bits=8),
    SemanticType.Short: partial(integer_type_fn, bits=16),
    SemanticType.Int: partial(integer_type_fn, bits=32),
    SemanticType.Long: partial(integer_type_fn, bits=64),
    SemanticType.Float: partial(float_type_fn, single=True),
    SemanticType.Double: float_type_fn,
    SemanticType.Boolean: bool_type_fn,
    SemanticType.BigInteger: integer_type_fn,
    SemanticType.BigDecimal: decimal_type_fn,
    SemanticType.AtomicInt: partial(atomic_type_fn, counter_type=AtomicInt),
    SemanticType.AtomicLong: partial(atomic_type_fn, counter_type=AtomicLong),
}


def coerce_value(descriptor: FieldDescriptor, val: str) -> Any:
    '''
        Convert a raw string to the value of a bound field.

        A declared initializer takes the whole conversion over and its result is used as is.
        Otherwise the semantic type of the field selects the conversion function.

        Parameters:
        - descriptor (`FieldDescriptor`): the field receiving the value.
        - val (`str`): the raw string, from the command-line or a literal default.

        Returns:
        - `Any`: the converted value.

        Raises:
        - `CoercionError`: if the string does not match the type of the field.
        - `CoercionNotImplementedError`: for sequence fields.
        - `UnsupportedTypeError`: for any other type without an initializer.
    '''
    initializer = descriptor.meta.initializer if descriptor.meta else None
    if initializer is not None:
        try:
            return initializer(val)
        except (ValueError, TypeError, LookupError, ArithmeticError) as e:
            raise CoercionError(
                f'The initializer of "{descriptor.label}" rejected {val!r}: {e}',
                field=descriptor.name,
                value=val
            ) from e

    semantic_type = descriptor.semantic_type
    type_fn = TYPE_FNS.get(semantic_type)
    if type_fn is not None:
        try:
            return type_fn(val)
        except (ValueError, ArithmeticError) as e:
            raise CoercionError(
                f'Cannot convert {val!r} to {semantic_type.value} for "{descriptor.label}": {e}',
                field=descriptor.name,
                value=val
            ) from e

    if semantic_type is SemanticType.Sequence:
        raise CoercionNotImplementedError(
            f'Converting sequence field "{descriptor.label}" is not implemented',
            field=descriptor.name,
            value=val
        )

    raise UnsupportedTypeError(
        f'Unsupported type {descriptor.annotation!r} for "{descriptor.label}"',
        field=descriptor.name,
        value=val
    )


def zero_value(descriptor: FieldDescriptor) -> Any:
    '''
        The value of a field nothing assigned: `None` for optional fields and types
        without a natural zero.
    '''
    if descriptor.nullable:
        return None
    semantic_type = descriptor.semantic_type
    if semantic_type is SemanticType.Text:
        return ''
    if SemanticType.integer_bits(semantic_type) is not None:
        if semantic_type is SemanticType.AtomicInt:
            return AtomicInt()
        if semantic_type is SemanticType.AtomicLong:
            return AtomicLong()
        return 0
    if semantic_type is SemanticType.BigInteger:
        return 0
    if semantic_type is SemanticType.Float or semantic_type is SemanticType.Double:
        return 0.0
    if semantic_type is SemanticType.Boolean:
        return False
    if semantic_type is SemanticType.BigDecimal:
        return Decimal(0)

    return None
