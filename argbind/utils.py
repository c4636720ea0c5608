'''
methods to analysis the dataclass and build the names of the bound arguments.
'''
import logging
import re
import sys
import types
import warnings
from collections import deque
from dataclasses import Field, fields, is_dataclass
from decimal import Decimal
from inspect import isclass
from typing import Any, Dict, List, Sequence, Tuple, Type, Union, get_args, get_origin, get_type_hints

from .errors import SchemaError
from .types import (
    ArgumentMeta,
    AtomicInt,
    AtomicLong,
    DataclassType,
    FieldDescriptor,
    Float32,
    Int8,
    Int16,
    Int32,
    Int64,
    SemanticType,
)

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r'\s')

_SCALAR_TYPES = (
    (str, SemanticType.Text),
    (object, SemanticType.Text),
    (Any, SemanticType.Text),
    (Int8, SemanticType.Byte),
    (Int16, SemanticType.Short),
    (Int32, SemanticType.Int),
    (Int64, SemanticType.Long),
    (Float32, SemanticType.Float),
    (float, SemanticType.Double),
    (bool, SemanticType.Boolean),
    (int, SemanticType.BigInteger),
    (Decimal, SemanticType.BigDecimal),
    (AtomicInt, SemanticType.AtomicInt),
    (AtomicLong, SemanticType.AtomicLong),
)

_SEQUENCE_TYPES = (list, tuple, set, frozenset, deque)


def _analysis_type(dtype) -> Tuple[SemanticType, bool]:
    for scalar, semantic_type in _SCALAR_TYPES:
        if dtype is scalar:
            return semantic_type, False

    origin_type = get_origin(dtype)
    if origin_type is Union or origin_type is types.UnionType:
        dtype_generics = [t for t in get_args(dtype) if t is not type(None)]
        if len(dtype_generics) != 1:
            return SemanticType.Unsupported, False
        semantic_type, _ = _analysis_type(dtype_generics[0])
        return semantic_type, True

    if isclass(origin_type or dtype) and issubclass(
        origin_type or dtype, _SEQUENCE_TYPES
    ):
        return SemanticType.Sequence, False

    return SemanticType.Unsupported, False


def _read_meta(field: Field, owner: type) -> ArgumentMeta:
    metadata = field.metadata
    long_names = metadata.get('long_names', ())
    if isinstance(long_names, str):
        long_names = (long_names, )

    meta = ArgumentMeta(
        short_name=metadata['short_name'],
        long_names=tuple(dict.fromkeys(long_names)),
        required=bool(metadata.get('required', False)),
        default_value=metadata.get('default_value', ''),
        default_creator=metadata.get('default_creator', None),
        initializer=metadata.get('initializer', None)
    )
    for name in meta.names:
        if not isinstance(name, str):
            raise SchemaError(
                f'Argument name must be a string! : {name!r}',
                argument=name,
                field=field.name
            )
    if not isinstance(meta.default_value, str):
        raise SchemaError(
            f'The default value of "{owner.__qualname__}.{field.name}" must be a string, '
            'use default_creator for typed defaults.',
            field=field.name
        )
    if meta.required and meta.has_default:
        warnings.warn(
            f'The field "{owner.__qualname__}.{field.name}" is required but declares a default, '
            'the default is applied when the argument is absent.', UserWarning
        )

    return meta


def analysis_field(field: Field, owner: type, annotation: Any) -> FieldDescriptor:
    '''
        Describe one dataclass field.

        Parameters:
        - field (`dataclasses.Field`): the field to describe.
        - owner (`type`): the dataclass declaring the field.
        - annotation (`Any`): the resolved annotation of the field.

        Returns:
        - `FieldDescriptor`, with `meta` set only if the field carries argument metadata.
    '''
    semantic_type, nullable = _analysis_type(annotation)

    if field.metadata.get('type', None) is not None:
        if semantic_type is not SemanticType.Unsupported:
            warnings.warn(
                f'The type for "{field.name}" will be occupied with meta.',
                UserWarning
            )
        annotation = field.metadata['type']
        semantic_type, nullable = _analysis_type(annotation)

    meta = None
    if 'short_name' in field.metadata:
        meta = _read_meta(field, owner)
        if meta.initializer is not None:
            semantic_type = SemanticType.Custom
        elif isinstance(annotation, str):
            raise SchemaError(
                f'The annotation {annotation!r} of "{owner.__qualname__}.{field.name}" '
                'cannot be resolved, declare an initializer or a type for it.',
                field=field.name
            )

    return FieldDescriptor(
        name=field.name,
        owner=owner,
        annotation=annotation,
        semantic_type=semantic_type,
        nullable=nullable,
        meta=meta
    )


def _own_fields(klass: type) -> List[Field]:
    '''
        The fields a dataclass declares itself. Inherited fields share the `Field` object
        of the base, a redeclared field gets a new one.
    '''
    inherited = [
        base.__dict__.get('__dataclass_fields__', {})
        for base in klass.__mro__[1:]
    ]
    own = []
    for name, field in klass.__dict__.get('__dataclass_fields__', {}).items():
        if all(base_fields.get(name) is not field for base_fields in inherited):
            own.append(field)
    return own


def _resolve_annotation(field: Field, owner: type) -> Any:
    '''
        Evaluate a string annotation in the module of its dataclass. A name that cannot be
        resolved there, e.g. a class local to a function, leaves the string as is.
    '''
    if not isinstance(field.type, str):
        return field.type
    module = sys.modules.get(owner.__module__)
    namespace = dict(vars(module)) if module is not None else {}
    try:
        return eval(field.type, namespace, dict(vars(owner)))
    except NameError:
        logger.debug(
            'annotation %r of "%s.%s" is not resolvable', field.type,
            owner.__qualname__, field.name
        )
        return field.type


def analysis_dataclass(cls: Type[DataclassType]) -> List[FieldDescriptor]:
    '''
        Describe every initializable field of a dataclass.

        The own fields of the class come first, then the fields of its bases, following
        the method resolution order. A field redeclared by a subclass is described once,
        with the declaration of the subclass.

        Parameters:
        - cls (`Type[DataclassType]`): the dataclass to describe.

        Returns:
        - `List[FieldDescriptor]`: one descriptor per `init` field.

        Raises:
        - `SchemaError`: if `cls` is not a dataclass type, or if the annotation of an
          argument without initializer cannot be resolved.
    '''
    if not isclass(cls) or not is_dataclass(cls):
        raise SchemaError(
            f'The target must be a dataclass type, got {cls!r}'
        )

    init_fields = {field.name for field in fields(cls) if field.init}
    try:
        hints = get_type_hints(cls)
    except NameError:
        hints = None

    seen = set()
    descriptors = []
    for klass in cls.__mro__:
        for field in _own_fields(klass):
            if field.name in seen or field.name not in init_fields:
                continue
            seen.add(field.name)
            if hints is not None:
                annotation = hints.get(field.name, field.type)
            else:
                annotation = _resolve_annotation(field, klass)
            descriptors.append(analysis_field(field, klass, annotation))

    return descriptors


def extract_arguments(
    descriptors: Sequence[FieldDescriptor]
) -> List[FieldDescriptor]:
    '''
        Keep the descriptors carrying argument metadata, in order.
    '''
    return [descriptor for descriptor in descriptors if descriptor.meta is not None]


def verify_argument_names(descriptors: Sequence[FieldDescriptor]) -> None:
    '''
        Check the short and long names of every argument, stopping at the first illegal one.

        Raises:
        - `SchemaError`: if a name is empty, starts with a dash or contains whitespace.
    '''
    for descriptor in descriptors:
        for name in descriptor.meta.names:
            if not name:
                raise SchemaError(
                    f'Argument name must not be empty! : {descriptor.label}',
                    argument=name,
                    field=descriptor.name
                )
            if name.startswith('-'):
                raise SchemaError(
                    f'Argument name must not begin with a dash (-)! : {name}',
                    argument=name,
                    field=descriptor.name
                )
            if _WHITESPACE.search(name):
                raise SchemaError(
                    f'Argument name must not contain whitespace! : {name!r}',
                    argument=name,
                    field=descriptor.name
                )


def map_arguments_to_fields(
    descriptors: Sequence[FieldDescriptor]
) -> Dict[str, FieldDescriptor]:
    '''
        Build the table resolving every short and long name to its field.

        A field may own several names, but a name belongs to one field only.

        Raises:
        - `SchemaError`: if two fields declare the same name.
    '''
    names: Dict[str, FieldDescriptor] = {}
    for descriptor in descriptors:
        for name in descriptor.meta.names:
            bound = names.get(name)
            if bound is not None and bound is not descriptor:
                raise SchemaError(
                    f'Argument name "{name}" is declared by both "{bound.label}" '
                    f'and "{descriptor.label}"',
                    argument=name,
                    field=descriptor.name
                )
            names[name] = descriptor

    logger.debug(
        'resolved %d argument names for %d fields', len(names), len(descriptors)
    )
    return names
