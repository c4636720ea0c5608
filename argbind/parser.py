'''
A parser to bind the command-line tokens to the fields of a dataclass.
'''
import logging
import sys
from dataclasses import MISSING, fields
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type

from .coercion import coerce_value, zero_value
from .errors import ArgumentSyntaxError, RequiredMissingError, SchemaError, UnknownArgumentError
from .types import DataclassType, FieldDescriptor
from .utils import analysis_dataclass, extract_arguments, map_arguments_to_fields, verify_argument_names

logger = logging.getLogger(__name__)


class BindingParser:
    '''
        A command-line parser binding the arguments to the fields of a data class.
        The parser analyzes the fields of the class once, checks the declared names and
        builds the table resolving each name to its field. Every call of `parse` then
        walks the tokens with a fresh state, so a parser is safe to share.

        Two token forms are recognized:
        - `--name=value`, the value may be empty but the `=` is mandatory.
        - `-name value`, the value is always the next token.
        Any token not starting with a dash is skipped.

        Parameters:
        - clz (`Type[DataclassType]`): The type of the data class to bind.

        Example:
        ```python
        from dataclasses import dataclass
        from argbind import Argument, BindingParser

        @dataclass(frozen=True)
        class MyDataClass:
            arg1: int = Argument('a', 'arg1', required=True)
            arg2: str = Argument('b', 'arg2', default_value='hello')

        parser = BindingParser(MyDataClass)

        args = parser.parse(['-a', '1', '--arg2=world'])

        print(args.arg1, args.arg2)
        ```
    '''

    def __init__(self, clz: Type[DataclassType]) -> None:
        self._dataclass = clz
        self._slots = tuple(analysis_dataclass(clz))
        self._fields = tuple(extract_arguments(self._slots))
        verify_argument_names(self._fields)
        self._names = map_arguments_to_fields(self._fields)

    @property
    def dataclass(self) -> Type[DataclassType]:
        return self._dataclass

    @property
    def arguments(self) -> Tuple[FieldDescriptor, ...]:
        return self._fields

    @property
    def names(self) -> Mapping[str, FieldDescriptor]:
        return MappingProxyType(self._names)

    def _split_token(self, args: List[str], index: int) -> Tuple[str, str, int]:
        token = args[index]
        if token.startswith('--'):
            sep = token.find('=')
            if sep == -1:
                raise ArgumentSyntaxError(
                    "long-form arguments must specify value with '='!",
                    token=token,
                    index=index
                )
            return token[2:sep], token[sep + 1:], index + 1

        if index + 1 >= len(args):
            raise ArgumentSyntaxError(
                f'short-form argument "{token}" must be followed by a value',
                argument=token[1:],
                token=token,
                index=index
            )
        return token[1:], args[index + 1], index + 2

    def _reconcile(
        self, unsatisfied: Dict[FieldDescriptor, None], staged: Dict[str, Any]
    ) -> None:
        for descriptor in unsatisfied:
            meta = descriptor.meta
            if meta.default_creator is not None:
                staged[descriptor.name] = meta.default_creator()
                logger.debug('"%s" created by its default creator', descriptor.label)
            elif meta.default_value != '':
                staged[descriptor.name] = coerce_value(descriptor, meta.default_value)
                logger.debug(
                    '"%s" set to its default value %r', descriptor.label, meta.default_value
                )
            elif meta.required:
                raise RequiredMissingError(
                    f'Required argument not provided: {meta.short_name}',
                    argument=meta.short_name,
                    field=descriptor.name
                )

    def _init_dataclass_with_args(self, staged: Dict[str, Any]) -> DataclassType:
        defaults = {
            field.name
            for field in fields(self._dataclass)
            if field.default is not MISSING or field.default_factory is not MISSING
        }
        init_kwargs = {}
        for descriptor in self._slots:
            if descriptor.name in staged:
                init_kwargs[descriptor.name] = staged[descriptor.name]
            elif descriptor.name not in defaults:
                init_kwargs[descriptor.name] = zero_value(descriptor)

        try:
            return self._dataclass(**init_kwargs)
        except TypeError as e:
            raise SchemaError(
                f'Cannot create "{self._dataclass.__qualname__}" from the bound fields: {e}'
            ) from e

    def parse(self, args: Optional[Sequence[str]] = None) -> DataclassType:
        '''
            Parse the command-line arguments into an initialized dataclass instance.

            The values are collected in a staging dictionary first, the instance is created
            once every token is consumed and every default applied, so frozen data classes
            are supported.

            Parameters:
            - args (`Optional[Sequence[str]]`, optional):
                Command-line arguments to be parsed. If not provided, sys.argv[1:] is used.

            Returns:
            - `DataclassType`: the initialized dataclass instance.

            Raises:
            - `ArgumentSyntaxError`: for a long-form token without `=` or a trailing short-form token.
            - `UnknownArgumentError`: for a name no field declares.
            - `CoercionError`: for a value not matching the type of its field.
            - `RequiredMissingError`: for a required field left without value.
            - `SchemaError`: if the data class cannot be created from the bound fields.
        '''
        if args is None:
            args = sys.argv[1:]
        args = list(args)

        staged: Dict[str, Any] = {}
        unsatisfied = dict.fromkeys(self._fields)

        index = 0
        while index < len(args):
            token = args[index]
            if not token.startswith('-'):
                index += 1
                continue

            name, value, next_index = self._split_token(args, index)
            descriptor = self._names.get(name)
            if descriptor is None:
                raise UnknownArgumentError(
                    f'Unknown argument: {name}',
                    argument=name,
                    token=token,
                    index=index
                )

            staged[descriptor.name] = coerce_value(descriptor, value)
            unsatisfied.pop(descriptor, None)
            logger.debug('"%s" bound from token %d', descriptor.label, index)
            index = next_index

        self._reconcile(unsatisfied, staged)

        return self._init_dataclass_with_args(staged)


def bind(
    clz: Type[DataclassType], args: Optional[Sequence[str]] = None
) -> DataclassType:
    '''
        Bind the command-line arguments to a new instance of the data class.

        Parameters:
        - clz (`Type[DataclassType]`): the data class declaring the arguments.
        - args (`Optional[Sequence[str]]`, optional): the tokens, sys.argv[1:] if not provided.

        Returns:
        - `DataclassType`: the populated instance.
    '''
    return BindingParser(clz).parse(args)
