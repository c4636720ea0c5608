'''
Errors raised while binding the command-line to a dataclass, and their rendering.

Every error aborts the whole binding: nothing is collected or resumed. The error carries
the message plus read-only options describing where it happened (`argument`, `field`,
`token`, `index`), and renders itself through rich for friendly reporting.
'''
from types import MappingProxyType
from typing import Any, Optional

from rich.console import Console, Group
from rich.text import Text

console = Console(stderr=True)

STYLES = {
    'kind': 'bold #00E5FF',
    'title': 'bold #FF4DA6',
    'message': '#C8C8D0',
    'hint-arrow': '#9CE19C dim',
    'hint': 'italic #9CE19C',
}


class BindError(Exception):
    title = 'binding failed'
    hint = 'check the declared arguments and the command-line.'

    def __init__(self, message: str, **options: Any) -> None:
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def argument(self) -> Optional[str]:
        return self.options.get('argument')

    @property
    def field(self) -> Optional[str]:
        return self.options.get('field')

    def __rich__(self):
        header = Text.assemble(
            '[ ',
            Text(type(self).__name__, STYLES['kind']),
            ' | ',
            Text(self.title.title(), STYLES['title']),
            ' ]'
        )
        message = Text(self.message, STYLES['message'])
        hint = Text.assemble(
            Text(' → ', STYLES['hint-arrow']),
            Text(self.options.get('hint', self.hint), STYLES['hint'])
        )

        return Group(header, message, hint)


class SchemaError(BindError):
    title = 'invalid declaration'
    hint = 'argument names must be unique, non-empty, without a leading dash or whitespace.'


class ArgumentSyntaxError(BindError):
    title = 'malformed token'
    hint = 'use "--name=value" or "-name value".'


class UnknownArgumentError(BindError):
    title = 'unknown argument'
    hint = 'only the declared short and long names are accepted.'


class CoercionError(BindError):
    title = 'invalid value'
    hint = 'the value must match the type of the field.'


class UnsupportedTypeError(CoercionError):
    title = 'unsupported type'
    hint = 'declare an initializer to convert this field.'


class CoercionNotImplementedError(CoercionError, NotImplementedError):
    title = 'not implemented'
    hint = 'sequence fields are not converted yet, declare an initializer instead.'


class RequiredMissingError(BindError):
    title = 'missing argument'
    hint = 'pass the argument or declare a default for it.'


def report(error: BindError, console: Console = console) -> None:
    '''
        Print a binding error to the console, stderr by default.

        The process is not terminated, the exit policy belongs to the caller.
    '''
    console.print(error)


__all__ = (
    'BindError',
    'SchemaError',
    'ArgumentSyntaxError',
    'UnknownArgumentError',
    'CoercionError',
    'UnsupportedTypeError',
    'CoercionNotImplementedError',
    'RequiredMissingError',
    'report',
)
