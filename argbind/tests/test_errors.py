from io import StringIO

from rich.console import Console

from argbind.errors import (
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


def _console():
    return Console(file=StringIO(), width=120, color_system=None)


def test_error_hierarchy():
    for error_type in (
        SchemaError, ArgumentSyntaxError, UnknownArgumentError, CoercionError,
        RequiredMissingError
    ):
        assert issubclass(error_type, BindError)

    assert issubclass(UnsupportedTypeError, CoercionError)
    assert issubclass(CoercionNotImplementedError, CoercionError)
    assert issubclass(CoercionNotImplementedError, NotImplementedError)


def test_error_options_are_read_only():
    error = UnknownArgumentError('Unknown argument: x', argument='x', index=3)

    assert str(error) == 'Unknown argument: x'
    assert error.argument == 'x'
    assert error.field is None
    assert error.options['index'] == 3

    try:
        error.options['index'] = 4
    except TypeError:
        pass
    else:
        raise AssertionError('options must be read-only')


def test_report_renders_title_message_and_hint():
    console = _console()
    report(RequiredMissingError('Required argument not provided: s'), console=console)

    output = console.file.getvalue()
    assert 'RequiredMissingError' in output
    assert 'Missing Argument' in output
    assert 'Required argument not provided: s' in output
    assert RequiredMissingError.hint in output


def test_report_uses_hint_override():
    console = _console()
    report(SchemaError('bad name', hint='rename it.'), console=console)

    output = console.file.getvalue()
    assert 'rename it.' in output
    assert SchemaError.hint not in output
