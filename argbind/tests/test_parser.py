import dataclasses
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import List, Optional

import pytest

from argbind import (
    Argument,
    ArgumentSyntaxError,
    BindingParser,
    CoercionError,
    CoercionNotImplementedError,
    Float32,
    Int8,
    Int64,
    RequiredMissingError,
    SchemaError,
    UnknownArgumentError,
    bind,
)


@dataclass
class Options:
    count: int = Argument('c', 'count')
    name: str = Argument('n', 'name', 'title')
    level: Int8 = Argument('l', 'level')
    ratio: float = Argument('r', 'ratio')
    single: Float32 = Argument('s', 'single')
    total: Int64 = Argument('t', 'total')
    verbose: bool = Argument('v', 'verbose')
    money: Decimal = Argument('m', 'money')


def test_long_and_short_forms_agree():
    values = {
        'count': '5',
        'name': 'hello',
        'level': '-3',
        'ratio': '2.5',
        'single': '0.1',
        'total': '9000000000',
        'verbose': 'true',
        'money': '10.25',
    }
    short_names = {d.name: d.meta.short_name for d in BindingParser(Options).arguments}

    long_args = [f'--{name}={value}' for name, value in values.items()]
    short_args = []
    for name, value in values.items():
        short_args.extend(['-' + short_names[name], value])

    assert bind(Options, long_args) == bind(Options, short_args)

    options = bind(Options, long_args)
    assert options.count == 5
    assert options.name == 'hello'
    assert options.level == -3
    assert options.total == 9000000000
    assert options.verbose is True
    assert options.money == Decimal('10.25')


def test_empty_long_value():
    assert bind(Options, ['--name=']).name == ''

    with pytest.raises(CoercionError):
        bind(Options, ['--count='])


def test_long_value_keeps_extra_equal_signs():
    assert bind(Options, ['--name=a=b']).name == 'a=b'


def test_long_form_requires_equal_sign():
    with pytest.raises(ArgumentSyntaxError, match="must specify value with '='") as info:
        bind(Options, ['--count', '5'])

    assert info.value.options['token'] == '--count'
    assert info.value.options['index'] == 0


def test_short_form_requires_value():
    with pytest.raises(ArgumentSyntaxError) as info:
        bind(Options, ['-n', 'x', '-c'])

    assert info.value.argument == 'c'
    assert info.value.options['index'] == 2


def test_short_form_takes_next_token_even_with_dash():
    assert bind(Options, ['-c', '-5']).count == -5
    assert bind(Options, ['-n', '--count=1']).name == '--count=1'


def test_unknown_argument():
    with pytest.raises(UnknownArgumentError, match='Unknown argument: x') as info:
        bind(Options, ['-c', '1', '-x', '2'])

    assert info.value.argument == 'x'

    with pytest.raises(UnknownArgumentError):
        bind(Options, ['--counts=1'])

    # no abbreviation
    with pytest.raises(UnknownArgumentError):
        bind(Options, ['--cou=1'])


def test_bare_dashes_are_unknown():
    with pytest.raises(UnknownArgumentError):
        bind(Options, ['--=1'])

    with pytest.raises(UnknownArgumentError):
        bind(Options, ['-', 'value'])


def test_positional_noise_is_skipped():
    assert bind(Options, ['notanoption']) == bind(Options, [])
    assert bind(Options, ['a', '-c', '3', 'b', 'c']).count == 3


def test_repeated_argument_last_wins():
    assert bind(Options, ['-c', '1', '-c', '2']).count == 2
    assert bind(Options, ['-n', 'first', '--title=second']).name == 'second'


def test_zero_values_for_absent_optional_arguments():
    options = bind(Options, [])

    assert options.count == 0
    assert options.name == ''
    assert options.ratio == 0.0
    assert options.verbose is False
    assert options.money == Decimal(0)


def test_required_argument():

    @dataclass
    class Required:
        size: int = Argument('s', 'size', required=True)

    with pytest.raises(RequiredMissingError, match='Required argument not provided: s') as info:
        bind(Required, [])

    assert info.value.argument == 's'
    assert info.value.field == 'size'
    assert bind(Required, ['--size=3']).size == 3


def test_default_value_is_coerced():

    @dataclass
    class Defaulted:
        size: int = Argument('s', default_value='10')

    assert bind(Defaulted, []).size == 10
    assert bind(Defaulted, ['-s', '4']).size == 4


def test_invalid_default_value_fails_only_when_used():

    @dataclass
    class Defaulted:
        size: int = Argument('s', default_value='ten')

    assert bind(Defaulted, ['-s', '1']).size == 1
    with pytest.raises(CoercionError):
        bind(Defaulted, [])


def test_default_creator_is_not_coerced():
    sentinel = object()
    calls = []

    def creator():
        calls.append(True)
        return sentinel

    @dataclass
    class Created:
        value: int = Argument('v', default_creator=creator, default_value='1')

    assert bind(Created, []).value is sentinel
    assert calls == [True]

    assert bind(Created, ['-v', '2']).value == 2
    assert calls == [True]


def test_required_with_default_uses_default():

    with pytest.warns(UserWarning):

        @dataclass
        class Contradiction:
            size: int = Argument('s', required=True, default_value='7')

        parser = BindingParser(Contradiction)

    assert parser.parse([]).size == 7


def test_dataclass_default_is_kept():

    @dataclass
    class Plain:
        label: Optional[str] = Argument('l')
        size: int = Argument('s', default=42)
        tags: List[str] = Argument('t', default_factory=list)
        untouched: str = 'keep'

    options = bind(Plain, [])

    assert options.size == 42
    assert options.tags == []
    assert options.label is None
    assert options.untouched == 'keep'


def test_sequence_field_is_not_implemented():

    @dataclass
    class Sequences:
        tags: List[str] = Argument('t', default_factory=list)

    assert bind(Sequences, []).tags == []
    with pytest.raises(CoercionNotImplementedError):
        bind(Sequences, ['-t', 'a,b'])


def test_initializer():

    @dataclass
    class Custom:
        tags: List[str] = Argument('t', initializer=lambda raw: raw.split(','), default_value='x')

    assert bind(Custom, ['-t', 'a,b']).tags == ['a', 'b']
    assert bind(Custom, []).tags == ['x']


def test_lookup_initializer_failure_is_a_coercion_error():

    class Color(Enum):
        RED = 1
        GREEN = 2

    @dataclass
    class Painted:
        color: Color = Argument('c', initializer=Color.__getitem__)

    assert bind(Painted, ['-c', 'GREEN']).color is Color.GREEN
    with pytest.raises(CoercionError) as info:
        bind(Painted, ['-c', 'blue'])

    assert info.value.field == 'color'
    assert isinstance(info.value.__cause__, KeyError)


def test_frozen_dataclass():

    @dataclass(frozen=True)
    class Frozen:
        size: int = Argument('s', default_value='1')
        name: str = Argument('n', 'name')

    options = bind(Frozen, ['--name=x'])

    assert options == Frozen(size=1, name='x')
    with pytest.raises(dataclasses.FrozenInstanceError):
        options.size = 2


def test_init_only_variable_is_a_schema_error():

    @dataclass
    class WithSeed:
        seed: dataclasses.InitVar[int]
        count: int = Argument('c', 'count')

        def __post_init__(self, seed):
            self.count += seed

    parser = BindingParser(WithSeed)

    assert [descriptor.name for descriptor in parser.arguments] == ['count']
    with pytest.raises(SchemaError) as info:
        parser.parse(['--count=1'])

    assert isinstance(info.value.__cause__, TypeError)


def test_inherited_arguments():

    @dataclass
    class Base:
        verbose: bool = Argument('v', 'verbose', default_value='false')

    @dataclass
    class Derived(Base):
        size: int = Argument('s', 'size', required=True)

    options = bind(Derived, ['--verbose=TRUE', '-s', '2'])

    assert options.verbose is True
    assert options.size == 2


def test_duplicated_names_are_rejected():

    @dataclass
    class Duplicated:
        first: str = Argument('a')
        second: str = Argument('a')

    with pytest.raises(SchemaError):
        BindingParser(Duplicated)


def test_illegal_names_are_rejected_before_parsing():

    @dataclass
    class Illegal:
        first: str = Argument('-a')

    with pytest.raises(SchemaError):
        bind(Illegal, [])


def test_parser_is_reusable():
    parser = BindingParser(Options)
    names = dict(parser.names)

    first = parser.parse(['-c', '1'])
    second = parser.parse(['-n', 'x'])

    assert first.count == 1 and first.name == ''
    assert second.count == 0 and second.name == 'x'
    assert dict(parser.names) == names
    with pytest.raises(TypeError):
        parser.names['x'] = None


def test_reads_sys_argv(monkeypatch):
    monkeypatch.setattr('sys.argv', ['prog', '--count=9'])

    assert bind(Options).count == 9
