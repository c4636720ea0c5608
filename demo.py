from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

from argbind import Argument, BindError, BindingParser, Int32, report


@dataclass(frozen=True)
class TestOptions:

    input_file: Path = Argument('i', 'input', required=True, initializer=Path)
    workers: Int32 = Argument('w', 'workers', default_value='1')
    budget: Decimal = Argument('b', 'budget', default_value='0.50')
    verbose: bool = Argument('v', 'verbose', default_value='false')


if __name__ == '__main__':
    parser = BindingParser(TestOptions)

    try:
        options = parser.parse()
    except BindError as e:
        report(e)
        raise SystemExit(2)

    print(options)
