from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from pathlib import Path

import pytest

from argbind import Argument, AtomicLong, BindingParser, Float32, Int32


class OptimizerType(Enum):
    Adam = 'adam'
    SGD = 'sgd'
    LAMB = 'lamb'


@dataclass(frozen=True)
class DataArguments:
    train_file: Path = Argument('train', 'train-file', required=True, initializer=Path)
    dev_file: Path = Argument('dev', 'dev-file', default_creator=lambda: Path('dev.txt'))


@dataclass(frozen=True)
class TrainingArguments(DataArguments):
    batch_size: Int32 = Argument('b', 'batch-size', default_value='32')
    learning_rate: Float32 = Argument('lr', 'learning-rate', default_value='1e-3')
    optimizer: OptimizerType = Argument(
        'o', 'optimizer', initializer=OptimizerType, default_value='adam'
    )
    weight_decay: float = Argument('wd', 'weight-decay', default_value='0.1')
    budget: Decimal = Argument('budget', default_value='12.50')
    max_steps: AtomicLong = Argument('steps', 'max-steps', default_value='10000')
    fp16: bool = Argument('fp16', default_value='false')
    run_id: str = field(default='local')


def test_bind_to_dataclasses():
    parser = BindingParser(TrainingArguments)

    arg_strs = [
        'train.py', '--train-file=./a.txt', '-o', 'sgd', '--batch-size=64',
        '-fp16', 'True', '--max-steps=20'
    ]
    args = parser.parse(arg_strs)

    assert args.train_file == Path('./a.txt')
    assert args.dev_file == Path('dev.txt')
    assert args.batch_size == 64
    assert args.learning_rate == pytest.approx(1e-3)
    assert args.learning_rate != 1e-3
    assert args.optimizer is OptimizerType.SGD
    assert args.weight_decay == 0.1
    assert args.budget == Decimal('12.50')
    assert args.max_steps.get() == 20
    assert args.fp16 is True
    assert args.run_id == 'local'

    args2 = parser.parse(['-train', 'b.txt'])

    assert args2.optimizer is OptimizerType.Adam
    assert args2.max_steps.get() == 10000
    assert args2.max_steps is not args.max_steps
