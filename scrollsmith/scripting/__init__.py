"""Embedded Python scripting runtime and its helpers."""
from scrollsmith.scripting.helpers import OutputBuffer, ShellHelper
from scrollsmith.scripting.runtime import (
    Evaluator,
    EvaluatorBuilder,
    describe_error,
    source_window,
    to_value,
)

__all__ = [
    'Evaluator',
    'EvaluatorBuilder',
    'OutputBuffer',
    'ShellHelper',
    'describe_error',
    'source_window',
    'to_value',
]
