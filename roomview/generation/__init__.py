"""
roomview Generation Module
==========================

Runs the external generator program.

Components:
- process_runner: Blocking run, tagged ProcessSuccess/ProcessFailure result
- generation_task: Background run with cancellation, timeout and run ids
"""

from roomview.generation.process_runner import (
    ProcessSuccess,
    ProcessFailure,
    ProcessResult,
    build_command,
    decode_output,
    result_from_exit,
    run_command,
    run_generator,
)
from roomview.generation.generation_task import (
    CancellationToken,
    GenerationTask,
    TaskOutcome,
)

__all__ = [
    'ProcessSuccess',
    'ProcessFailure',
    'ProcessResult',
    'build_command',
    'decode_output',
    'result_from_exit',
    'run_command',
    'run_generator',
    'CancellationToken',
    'GenerationTask',
    'TaskOutcome',
]
