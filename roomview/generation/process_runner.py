"""
Process Runner - Synchronous Generator Invocation
=================================================

Launches the external generator as

    <interpreter> <generator> -p <script>

waits for it to exit, and captures its output as raw bytes. The exit status
selects which stream is kept: stdout on success, stderr otherwise.

This call BLOCKS the caller until the process exits. With no timeout a hung
generator blocks forever; the viewer uses GenerationTask (generation_task.py)
for runs that must stay cancellable.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from roomview.core.definitions import SCRIPT_FLAG
from roomview.core.errors import (
    GenerationTimeout,
    ProcessExitFailure,
    ProcessSpawnFailure,
    TextDecodeFailure,
)

logger = logging.getLogger(__name__)


# ==========================================
# PROCESS RESULT
# ==========================================

@dataclass(frozen=True)
class ProcessSuccess:
    """Generator exited with status 0; payload is its stdout."""
    payload: bytes
    returncode: int = 0

    @property
    def ok(self) -> bool:
        return True

    def text(self) -> str:
        return decode_output(self.payload)


@dataclass(frozen=True)
class ProcessFailure:
    """Generator exited with a non-zero status; payload is its stderr."""
    payload: bytes
    returncode: int = 1

    @property
    def ok(self) -> bool:
        return False

    def text(self) -> str:
        return decode_output(self.payload)

    def to_error(self) -> ProcessExitFailure:
        try:
            stderr = self.text()
        except TextDecodeFailure:
            stderr = self.payload.decode('utf-8', errors='replace')
        return ProcessExitFailure(self.returncode, stderr)


ProcessResult = Union[ProcessSuccess, ProcessFailure]


def decode_output(payload: bytes) -> str:
    """Strict UTF-8 decode of captured output."""
    try:
        return payload.decode('utf-8')
    except UnicodeDecodeError as e:
        raise TextDecodeFailure(e) from e


def result_from_exit(returncode: int, stdout: bytes, stderr: bytes) -> ProcessResult:
    """Tag captured streams by exit status."""
    if returncode == 0:
        return ProcessSuccess(stdout or b"")
    return ProcessFailure(stderr or b"", returncode)


# ==========================================
# RUNNER
# ==========================================

def build_command(interpreter_path: str, generator_path: str, script_arg: str) -> List[str]:
    """argv for one generator run."""
    return [interpreter_path, generator_path, SCRIPT_FLAG, script_arg]


def run_generator(
    interpreter_path: str,
    generator_path: str,
    script_arg: str,
    timeout: Optional[float] = None,
) -> ProcessResult:
    """
    Run the generator once and wait for it to exit.

    Args:
        interpreter_path: Executable to launch
        generator_path: First argument (the generator program)
        script_arg: Value passed after ``-p``
        timeout: Seconds before the process is killed; None waits forever

    Returns:
        ProcessSuccess(stdout) or ProcessFailure(stderr, returncode)

    Raises:
        ProcessSpawnFailure: The OS could not start the process
        GenerationTimeout: The timeout elapsed (process killed)
    """
    command = build_command(interpreter_path, generator_path, script_arg)
    return run_command(command, timeout=timeout)


def run_command(command: Sequence[str], timeout: Optional[float] = None) -> ProcessResult:
    """Run an argv list (no shell) and tag its captured output."""
    logger.info('Running generator: %s', ' '.join(command))
    try:
        completed = subprocess.run(
            list(command),
            capture_output=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        # subprocess.run has already killed the child
        logger.error('Generator timed out after %ss', timeout)
        raise GenerationTimeout(timeout) from e
    except (OSError, ValueError) as e:
        logger.error('Failed to execute process %r: %s', command[0], e)
        raise ProcessSpawnFailure(command, str(e)) from e

    logger.info('Generator exited with status %d (stdout=%d bytes, stderr=%d bytes)',
                completed.returncode, len(completed.stdout or b""), len(completed.stderr or b""))
    return result_from_exit(completed.returncode, completed.stdout, completed.stderr)
