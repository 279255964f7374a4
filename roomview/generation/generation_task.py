"""
Generation Task - Cancellable Background Generator Run
======================================================

Runs the generator on a worker thread so the UI loop keeps ticking while the
external process works. The UI thread owns the task and polls it once per
frame; the worker never touches application state.

    task = GenerationTask(command, run_id=3, timeout=30.0)
    task.start()
    ...
    outcome = task.poll()      # None while running
    task.cancel()              # kills the child process

Each task carries the run id it was started with, so the pipeline can discard
an outcome that arrives after a newer run was started.
"""

from __future__ import annotations

import time
import logging
import subprocess
import threading
from dataclasses import dataclass
from typing import List, Optional, Sequence

from roomview.core.errors import (
    GenerationCancelled,
    GenerationError,
    GenerationTimeout,
    ProcessSpawnFailure,
)
from roomview.generation.process_runner import ProcessResult, result_from_exit

logger = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe cancellation flag with an optional reason."""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        with self._lock:
            self._reason = reason
            self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        with self._lock:
            return self._reason


@dataclass(frozen=True)
class TaskOutcome:
    """Finished run: exactly one of ``result`` / ``error`` is set."""
    run_id: int
    result: Optional[ProcessResult] = None
    error: Optional[GenerationError] = None
    elapsed: float = 0.0


class GenerationTask:
    """One generator run on a daemon worker thread."""

    def __init__(
        self,
        command: Sequence[str],
        run_id: int,
        timeout: Optional[float] = None,
        poll_interval: float = 0.05,
    ):
        self.command: List[str] = list(command)
        self.run_id = run_id
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.token = CancellationToken()

        self._proc: Optional[subprocess.Popen] = None
        self._proc_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._outcome: Optional[TaskOutcome] = None
        self._started_at: Optional[float] = None

    # ------------------------------------------------------------------
    # Control (UI thread)
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError(f"Generation task {self.run_id} already started")
        self._started_at = time.monotonic()
        self._thread = threading.Thread(
            target=self._worker, name=f"generation-{self.run_id}", daemon=True
        )
        self._thread.start()
        logger.info('GENERATION: run %d started: %s', self.run_id, ' '.join(self.command))

    def cancel(self, reason: str = "user cancel") -> None:
        """Request cancellation and kill the child process if it is running."""
        if self.done:
            return
        self.token.cancel(reason)
        self._kill()
        logger.info('GENERATION: run %d cancel requested (%s)', self.run_id, reason)

    def poll(self) -> Optional[TaskOutcome]:
        """Return the outcome once the worker has finished, else None."""
        return self._outcome if self.done else None

    def join(self, timeout: Optional[float] = None) -> Optional[TaskOutcome]:
        """Block until the worker finishes (tests and shutdown)."""
        if self._thread is not None:
            self._thread.join(timeout)
        return self.poll()

    @property
    def started(self) -> bool:
        return self._thread is not None

    @property
    def done(self) -> bool:
        return self._thread is not None and not self._thread.is_alive() and self._outcome is not None

    @property
    def running(self) -> bool:
        return self.started and not self.done

    @property
    def elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        return time.monotonic() - self._started_at

    # ------------------------------------------------------------------
    # Worker thread
    # ------------------------------------------------------------------

    def _kill(self) -> None:
        with self._proc_lock:
            proc = self._proc
        if proc is not None and proc.poll() is None:
            try:
                proc.kill()
            except OSError:
                logger.debug('GENERATION: kill of run %d raced with process exit', self.run_id)

    def _worker(self) -> None:
        try:
            result = self._run()
        except GenerationError as e:
            self._outcome = TaskOutcome(self.run_id, error=e, elapsed=self.elapsed)
            logger.warning('GENERATION: run %d failed: %s', self.run_id, e)
        except Exception as e:
            # Still publish an outcome so the UI does not wait on this run forever
            logger.exception('GENERATION: run %d crashed', self.run_id)
            self._outcome = TaskOutcome(
                self.run_id, error=GenerationError(f"Unexpected generation failure: {e}"),
                elapsed=self.elapsed,
            )
        else:
            self._outcome = TaskOutcome(self.run_id, result=result, elapsed=self.elapsed)
            logger.info('GENERATION: run %d finished with status %d in %.2fs',
                        self.run_id, result.returncode, self.elapsed)

    def _run(self) -> ProcessResult:
        if self.token.is_cancelled():
            raise GenerationCancelled(self.run_id)

        try:
            proc = subprocess.Popen(
                self.command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except (OSError, ValueError) as e:
            raise ProcessSpawnFailure(self.command, str(e)) from e

        with self._proc_lock:
            self._proc = proc
        # cancel() may have run between the check above and Popen
        if self.token.is_cancelled():
            self._kill()

        deadline = None if self.timeout is None else time.monotonic() + self.timeout
        while True:
            try:
                stdout, stderr = proc.communicate(timeout=self.poll_interval)
                break
            except subprocess.TimeoutExpired:
                if self.token.is_cancelled():
                    self._kill()
                elif deadline is not None and time.monotonic() >= deadline:
                    self._kill()
                    proc.communicate()
                    raise GenerationTimeout(self.timeout)

        if self.token.is_cancelled():
            raise GenerationCancelled(self.run_id)
        return result_from_exit(proc.returncode, stdout, stderr)
