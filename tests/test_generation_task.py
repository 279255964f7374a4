import time

import pytest

from roomview.core.errors import GenerationCancelled, GenerationTimeout, ProcessSpawnFailure
from roomview.generation.generation_task import CancellationToken, GenerationTask


def _wait_until(predicate, timeout=10.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return False


def test_token_records_reason():
    token = CancellationToken()
    assert not token.is_cancelled()
    token.cancel("shutdown")
    assert token.is_cancelled()
    assert token.reason == "shutdown"


def test_task_completes(make_generator, room1_json):
    task = GenerationTask(make_generator("ok", room1_json).command(), run_id=1)
    assert task.poll() is None
    task.start()
    outcome = task.join(10)

    assert outcome is not None
    assert outcome.run_id == 1
    assert outcome.error is None
    assert outcome.result.ok
    assert task.done and not task.running


def test_cancel_kills_running_generator(make_generator):
    task = GenerationTask(make_generator("sleep", "30").command(), run_id=2)
    task.start()
    time.sleep(0.2)
    started = time.monotonic()
    task.cancel()
    outcome = task.join(10)

    assert outcome is not None
    assert isinstance(outcome.error, GenerationCancelled)
    assert outcome.result is None
    assert time.monotonic() - started < 5


def test_timeout(make_generator):
    task = GenerationTask(make_generator("sleep", "30").command(), run_id=3, timeout=0.3)
    task.start()
    assert _wait_until(lambda: task.done)
    outcome = task.poll()
    assert isinstance(outcome.error, GenerationTimeout)


def test_spawn_failure_is_reported_as_outcome(tmp_path):
    task = GenerationTask([str(tmp_path / "missing"), "gen", "-p", "s"], run_id=4)
    task.start()
    outcome = task.join(10)
    assert isinstance(outcome.error, ProcessSpawnFailure)


def test_nonzero_exit_is_a_result_not_an_error(make_generator):
    task = GenerationTask(make_generator("fail", "bad script").command(), run_id=5)
    task.start()
    outcome = task.join(10)
    assert outcome.error is None
    assert not outcome.result.ok
    assert outcome.result.returncode == 3


def test_start_twice_rejected(make_generator):
    task = GenerationTask(make_generator("ok", "{}").command(), run_id=6)
    task.start()
    with pytest.raises(RuntimeError):
        task.start()
    task.join(10)


def test_cancel_after_done_is_noop(make_generator):
    task = GenerationTask(make_generator("ok", "{}").command(), run_id=7)
    task.start()
    outcome = task.join(10)
    task.cancel()
    assert task.poll() is outcome
    assert outcome.result.ok
