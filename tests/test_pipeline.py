"""
End-to-end tests for the generation pipeline: run -> decode -> store -> draw.

Most tests swap the process runner and the background task for fakes so the
state machine can be checked frame by frame; the last class runs a real
subprocess.
"""

import time

import pytest

from roomview.config import ViewerConfig
from roomview.core.definitions import AppState, GeneratorPaths
from roomview.core.errors import GenerationCancelled
from roomview.data.decoder import KeyPolicy
from roomview.generation.generation_task import TaskOutcome
from roomview.generation.process_runner import ProcessFailure, ProcessSuccess
from roomview.pipeline import AppContext, GenerationPipeline

ROOM1 = '{"room1":{"layers":{"terrain":[["#","."],[".","&"]]}}}'
ROOM2 = '{"room2":{"layers":{"terrain":[["@","@","@"]]}}}'

DRAW_ROUND_TRIP = [
    (AppState.IDLE, AppState.DRAW_TERRAIN),
    (AppState.DRAW_TERRAIN, AppState.IDLE),
]


class FakeRunner:
    """Blocking runner returning canned results in order."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def __call__(self, interpreter, generator, script, timeout=None):
        self.calls.append((interpreter, generator, script, timeout))
        return self.results.pop(0)


class FakeTask:
    """Background task whose outcome the test sets by hand."""

    instances = []

    def __init__(self, command, run_id, timeout=None):
        self.command = command
        self.run_id = run_id
        self.timeout = timeout
        self.outcome = None
        self.started = False
        self.cancelled = False
        FakeTask.instances.append(self)

    def start(self):
        self.started = True

    def cancel(self, reason="user cancel"):
        self.cancelled = True

    @property
    def done(self):
        return self.outcome is not None

    def poll(self):
        return self.outcome


def make_pipeline(*results, paths=None, config=None, policy=None):
    ctx = AppContext(
        config=config or ViewerConfig(),
        paths=paths or GeneratorPaths("python3", "gen.py", "rooms.lua"),
    )
    runner = FakeRunner(*results)
    pipeline = GenerationPipeline(ctx, runner=runner, policy=policy, task_factory=FakeTask)
    return ctx, pipeline, runner


def ok(text):
    return ProcessSuccess(text.encode("utf-8"))


class TestRunSync:
    def test_success_renders_once(self):
        ctx, pipeline, runner = make_pipeline(ok(ROOM1))

        assert pipeline.run_sync()
        assert ctx.store.latest_name() == "room1"
        assert ctx.state.state is AppState.DRAW_TERRAIN
        assert len(ctx.tiles) == 0

        pipeline.tick()
        assert ctx.state.state is AppState.IDLE
        assert ctx.state.history == DRAW_ROUND_TRIP
        assert len(ctx.tiles) == 4
        assert ctx.tiles.room_name == "room1"
        assert ctx.last_error is None
        assert runner.calls == [("python3", "gen.py", "rooms.lua", None)]

    def test_missing_paths_never_runs(self):
        ctx, pipeline, runner = make_pipeline(ok(ROOM1), paths=GeneratorPaths("python3"))

        assert not pipeline.run_sync()
        assert runner.calls == []
        assert ctx.last_error.startswith("Some paths are missing, script cannot be run")
        assert "Binary" in ctx.last_error and "Script" in ctx.last_error
        assert ctx.state.history == []
        assert len(ctx.store) == 0

    def test_parse_error_leaves_everything_untouched(self):
        ctx, pipeline, _ = make_pipeline(ok("not json"))
        ctx.camera.drag(5, 5)

        assert not pipeline.run_sync()
        pipeline.tick()
        assert len(ctx.store) == 0
        assert ctx.state.history == []
        assert ctx.camera.translation == (-5, 5)
        assert "not valid JSON" in ctx.last_error
        assert ctx.runs[-1].ok is False

    def test_deeply_nested_output_is_failure(self):
        deep = '{"r":' + '[' * 100000 + ']' * 100000 + '}'
        ctx, pipeline, _ = make_pipeline(ok(deep))

        assert not pipeline.run_sync()
        assert "nested too deeply" in ctx.last_error
        assert ctx.state.history == []
        assert len(ctx.store) == 0

    def test_nonzero_exit_with_json_stderr_is_failure(self):
        failure = ProcessFailure(ROOM1.encode("utf-8"), 1)
        ctx, pipeline, _ = make_pipeline(failure)

        assert not pipeline.run_sync()
        assert len(ctx.store) == 0
        assert ctx.state.history == []
        assert "exited with status 1" in ctx.last_error

    def test_invalid_utf8_is_failure(self):
        ctx, pipeline, _ = make_pipeline(ProcessSuccess(b"\xff{}"))
        assert not pipeline.run_sync()
        assert "UTF-8" in ctx.last_error
        assert len(ctx.store) == 0

    def test_strict_policy(self):
        two = '{"a":{"layers":{"terrain":[]}},"b":{"layers":{"terrain":[]}}}'
        ctx, pipeline, _ = make_pipeline(ok(two), policy=KeyPolicy.STRICT)
        assert not pipeline.run_sync()
        assert "exactly one room key" in ctx.last_error

    def test_policy_from_config(self):
        ctx, pipeline, _ = make_pipeline(config=ViewerConfig(key_policy="strict"))
        assert pipeline.policy is KeyPolicy.STRICT

    def test_timeout_forwarded_to_runner(self):
        _, pipeline, runner = make_pipeline(ok(ROOM1), config=ViewerConfig(run_timeout=2.5))
        pipeline.run_sync()
        assert runner.calls[0][3] == 2.5

    def test_each_success_is_one_round_trip(self):
        ctx, pipeline, _ = make_pipeline(ok(ROOM1), ok(ROOM2))
        pipeline.run_sync()
        pipeline.tick()
        pipeline.run_sync()
        pipeline.tick()
        assert ctx.state.history == DRAW_ROUND_TRIP * 2
        assert ctx.store.names() == ["room1", "room2"]
        assert ctx.tiles.room_name == "room2"
        assert len(ctx.tiles) == 3

    def test_failure_after_success_keeps_previous_room(self):
        ctx, pipeline, _ = make_pipeline(ok(ROOM1), ok("{}"))
        pipeline.run_sync()
        pipeline.tick()
        tiles = ctx.tiles.tiles

        assert not pipeline.run_sync()
        pipeline.tick()
        assert ctx.tiles.tiles == tiles
        assert ctx.store.names() == ["room1"]
        assert [r.ok for r in ctx.runs] == [True, False]

    def test_tick_while_idle_does_nothing(self):
        ctx, pipeline, _ = make_pipeline()
        pipeline.tick()
        assert ctx.state.history == []


class TestRoomSelection:
    def test_select_older_room_redraws(self):
        ctx, pipeline, _ = make_pipeline(ok(ROOM1), ok(ROOM2))
        pipeline.run_sync()
        pipeline.tick()
        pipeline.run_sync()
        pipeline.tick()

        assert pipeline.select_room("room1")
        assert ctx.state.state is AppState.DRAW_TERRAIN
        pipeline.tick()
        assert ctx.tiles.room_name == "room1"
        assert len(ctx.tiles) == 4

    def test_selected_room_sticks_across_new_runs(self):
        ctx, pipeline, _ = make_pipeline(ok(ROOM1), ok(ROOM2))
        pipeline.run_sync()
        pipeline.tick()
        pipeline.select_room("room1")
        pipeline.tick()
        pipeline.run_sync()
        pipeline.tick()
        assert ctx.tiles.room_name == "room1"

        pipeline.select_room(None)
        pipeline.tick()
        assert ctx.tiles.room_name == "room2"

    def test_unknown_room_rejected(self):
        ctx, pipeline, _ = make_pipeline()
        assert not pipeline.select_room("nope")
        assert ctx.selected_room is None
        assert ctx.state.history == []

    def test_draw_pass_with_empty_store_returns_to_idle(self):
        ctx, pipeline, _ = make_pipeline()
        ctx.state.request_draw()
        assert pipeline.draw_pass() == 0
        assert ctx.state.state is AppState.IDLE


class TestAsync:
    @pytest.fixture(autouse=True)
    def reset_tasks(self):
        FakeTask.instances.clear()
        yield
        FakeTask.instances.clear()

    def test_outcome_applied_on_tick(self):
        ctx, pipeline, _ = make_pipeline(config=ViewerConfig(run_timeout=9.0))
        assert pipeline.start_async()
        task = FakeTask.instances[-1]
        assert task.started
        assert task.command == ["python3", "gen.py", "-p", "rooms.lua"]
        assert task.timeout == 9.0
        assert pipeline.busy

        pipeline.tick()
        assert len(ctx.store) == 0

        task.outcome = TaskOutcome(task.run_id, result=ok(ROOM1))
        pipeline.tick()
        assert not pipeline.busy
        assert ctx.store.latest_name() == "room1"
        assert ctx.state.state is AppState.IDLE
        assert ctx.state.history == DRAW_ROUND_TRIP
        assert len(ctx.tiles) == 4

    def test_second_start_while_busy_rejected(self):
        ctx, pipeline, _ = make_pipeline()
        assert pipeline.start_async()
        assert not pipeline.start_async()
        assert len(FakeTask.instances) == 1
        assert "already in progress" in ctx.last_error

    def test_missing_paths(self):
        ctx, pipeline, _ = make_pipeline(paths=GeneratorPaths())
        assert not pipeline.start_async()
        assert FakeTask.instances == []
        assert ctx.last_run_id == 0
        assert "Python" in ctx.last_error

    def test_cancelled_run_never_reaches_store(self):
        ctx, pipeline, _ = make_pipeline()
        pipeline.start_async()
        task = FakeTask.instances[-1]

        assert pipeline.cancel()
        assert task.cancelled
        task.outcome = TaskOutcome(task.run_id, error=GenerationCancelled(task.run_id))
        pipeline.tick()

        assert len(ctx.store) == 0
        assert ctx.state.history == []
        assert ctx.last_error == "Generation cancelled by user"
        assert not pipeline.cancel()

    def test_stale_outcome_discarded(self):
        ctx, pipeline, _ = make_pipeline()
        pipeline.start_async()
        stale = TaskOutcome(ctx.last_run_id - 1, result=ok(ROOM1))
        assert not pipeline._apply_outcome(stale)
        assert len(ctx.store) == 0
        assert ctx.runs == []


class TestRealGenerator:
    def test_async_end_to_end(self, make_generator, room1_json):
        ctx = AppContext(paths=make_generator("ok", room1_json))
        pipeline = GenerationPipeline(ctx)

        assert pipeline.start_async()
        deadline = time.monotonic() + 10
        while pipeline.busy and time.monotonic() < deadline:
            time.sleep(0.02)
        pipeline.tick()

        assert ctx.store.latest_name() == "room1"
        assert ctx.state.history == DRAW_ROUND_TRIP
        assert len(ctx.tiles) == 4

    def test_sync_failure_reports_stderr(self, make_generator):
        ctx = AppContext(paths=make_generator("fail", "syntax error near line 3"))
        pipeline = GenerationPipeline(ctx)
        assert not pipeline.run_sync()
        assert "syntax error near line 3" in ctx.last_error
        assert ctx.state.history == []
