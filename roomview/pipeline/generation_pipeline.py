"""
Generation Pipeline - Run Trigger and Render Tick
=================================================

Wires the pipeline stages together around one explicit application context:

    paths -> run generator -> decode -> MapStore.insert -> request_draw()
                                                 |
    tick(): DRAW_TERRAIN -> render target room -> TileLayer.replace -> IDLE

The context is owned by the top-level loop (viewer or CLI) and passed to the
pipeline; nothing here is module-global.

Failure policy:
--------------
Every GenerationError is caught at the run trigger, logged, and stored in
``context.last_error``. A failed run leaves the map store, the camera and the
state machine untouched, so the user can fix the inputs and retry.

A non-zero exit status is a hard failure even when stderr holds valid JSON.

Runs:
-----
- run_sync():    blocking, the caller's tick stalls until the process exits
- start_async(): background GenerationTask polled from tick(); cancellable,
                 optional timeout, outcomes of superseded runs are discarded
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from roomview.config import ViewerConfig
from roomview.core.definitions import AppState, GeneratorPaths, Room
from roomview.core.errors import GenerationError
from roomview.data.decoder import KeyPolicy, decode
from roomview.data.map_store import MapStore
from roomview.generation.generation_task import GenerationTask, TaskOutcome
from roomview.generation.process_runner import ProcessResult, run_generator
from roomview.pipeline.state_machine import AppStateMachine
from roomview.visualization.camera import CameraController
from roomview.visualization.renderer import TileLayer, render_room

logger = logging.getLogger(__name__)

Runner = Callable[..., ProcessResult]


@dataclass
class RunRecord:
    """Summary of one finished run, newest last in ``AppContext.runs``."""
    run_id: int
    ok: bool
    room_name: Optional[str] = None
    error: Optional[str] = None


@dataclass
class AppContext:
    """Everything a run and a render pass read or write."""
    config: ViewerConfig = field(default_factory=ViewerConfig)
    paths: GeneratorPaths = field(default_factory=GeneratorPaths)
    store: MapStore = field(default_factory=MapStore)
    camera: CameraController = field(default_factory=CameraController)
    state: AppStateMachine = field(default_factory=AppStateMachine)
    tiles: TileLayer = field(default_factory=TileLayer)
    selected_room: Optional[str] = None
    last_error: Optional[str] = None
    status: str = "Idle"
    runs: List[RunRecord] = field(default_factory=list)
    last_run_id: int = 0
    active_task: Optional[GenerationTask] = None


class GenerationPipeline:
    """
    Run trigger and per-frame tick for one AppContext.

    Args:
        context: Application context to operate on
        runner: Blocking runner, ``runner(interpreter, generator, script, timeout=...)``
        policy: Top-level key policy for the decoder (defaults to the config's)
        task_factory: Builds the background task (injectable for tests)
    """

    def __init__(
        self,
        context: AppContext,
        runner: Runner = run_generator,
        policy: Optional[KeyPolicy] = None,
        task_factory: Callable[..., GenerationTask] = GenerationTask,
    ):
        self.context = context
        self.runner = runner
        self.policy = policy or KeyPolicy.from_name(context.config.key_policy)
        self.task_factory = task_factory

    # ------------------------------------------------------------------
    # Run trigger
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        task = self.context.active_task
        return task is not None and not task.done

    def run_sync(self) -> bool:
        """
        Run the generator on the calling thread and apply the result.

        Returns:
            True if a room was decoded and stored
        """
        ctx = self.context
        if self.busy:
            self._fail(None, "A generation run is already in progress")
            return False

        run_id = self._next_run_id()
        try:
            ctx.paths.require()
            ctx.status = "Running generator..."
            result = self.runner(
                ctx.paths.interpreter, ctx.paths.generator, ctx.paths.script,
                timeout=ctx.config.run_timeout,
            )
            name, room = self._decode_result(result)
        except GenerationError as e:
            self._fail(run_id, str(e))
            return False

        self._accept(run_id, name, room)
        return True

    def start_async(self) -> bool:
        """
        Start a background run.

        Returns:
            True if the task was started; False if paths are missing or a
            run is already in flight
        """
        ctx = self.context
        if self.busy:
            self._fail(None, "A generation run is already in progress")
            return False
        try:
            command = ctx.paths.command()
        except GenerationError as e:
            self._fail(None, str(e))
            return False

        run_id = self._next_run_id()
        task = self.task_factory(command, run_id, timeout=ctx.config.run_timeout)
        ctx.active_task = task
        ctx.status = f"Running generator (run {run_id})..."
        ctx.last_error = None
        task.start()
        return True

    def cancel(self) -> bool:
        """Cancel the in-flight run, if any."""
        task = self.context.active_task
        if task is None or task.done:
            return False
        task.cancel()
        self.context.status = "Cancelling..."
        return True

    # ------------------------------------------------------------------
    # Per-frame tick
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """Apply a finished background run, then run a pending render pass."""
        self._poll_task()
        if self.context.state.state is AppState.DRAW_TERRAIN:
            self.draw_pass()

    def draw_pass(self) -> int:
        """
        Render the target room into the tile layer and return to IDLE.

        Returns:
            Number of tiles spawned
        """
        ctx = self.context
        spawned = 0
        try:
            name, room = self.render_target()
            if room is not None:
                tiles = render_room(room, ctx.config.tile_size, ctx.config.origin)
                ctx.tiles.replace(name, tiles)
                spawned = len(tiles)
                logger.info('Rendered room %r: %d tiles', name, spawned)
            else:
                logger.info('Render pass with no room to draw')
        finally:
            ctx.state.finish_draw()
        return spawned

    # ------------------------------------------------------------------
    # Room selection
    # ------------------------------------------------------------------

    def render_target(self) -> Tuple[Optional[str], Optional[Room]]:
        """The selected room if it is stored, otherwise the latest one."""
        store = self.context.store
        selected = self.context.selected_room
        if selected is not None and selected in store:
            return selected, store.get(selected)
        return store.latest_name(), store.latest()

    def select_room(self, name: Optional[str]) -> bool:
        """
        Choose which stored room is drawn; None follows the latest room.

        Returns:
            True if the selection changed and a redraw was requested
        """
        ctx = self.context
        if name is not None and name not in ctx.store:
            logger.warning('Cannot select unknown room %r', name)
            return False
        if name == ctx.selected_room:
            return False
        ctx.selected_room = name
        self._request_draw()
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _next_run_id(self) -> int:
        self.context.last_run_id += 1
        return self.context.last_run_id

    def _decode_result(self, result: ProcessResult) -> Tuple[str, Room]:
        if not result.ok:
            raise result.to_error()
        return decode(result.text(), self.policy)

    def _poll_task(self) -> None:
        ctx = self.context
        task = ctx.active_task
        if task is None:
            return
        outcome = task.poll()
        if outcome is None:
            return
        ctx.active_task = None
        self._apply_outcome(outcome)

    def _apply_outcome(self, outcome: TaskOutcome) -> bool:
        if outcome.run_id != self.context.last_run_id:
            logger.warning('Discarding stale result of run %d (latest run is %d)',
                           outcome.run_id, self.context.last_run_id)
            return False
        if outcome.error is not None:
            self._fail(outcome.run_id, str(outcome.error))
            return False
        try:
            name, room = self._decode_result(outcome.result)
        except GenerationError as e:
            self._fail(outcome.run_id, str(e))
            return False
        self._accept(outcome.run_id, name, room)
        return True

    def _accept(self, run_id: int, name: str, room: Room) -> None:
        ctx = self.context
        ctx.store.insert(name, room)
        ctx.last_error = None
        ctx.status = f"Loaded room {name!r} ({room.width}x{room.height})"
        ctx.runs.append(RunRecord(run_id, True, room_name=name))
        logger.info('Run %d produced room %r', run_id, name)
        self._request_draw()

    def _fail(self, run_id: Optional[int], message: str) -> None:
        ctx = self.context
        ctx.last_error = message
        ctx.status = "Idle"
        if run_id is not None:
            ctx.runs.append(RunRecord(run_id, False, error=message))
        logger.warning('Generation failed: %s', message)

    def _request_draw(self) -> None:
        state = self.context.state
        if state.draw_pending:
            logger.debug('Draw already pending; it will pick up the new target')
            return
        state.request_draw()
