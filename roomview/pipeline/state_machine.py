"""
Application state machine gating the render pass.

    IDLE --request_draw()--> DRAW_TERRAIN --finish_draw()--> IDLE

IDLE is both the initial and the resting state. ``request_draw`` fires once
per successful decode-and-insert; ``finish_draw`` fires at the end of every
render pass, whether or not a room was drawn. Anything else is a programming
error and raises StateTransitionError.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from roomview.core.definitions import AppState
from roomview.core.errors import StateTransitionError

logger = logging.getLogger(__name__)

Transition = Tuple[AppState, AppState]

_ALLOWED = {
    (AppState.IDLE, AppState.DRAW_TERRAIN),
    (AppState.DRAW_TERRAIN, AppState.IDLE),
}


class AppStateMachine:
    """Single-instance state holder with a transition log."""

    def __init__(self, initial: AppState = AppState.IDLE):
        self._state = initial
        self.history: List[Transition] = []

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def draw_pending(self) -> bool:
        return self._state is AppState.DRAW_TERRAIN

    def transition(self, target: AppState) -> None:
        current = self._state
        if (current, target) not in _ALLOWED:
            raise StateTransitionError(f"Illegal transition {current.name} -> {target.name}")
        self._state = target
        self.history.append((current, target))
        logger.debug('STATE: %s -> %s', current.name, target.name)

    def request_draw(self) -> None:
        self.transition(AppState.DRAW_TERRAIN)

    def finish_draw(self) -> None:
        self.transition(AppState.IDLE)
