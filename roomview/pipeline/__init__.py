"""
roomview Pipeline Module
========================

Application state machine and the generation pipeline that drives it.

Usage:
    from roomview.pipeline import AppContext, GenerationPipeline

    ctx = AppContext()
    ctx.paths.interpreter = "/usr/bin/python3"
    ...
    pipeline = GenerationPipeline(ctx)
    pipeline.run_sync()
    pipeline.tick()          # renders and returns to IDLE
"""

from roomview.pipeline.state_machine import AppStateMachine
from roomview.pipeline.generation_pipeline import (
    AppContext,
    GenerationPipeline,
    RunRecord,
)

__all__ = [
    'AppStateMachine',
    'AppContext',
    'GenerationPipeline',
    'RunRecord',
]
