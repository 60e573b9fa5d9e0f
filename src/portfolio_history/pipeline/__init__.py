from __future__ import annotations

from .context import PipelineAdapters, PipelineContext
from .run import run_history

__all__ = ["PipelineAdapters", "PipelineContext", "run_history"]
