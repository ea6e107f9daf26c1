"""
Fetch-and-correlate pipeline and the session state it owns.
"""

from pulse2tx.pipeline.correlation import (
    CorrelationPipeline,
    LoadOutcome,
    LoadStatus,
    utc_now,
)
from pulse2tx.pipeline.state import EnrichedRecord, LoadingState, PipelineState

__all__ = [
    "CorrelationPipeline",
    "EnrichedRecord",
    "LoadOutcome",
    "LoadStatus",
    "LoadingState",
    "PipelineState",
    "utc_now",
]
