"""End-to-end score card pipeline and capture session."""

from src.common.observer import CompositeObserver, PipelineObserver

from .config_loader import PipelineConfig, get_default_config, load_config
from .full_pipeline import ScoreCardPipeline
from .session import CaptureSession
from .types import DecisionStatus, PipelineResult, RejectionReason

__all__ = [
    "ScoreCardPipeline",
    "CaptureSession",
    "PipelineConfig",
    "PipelineObserver",
    "CompositeObserver",
    "PipelineResult",
    "DecisionStatus",
    "RejectionReason",
    "load_config",
    "get_default_config",
]
