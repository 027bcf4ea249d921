"""
Pre-OCR: препроцессинг изображений перед распознаванием.
"""

from .observers import LoggingObserver, TimingObserver
from .pipeline import (
    PipelineStep,
    PreprocessingPipeline,
    adaptive_preprocess,
    assess_quality,
    preprocess,
)
from .pixel_buffer import PixelBuffer

__all__ = [
    'LoggingObserver',
    'PipelineStep',
    'PixelBuffer',
    'PreprocessingPipeline',
    'TimingObserver',
    'adaptive_preprocess',
    'assess_quality',
    'preprocess',
]
