"""Domain exports."""

from .contracts import (
    AdaptiveThresholds,
    BinarizationMethod,
    ContractValidationError,
    MorphologyOperation,
    OcrResult,
    ProcessingParameters,
    QualityMetrics,
    SkewMethod,
)
from .exceptions import (
    ImageDecodingError,
    ImageEncodingError,
    InvalidInputError,
    OCRProviderError,
    PreprocessingError,
    StageExecutionError,
)
from .interfaces import IOCRProvider, IPipelineObserver, IPreprocessingPipeline

__all__ = [
    'AdaptiveThresholds',
    'BinarizationMethod',
    'ContractValidationError',
    'MorphologyOperation',
    'OcrResult',
    'ProcessingParameters',
    'QualityMetrics',
    'SkewMethod',
    'ImageDecodingError',
    'ImageEncodingError',
    'InvalidInputError',
    'OCRProviderError',
    'PreprocessingError',
    'StageExecutionError',
    'IOCRProvider',
    'IPipelineObserver',
    'IPreprocessingPipeline',
]
