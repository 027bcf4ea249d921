"""
Наблюдатели пайплайна: логирование и сбор таймингов.
"""

from typing import Dict, List, Optional, Tuple

from loguru import logger

from imagio.domain.contracts import ProcessingParameters, QualityMetrics
from imagio.domain.interfaces import IPipelineObserver


class LoggingObserver(IPipelineObserver):
    """По умолчанию: тайминги и подобранные параметры уходят в loguru."""

    def on_stage_completed(self, stage: str, elapsed_ms: float) -> None:
        logger.debug(f"[Performance] {stage}: {elapsed_ms:.1f}ms")

    def on_parameters_derived(
        self,
        metrics: QualityMetrics,
        params: ProcessingParameters
    ) -> None:
        logger.info(
            f"[Quality] blur={metrics.blur_score:.1f}, contrast={metrics.contrast_score:.1f}, "
            f"noise={metrics.noise_level:.1f}, brightness={metrics.brightness_level:.1f} → "
            f"binarization={params.binarization_method.value}, "
            f"sharpness={params.sharpness}, contrast={params.contrast}"
        )


class TimingObserver(IPipelineObserver):
    """
    Собирает тайминги стадий (для CLI и тестов).

    Один экземпляр - на один вызов пайплайна: список не синхронизирован.
    """

    def __init__(self) -> None:
        self.timings: List[Tuple[str, float]] = []
        self.derived: Optional[ProcessingParameters] = None
        self.metrics: Optional[QualityMetrics] = None

    def on_stage_completed(self, stage: str, elapsed_ms: float) -> None:
        self.timings.append((stage, elapsed_ms))

    def on_parameters_derived(
        self,
        metrics: QualityMetrics,
        params: ProcessingParameters
    ) -> None:
        self.metrics = metrics
        self.derived = params

    @property
    def stages(self) -> List[str]:
        return [name for name, _ in self.timings]

    def as_dict(self) -> Dict[str, float]:
        return {name: round(ms, 2) for name, ms in self.timings}
