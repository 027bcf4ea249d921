"""
Pre-OCR Pipeline: оркестратор стадий препроцессинга.

Фиксированный порядок:
  1. border_removal         (Stage 1: Geometry)
  2. skew_correction        (Stage 1: Geometry)
  3. denoise                (Stage 2: bilateral > gaussian)
  4. brightness             (Stage 3: Tone)
  5. contrast               (Stage 3: Tone)
  6. sharpness              (Stage 3: Tone)
  7. contrast_enhancement   (Stage 4)
  8. morphology             (Stage 5)
  9. binarization           (Stage 6, всегда последняя)

Каждая стадия - чистая функция буфер + параметры -> новый буфер.
Первая упавшая стадия обрывает цепочку (StageExecutionError с именем
стадии), повторов нет.

Адаптивный режим: метрики исходного буфера -> переопределённые
параметры (adaptive_mode=False) -> стандартный прогон. Глубина вызовов <= 2.
"""

import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from loguru import logger

from imagio.domain.contracts import (
    AdaptiveThresholds,
    BinarizationMethod,
    MorphologyOperation,
    ProcessingParameters,
    QualityMetrics,
)
from imagio.domain.exceptions import StageExecutionError
from imagio.domain.interfaces import IPipelineObserver, IPreprocessingPipeline
from imagio.pre_ocr.observers import LoggingObserver
from imagio.pre_ocr.pixel_buffer import PixelBuffer
from imagio.pre_ocr.s0_analyzer.parameter_tuner import AdaptiveParameterTuner
from imagio.pre_ocr.s0_analyzer.stage import QualityAssessor
from imagio.pre_ocr.s0_analyzer.thresholds import load_adaptive_thresholds
from imagio.pre_ocr.s1_geometry.stage import GeometricCorrector
from imagio.pre_ocr.s2_denoise.stage import Denoiser
from imagio.pre_ocr.s3_tone.stage import ToneAdjuster
from imagio.pre_ocr.s4_contrast.stage import ContrastEnhancer
from imagio.pre_ocr.s5_morphology.stage import MorphologyEngine
from imagio.pre_ocr.s6_binarization.stage import Binarizer


@dataclass(frozen=True)
class PipelineStep:
    """Шаг пайплайна: имя, условие включения, преобразование."""

    name: str
    enabled: Callable[[ProcessingParameters], bool]
    run: Callable[[PixelBuffer, ProcessingParameters], PixelBuffer]
    terminal: bool = False


class PreprocessingPipeline(IPreprocessingPipeline):
    """
    Оркестратор препроцессинга.

    Хранит только конфигурацию (read-only), поэтому один экземпляр можно
    вызывать из нескольких потоков одновременно.
    """

    def __init__(
        self,
        observer: Optional[IPipelineObserver] = None,
        thresholds: Optional[AdaptiveThresholds] = None,
    ) -> None:
        self.observer = observer or LoggingObserver()

        self.assessor = QualityAssessor()
        self.tuner = AdaptiveParameterTuner(thresholds)
        self.geometry = GeometricCorrector()
        self.denoiser = Denoiser()
        self.tone = ToneAdjuster()
        self.enhancer = ContrastEnhancer()
        self.morphology = MorphologyEngine()
        self.binarizer = Binarizer()

        self.steps = self._build_steps()
        if any(s.terminal for s in self.steps[:-1]):
            raise ValueError("Терминальный шаг должен быть последним")

        logger.debug(f"[Pipeline] Инициализирован ({len(self.steps)} шагов)")

    def _build_steps(self) -> List[PipelineStep]:
        steps = [
            PipelineStep(
                "border_removal",
                lambda p: p.remove_borders,
                lambda b, p: self.geometry.remove_borders(b),
            ),
            PipelineStep(
                "skew_correction",
                lambda p: p.correct_skew,
                lambda b, p: self.geometry.correct_skew(b, p.skew_method),
            ),
            PipelineStep(
                "denoise",
                lambda p: p.bilateral_filter or p.gaussian_blur > 0,
                self._denoise,
            ),
            PipelineStep(
                "brightness",
                lambda p: p.brightness != 0.0,
                lambda b, p: self.tone.adjust_brightness(b, p.brightness),
            ),
            PipelineStep(
                "contrast",
                lambda p: p.contrast != 1.0,
                lambda b, p: self.tone.adjust_contrast(b, p.contrast),
            ),
            PipelineStep(
                "sharpness",
                lambda p: p.sharpness > 1.0,
                lambda b, p: self.tone.sharpen(b, p.sharpness),
            ),
            PipelineStep(
                "contrast_enhancement",
                lambda p: p.use_contrast_enhancement,
                lambda b, p: self.enhancer.equalize(b),
            ),
            PipelineStep(
                "morphology",
                lambda p: p.morphology != MorphologyOperation.NONE,
                lambda b, p: self.morphology.apply(b, p.morphology),
            ),
            PipelineStep(
                "binarization",
                lambda p: p.binarization_method != BinarizationMethod.NONE,
                lambda b, p: self.binarizer.binarize(b, p.binarization_method),
                terminal=True,
            ),
        ]
        return steps

    def _denoise(self, buffer: PixelBuffer, params: ProcessingParameters) -> PixelBuffer:
        if params.bilateral_filter:
            return self.denoiser.bilateral_filter(buffer)
        return self.denoiser.gaussian_blur(buffer, params.gaussian_blur)

    # ------------------------------------------------------------------
    # IPreprocessingPipeline
    # ------------------------------------------------------------------

    def assess_quality(self, buffer: PixelBuffer) -> QualityMetrics:
        return self.assessor.assess(buffer)

    def preprocess(self, buffer: PixelBuffer, params: ProcessingParameters) -> PixelBuffer:
        """
        Прогоняет буфер через включённые стадии.

        Raises:
            StageExecutionError: стадия упала (stage - её имя, причина в __cause__)
        """
        if params.adaptive_mode:
            return self.adaptive_preprocess(buffer, params)

        start = time.perf_counter()
        result = buffer
        executed = []

        for step in self.steps:
            if not step.enabled(params):
                continue

            step_start = time.perf_counter()
            try:
                result = step.run(result, params)
            except Exception as e:
                logger.error(f"[Pipeline] ❌ Стадия '{step.name}' упала: {e}")
                raise StageExecutionError(step.name, e) from e

            self.observer.on_stage_completed(step.name, (time.perf_counter() - step_start) * 1000)
            executed.append(step.name)

        total_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            f"[Pipeline] {buffer.width}x{buffer.height} → {result.width}x{result.height}, "
            f"стадии: {executed or 'нет'} ({total_ms:.0f}ms)"
        )
        return result

    def adaptive_preprocess(
        self,
        buffer: PixelBuffer,
        params: ProcessingParameters,
        metrics: Optional[QualityMetrics] = None,
    ) -> PixelBuffer:
        """
        Подбирает параметры по метрикам и прогоняет стандартный пайплайн.

        Args:
            metrics: Уже посчитанные метрики этого буфера (чтобы не считать дважды)
        """
        if metrics is None:
            try:
                metrics = self.assess_quality(buffer)
            except Exception as e:
                logger.error(f"[Pipeline] ❌ Оценка качества упала: {e}")
                raise StageExecutionError("quality_assessment", e) from e

        derived = self.tuner.derive(metrics, params)
        self.observer.on_parameters_derived(metrics, derived)
        return self.preprocess(buffer, derived)


_default_pipeline: Optional[PreprocessingPipeline] = None


def _pipeline() -> PreprocessingPipeline:
    global _default_pipeline
    if _default_pipeline is None:
        _default_pipeline = PreprocessingPipeline(thresholds=load_adaptive_thresholds())
    return _default_pipeline


def assess_quality(buffer: PixelBuffer) -> QualityMetrics:
    """Метрики качества буфера."""
    return _pipeline().assess_quality(buffer)


def preprocess(buffer: PixelBuffer, params: ProcessingParameters) -> PixelBuffer:
    """Препроцессинг с пайплайном по умолчанию."""
    return _pipeline().preprocess(buffer, params)


def adaptive_preprocess(buffer: PixelBuffer, params: ProcessingParameters) -> PixelBuffer:
    """Адаптивный препроцессинг с пайплайном по умолчанию."""
    return _pipeline().adaptive_preprocess(buffer, params)
