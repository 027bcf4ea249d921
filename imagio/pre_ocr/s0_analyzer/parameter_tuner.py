"""
Подбор параметров по метрикам качества (адаптивный режим).

Правила применяются независимо по каждой метрике; базовые параметры
не меняются, возвращается копия с переопределёнными полями и
adaptive_mode=False (внутренний вызов пайплайна не рекурсирует).
"""

from typing import Any, Dict, Optional

from loguru import logger

from imagio.domain.contracts import (
    AdaptiveThresholds,
    BinarizationMethod,
    MorphologyOperation,
    ProcessingParameters,
    QualityMetrics,
)


class AdaptiveParameterTuner:
    """Метрики + базовые параметры -> переопределённые параметры."""

    def __init__(self, thresholds: Optional[AdaptiveThresholds] = None) -> None:
        self.thresholds = thresholds or AdaptiveThresholds()

    def derive(
        self,
        metrics: QualityMetrics,
        base: ProcessingParameters
    ) -> ProcessingParameters:
        th = self.thresholds
        overrides: Dict[str, Any] = {"adaptive_mode": False}

        # 1. Размытие
        if metrics.blur_score < th.blur_severe_below:
            overrides["sharpness"] = th.severe_sharpness
            logger.debug(f"[Adaptive] Сильное размытие → sharpness={th.severe_sharpness}")
        elif metrics.blur_score < th.blur_moderate_below:
            overrides["sharpness"] = th.moderate_sharpness
            logger.debug(f"[Adaptive] Умеренное размытие → sharpness={th.moderate_sharpness}")

        # 2. Контраст
        if metrics.contrast_score < th.contrast_low_below:
            overrides["use_contrast_enhancement"] = True
            overrides["contrast"] = th.low_contrast_factor
            logger.debug(f"[Adaptive] Низкий контраст → выравнивание + contrast={th.low_contrast_factor}")
        elif metrics.contrast_score < th.contrast_moderate_below:
            overrides["contrast"] = th.moderate_contrast_factor
            logger.debug(f"[Adaptive] Умеренный контраст → contrast={th.moderate_contrast_factor}")

        # 3. Шум
        if metrics.noise_level > th.noise_high_above:
            overrides["bilateral_filter"] = True
            overrides["morphology"] = MorphologyOperation.OPENING
            logger.debug("[Adaptive] Сильный шум → bilateral + opening")
        elif metrics.noise_level > th.noise_moderate_above:
            overrides["gaussian_blur"] = th.moderate_gaussian_sigma
            logger.debug(f"[Adaptive] Умеренный шум → gaussian_blur={th.moderate_gaussian_sigma}")

        # 4. Яркость (сдвиг относительно базовой, в пределах [-1, 1])
        if metrics.brightness_level < th.brightness_dark_below:
            overrides["brightness"] = min(base.brightness + th.dark_boost, 1.0)
            logger.debug(f"[Adaptive] Тёмное изображение → brightness={overrides['brightness']:.2f}")
        elif metrics.brightness_level > th.brightness_bright_above:
            overrides["brightness"] = max(base.brightness - th.bright_cut, -1.0)
            logger.debug(f"[Adaptive] Светлое изображение → brightness={overrides['brightness']:.2f}")

        # 5. Бинаризация
        uneven = (
            metrics.brightness_level < th.illumination_uneven_below
            or metrics.brightness_level > th.illumination_uneven_above
        )
        if uneven:
            if base.binarization_method != BinarizationMethod.NONE:
                overrides["binarization_method"] = BinarizationMethod.SAUVOLA
                logger.debug("[Adaptive] Неравномерное освещение → Sauvola")
        elif base.binarization_method == BinarizationMethod.NONE:
            overrides["binarization_method"] = BinarizationMethod.OTSU
            logger.debug("[Adaptive] Хорошие условия → Otsu")

        return base.model_copy(update=overrides)
