"""
Валидационные контракты (contracts) для пайплайна препроцессинга.

Каждый контракт гарантирует:
  1. Правильный тип данных (type safety)
  2. Значения в допустимых диапазонах (data integrity)
  3. Обязательные поля (completeness)
  4. Неизменяемость (frozen) - стадии не могут менять конфигурацию друг друга

Все модели используют Pydantic v2 с Field validators.
"""

import math
from enum import Enum
from typing import Any, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# ПЕРЕЧИСЛЕНИЯ (закрытые множества вариантов)
# ============================================================================

class BinarizationMethod(str, Enum):
    """Методы бинаризации (Stage 6)."""
    NONE = "none"
    ADAPTIVE = "adaptive"
    OTSU = "otsu"
    MEAN = "mean"
    SAUVOLA = "sauvola"


class MorphologyOperation(str, Enum):
    """Морфологические операции (Stage 5)."""
    NONE = "none"
    ERODE = "erode"
    DILATE = "dilate"
    OPENING = "opening"
    CLOSING = "closing"


class SkewMethod(str, Enum):
    """Методы коррекции наклона (Stage 1)."""
    LINE_BASED = "line_based"
    PROJECTION = "projection"


# Старые имена из UI
_SKEW_ALIASES = {"hough": SkewMethod.LINE_BASED}


def _coerce_option(value: Any, enum_cls: type, fallback: Enum, field_name: str) -> Any:
    """Неизвестная опция -> fallback (опечатка в конфиге не роняет пайплайн)."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if enum_cls is SkewMethod and normalized in _SKEW_ALIASES:
            return _SKEW_ALIASES[normalized]
        try:
            return enum_cls(normalized)
        except ValueError:
            pass
    logger.warning(
        f"[Contracts] Неизвестное значение {field_name}={value!r} → {fallback.value}"
    )
    return fallback


# ============================================================================
# КОНФИГУРАЦИЯ ПАЙПЛАЙНА
# ============================================================================

class ProcessingParameters(BaseModel):
    """
    Параметры препроцессинга.

    Все поля обязательны: дефолты - забота вызывающего (см. config/settings.py).
    Создаётся один раз на вызов пайплайна; адаптивный режим делает копию
    через model_copy(update=...), исходный объект не меняется.
    """

    model_config = ConfigDict(frozen=True)

    contrast: float = Field(..., ge=0, description="Коэффициент контраста (1.0 = без изменений)")
    brightness: float = Field(..., ge=-1.0, le=1.0, description="Сдвиг яркости [-1, 1] (0 = без изменений)")
    sharpness: float = Field(..., description="Резкость (<= 1.0 отключает)")
    binarization_method: BinarizationMethod = Field(..., description="Метод бинаризации")
    use_contrast_enhancement: bool = Field(..., description="Выравнивание гистограммы")
    gaussian_blur: float = Field(..., description="Sigma гауссова размытия (<= 0 отключает)")
    bilateral_filter: bool = Field(..., description="Билатеральный фильтр (приоритетнее gaussian)")
    morphology: MorphologyOperation = Field(..., description="Морфологическая операция")
    correct_skew: bool = Field(..., description="Коррекция наклона")
    skew_method: SkewMethod = Field(..., description="Метод коррекции наклона")
    remove_borders: bool = Field(..., description="Удаление тёмных рамок")
    adaptive_mode: bool = Field(..., description="Автоподбор параметров по метрикам")

    @field_validator("binarization_method", mode="before")
    @classmethod
    def unknown_binarization_is_none(cls, v: Any) -> Any:
        return _coerce_option(v, BinarizationMethod, BinarizationMethod.NONE, "binarization_method")

    @field_validator("morphology", mode="before")
    @classmethod
    def unknown_morphology_is_none(cls, v: Any) -> Any:
        return _coerce_option(v, MorphologyOperation, MorphologyOperation.NONE, "morphology")

    @field_validator("skew_method", mode="before")
    @classmethod
    def unknown_skew_is_line_based(cls, v: Any) -> Any:
        return _coerce_option(v, SkewMethod, SkewMethod.LINE_BASED, "skew_method")

    @field_validator("contrast", "brightness", "sharpness", "gaussian_blur")
    @classmethod
    def no_special_floats(cls, v: float) -> float:
        """Не допускаются NaN или Inf значения."""
        if math.isnan(v) or math.isinf(v):
            raise ValueError("Значение не может быть NaN/Inf")
        return v


# ============================================================================
# STAGE 0: ANALYZER (метрики качества)
# ============================================================================

class QualityMetrics(BaseModel):
    """
    Метрики качества изображения.

    Чистый результат вычисления, без идентичности и жизненного цикла.
    """

    model_config = ConfigDict(frozen=True)

    blur_score: float = Field(..., ge=0, le=100, description="Резкость [0-100], выше = резче")
    contrast_score: float = Field(..., ge=0, le=100, description="Контраст [0-100]")
    noise_level: float = Field(..., ge=0, le=100, description="Шум [0-100], выше = шумнее")
    brightness_level: float = Field(..., ge=0, le=255, description="Средняя яркость [0-255]")

    @field_validator("blur_score", "contrast_score", "noise_level", "brightness_level")
    @classmethod
    def no_special_floats(cls, v: float) -> float:
        if math.isnan(v) or math.isinf(v):
            raise ValueError("Значение не может быть NaN/Inf")
        return v


class AdaptiveThresholds(BaseModel):
    """
    Пороги адаптивного режима.

    Значения эмпирические, без выведенного обоснования, поэтому вынесены
    в конфигурацию (config/adaptive_thresholds.yaml), а не зашиты в код.
    """

    model_config = ConfigDict(frozen=True)

    blur_severe_below: float = 30.0
    blur_moderate_below: float = 50.0
    severe_sharpness: float = 2.0
    moderate_sharpness: float = 1.5

    contrast_low_below: float = 40.0
    contrast_moderate_below: float = 60.0
    low_contrast_factor: float = 1.5
    moderate_contrast_factor: float = 1.3

    noise_high_above: float = 20.0
    noise_moderate_above: float = 12.0
    moderate_gaussian_sigma: float = 1.0

    brightness_dark_below: float = 80.0
    brightness_bright_above: float = 200.0
    dark_boost: float = 0.2
    bright_cut: float = 0.1

    illumination_uneven_below: float = 100.0
    illumination_uneven_above: float = 180.0


# ============================================================================
# OCR (внешний коллаборатор)
# ============================================================================

class OcrResult(BaseModel):
    """Результат распознавания: текст + путь к обработанному изображению."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Распознанный текст")
    processed_image_path: str = Field(..., min_length=1, description="Путь к сохранённому PNG")
    quality_metrics: Optional[QualityMetrics] = Field(
        None, description="Метрики (только в адаптивном режиме)"
    )


class ContractValidationError(Exception):
    """Exception для нарушения контрактов (используется вместо Pydantic ValidationError)."""

    def __init__(self, stage_name: str, contract_name: str, errors: list) -> None:
        self.stage_name = stage_name
        self.contract_name = contract_name
        self.errors = errors

        error_messages = []
        for err in errors:
            if isinstance(err, dict):
                loc = err.get("loc", [])[0] if err.get("loc") else "unknown"
                err_type = err.get("type", "unknown")
                msg = err.get("msg", "unknown error")
                error_messages.append(f"  {loc} ({err_type}): {msg}")
            else:
                error_messages.append(f"  {str(err)}")

        message = (
            f"Contract violation in {stage_name} ({contract_name}):\n"
            + "\n".join(error_messages)
        )
        super().__init__(message)
