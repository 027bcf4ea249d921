"""
Интерфейсы (абстрактные классы) препроцессинга.

Определяет контракты для пайплайна, наблюдателей и внешнего OCR движка.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from .contracts import ProcessingParameters, QualityMetrics

if TYPE_CHECKING:
    from imagio.pre_ocr.pixel_buffer import PixelBuffer


class IPreprocessingPipeline(ABC):
    """
    Интерфейс пайплайна препроцессинга.

    Буфер -> новый буфер; исходный буфер не меняется.
    """

    @abstractmethod
    def assess_quality(self, buffer: "PixelBuffer") -> QualityMetrics:
        """Вычисляет метрики качества."""
        pass

    @abstractmethod
    def preprocess(self, buffer: "PixelBuffer", params: ProcessingParameters) -> "PixelBuffer":
        """Прогоняет буфер через стадии в фиксированном порядке."""
        pass

    @abstractmethod
    def adaptive_preprocess(self, buffer: "PixelBuffer", params: ProcessingParameters) -> "PixelBuffer":
        """Подбирает параметры по метрикам и прогоняет стандартный пайплайн."""
        pass


class IPipelineObserver(ABC):
    """
    Наблюдатель пайплайна (замена print-таймингам).

    Внедряется в пайплайн; реализации не должны влиять на результат.
    """

    @abstractmethod
    def on_stage_completed(self, stage: str, elapsed_ms: float) -> None:
        """Стадия отработала за elapsed_ms."""
        pass

    @abstractmethod
    def on_parameters_derived(
        self,
        metrics: QualityMetrics,
        params: ProcessingParameters
    ) -> None:
        """Адаптивный режим подобрал параметры."""
        pass


class IOCRProvider(ABC):
    """Интерфейс движка распознавания текста (внешний коллаборатор)."""

    @abstractmethod
    def recognize_file(self, image_path: Path, language: str) -> str:
        """
        Распознаёт текст из файла изображения.

        Args:
            image_path: Путь к обработанному PNG
            language: Код языка (например "eng")

        Returns:
            Распознанный текст
        """
        pass
