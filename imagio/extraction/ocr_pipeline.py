"""
OCR Pipeline: файл -> препроцессинг -> PNG во временной директории -> OCR.

Движок распознавания - внешний коллаборатор (IOCRProvider);
ядро препроцессинга о нём ничего не знает.
"""

import time
from pathlib import Path
from typing import Optional

from loguru import logger

from config.settings import DEFAULT_OCR_LANGUAGE
from imagio.domain.contracts import OcrResult, ProcessingParameters
from imagio.domain.exceptions import OCRProviderError, PreprocessingError
from imagio.domain.interfaces import IOCRProvider
from imagio.extraction.file_manager import ProcessedImageStore
from imagio.pre_ocr.image_file_reader import ImageFileReader
from imagio.pre_ocr.pipeline import PreprocessingPipeline


class OcrPipeline:
    """
    Полный цикл распознавания одного изображения.

    Пример:
        ocr = OcrPipeline(provider=TesseractProvider())
        result = ocr.perform_ocr(Path("scan.png"), params, "eng")
    """

    def __init__(
        self,
        provider: IOCRProvider,
        pipeline: Optional[PreprocessingPipeline] = None,
        store: Optional[ProcessedImageStore] = None,
    ) -> None:
        self.provider = provider
        self.pipeline = pipeline or PreprocessingPipeline()
        self.store = store or ProcessedImageStore()

    def perform_ocr(
        self,
        image_path: Path,
        params: ProcessingParameters,
        language: str = DEFAULT_OCR_LANGUAGE,
    ) -> OcrResult:
        """
        Распознаёт текст с изображения.

        Args:
            image_path: Путь к исходному изображению
            params: Параметры препроцессинга
            language: Код языка движка (пустая строка -> "eng")

        Returns:
            OcrResult: текст, путь к обработанному PNG, метрики (в адаптивном режиме)

        Raises:
            FileNotFoundError: Исходный файл не найден
            ImageDecodingError: Файл не декодируется
            StageExecutionError: Упала стадия препроцессинга
            OCRProviderError: Ошибка движка распознавания
        """
        language = language or DEFAULT_OCR_LANGUAGE
        total_start = time.perf_counter()

        buffer = ImageFileReader.read(Path(image_path))

        metrics = None
        if params.adaptive_mode:
            metrics = self.pipeline.assess_quality(buffer)
            processed = self.pipeline.adaptive_preprocess(buffer, params, metrics)
        else:
            processed = self.pipeline.preprocess(buffer, params)

        processed_path = self.store.save(processed)

        ocr_start = time.perf_counter()
        try:
            text = self.provider.recognize_file(processed_path, language)
        except PreprocessingError:
            raise
        except Exception as e:
            raise OCRProviderError(
                f"Движок распознавания не обработал {processed_path.name}",
                component=type(self.provider).__name__,
                original_error=e
            ) from e

        logger.info(
            f"[Performance] OCR: {(time.perf_counter() - ocr_start) * 1000:.0f}ms, "
            f"всего: {(time.perf_counter() - total_start) * 1000:.0f}ms "
            f"({len(text)} символов, lang={language})"
        )

        return OcrResult(
            text=text,
            processed_image_path=str(processed_path),
            quality_metrics=metrics,
        )
