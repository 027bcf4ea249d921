"""
Исключения для препроцессинга и OCR.

Ошибки синхронные и без повторов: первая упавшая стадия обрывает цепочку,
повторы - забота вызывающего.
"""

from typing import Optional


class PreprocessingError(Exception):
    """Базовое исключение Imagio."""

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        self.message = message
        self.component = component
        self.original_error = original_error
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"Preprocessing Error: {self.message}"
        if self.component:
            msg += f" (Component: {self.component})"
        if self.original_error:
            msg += f" [Original: {type(self.original_error).__name__}: {str(self.original_error)}]"
        return msg


class InvalidInputError(PreprocessingError):
    """Буфер не подходит для операции (слишком мал для окна, неверная форма)."""
    pass


class StageExecutionError(PreprocessingError):
    """Стадия пайплайна упала; stage - имя стадии."""

    def __init__(self, stage: str, original_error: Exception):
        self.stage = stage
        super().__init__(
            message=f"Стадия '{stage}' завершилась с ошибкой",
            component="PreprocessingPipeline",
            original_error=original_error
        )


class ImageDecodingError(PreprocessingError):
    """Не удалось декодировать изображение."""
    pass


class ImageEncodingError(PreprocessingError):
    """Не удалось закодировать изображение."""
    pass


class OCRProviderError(PreprocessingError):
    """Ошибка внешнего движка распознавания."""
    pass
