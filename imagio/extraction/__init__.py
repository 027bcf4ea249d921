"""
Extraction: связка препроцессинга с внешним движком OCR.
"""

from .file_manager import ProcessedImageStore
from .ocr_pipeline import OcrPipeline

__all__ = ['OcrPipeline', 'ProcessedImageStore']
