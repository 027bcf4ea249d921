"""
Imagio - препроцессинг изображений для OCR.
"""

__version__ = "0.1.0"
