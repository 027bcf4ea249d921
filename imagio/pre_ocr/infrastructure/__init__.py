"""
Pre-OCR Infrastructure: низкоуровневые операции над массивами.
"""

from .histogram import histogram, otsu_threshold
from .hough import detect_line_angles
from .rotation import rotate
from .windows import ClampedWindow

__all__ = [
    'ClampedWindow',
    'detect_line_angles',
    'histogram',
    'otsu_threshold',
    'rotate',
]
