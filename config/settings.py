"""
Настройки проекта Imagio.

Все константы алгоритмов препроцессинга собраны здесь, чтобы стадии
не содержали "магических" чисел и их можно было менять для A/B тестов.
Часть настроек переопределяется через переменные окружения IMAGIO_*.
"""

import os
import tempfile
from pathlib import Path

# =============================================================================
# ПУТИ ПРОЕКТА
# =============================================================================
PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"

# YAML с порогами адаптивного режима (можно подменить через окружение)
ADAPTIVE_THRESHOLDS_FILE = Path(
    os.getenv("IMAGIO_ADAPTIVE_THRESHOLDS", str(CONFIG_DIR / "adaptive_thresholds.yaml"))
)

# =============================================================================
# ЛОГИРОВАНИЕ
# =============================================================================
LOG_LEVEL = os.getenv("IMAGIO_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | <level>{message}</level>"
)

# =============================================================================
# ВРЕМЕННЫЕ ФАЙЛЫ (обработанные изображения для OCR)
# =============================================================================
TEMP_DIR = Path(os.getenv("IMAGIO_TEMP_DIR", tempfile.gettempdir()))
PROCESSED_FILE_PREFIX = "imagio_processed_"
SCREENSHOT_FILE_PREFIX = "imagio_screenshot_"
TEMP_FILE_MAX_AGE_HOURS = float(os.getenv("IMAGIO_TEMP_MAX_AGE_HOURS", "24"))

# Язык OCR по умолчанию (если вызывающий передал пустую строку)
DEFAULT_OCR_LANGUAGE = "eng"

# =============================================================================
# STAGE 0: ANALYZER (метрики качества)
# =============================================================================
MIN_WINDOWED_SIZE = 3          # Laplacian / sharpen / morphology требуют 3x3
BLUR_SCORE_SCALE = 1000.0      # laplacian_var / 1000 -> [0, 100]
CONTRAST_SCORE_SCALE = 2.55    # std / 2.55 -> [0, 100]
NOISE_WINDOW_RADIUS = 3        # окно 7x7
NOISE_SAMPLE_STEP = 5          # каждый 5-й пиксель

# =============================================================================
# STAGE 1: GEOMETRY (рамки и наклон)
# =============================================================================
BORDER_CONTENT_RATIO = 0.10    # строка = контент, если сумма > 10% от максимума
BORDER_MARGIN_DIVISOR = 50     # отступ = dimension / 50
BORDER_MIN_MARGIN = 2
BORDER_SKIP_AREA_RATIO = 0.95  # не обрезаем, если остаётся > 95% площади

CANNY_LOW_THRESHOLD = 50
CANNY_HIGH_THRESHOLD = 150
HOUGH_VOTE_THRESHOLD = 200
HOUGH_SUPPRESSION_RADIUS = 8
LINE_SKEW_MAX_ANGLE = 45.0
LINE_SKEW_MIN_ANGLE = 0.5

PROJECTION_ANGLE_LIMIT = 10.0
PROJECTION_ANGLE_STEP = 0.1
PROJECTION_SKEW_MIN_ANGLE = 0.3

# =============================================================================
# STAGE 2: DENOISE
# =============================================================================
BILATERAL_RADIUS = 5
BILATERAL_SIGMA_COLOR = 75.0
BILATERAL_SIGMA_SPACE = 75.0

# =============================================================================
# STAGE 6: BINARIZATION
# =============================================================================
ADAPTIVE_BLOCK_SIZE = 15
ADAPTIVE_FLAT_MIDPOINT = 128
SAUVOLA_WINDOW_SIZE = 15
SAUVOLA_K = 0.5
SAUVOLA_R = 128.0

# =============================================================================
# ПАРАМЕТРЫ ПО УМОЛЧАНИЮ (для CLI и внешних вызывающих)
# =============================================================================
# Ядро не подставляет дефолты само: все поля ProcessingParameters обязательны.
DEFAULT_PROCESSING_PARAMS = {
    "contrast": 1.3,
    "brightness": 0.0,
    "sharpness": 1.2,
    "binarization_method": "adaptive",
    "use_contrast_enhancement": True,
    "gaussian_blur": 0.5,
    "bilateral_filter": False,
    "morphology": "none",
    "correct_skew": False,
    "skew_method": "line_based",
    "remove_borders": False,
    "adaptive_mode": False,
}


# =============================================================================
# ПРОВЕРКА КОНФИГУРАЦИИ
# =============================================================================
def validate_config():
    """Проверяет корректность конфигурации."""
    errors = []

    if LOG_LEVEL not in ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"):
        errors.append(f"Неизвестный уровень логирования IMAGIO_LOG_LEVEL={LOG_LEVEL}")

    if TEMP_FILE_MAX_AGE_HOURS <= 0:
        errors.append(
            f"IMAGIO_TEMP_MAX_AGE_HOURS должен быть > 0, получено: {TEMP_FILE_MAX_AGE_HOURS}"
        )

    if ADAPTIVE_BLOCK_SIZE % 2 == 0 or SAUVOLA_WINDOW_SIZE % 2 == 0:
        errors.append("Размеры окон бинаризации должны быть нечётными")

    if errors:
        raise ValueError("\n".join(errors))

    TEMP_DIR.mkdir(parents=True, exist_ok=True)

    return True
