import numpy as np
import pytest

from imagio.domain.contracts import SkewMethod
from imagio.pre_ocr.pixel_buffer import PixelBuffer
from imagio.pre_ocr.s1_geometry.stage import GeometricCorrector, normalize_line_angle


@pytest.fixture
def corrector():
    """Fixture для GeometricCorrector."""
    return GeometricCorrector()


# ----------------------------------------------------------------------
# Рамки
# ----------------------------------------------------------------------

def test_black_frame_is_removed(corrector):
    """Тест: 100x100, чёрная рамка 10px вокруг белого → 84x84."""
    gray = np.zeros((100, 100), dtype=np.uint8)
    gray[10:90, 10:90] = 255

    result = corrector.remove_borders(PixelBuffer.from_gray(gray))

    # Проверка: контент 10..89, отступ max(100 // 50, 2) = 2 → 8..91
    assert (result.width, result.height) == (84, 84)
    assert np.all(result.grayscale[2:-2, 2:-2] == 255)


def test_no_frame_returns_input(corrector):
    """Тест: белое изображение → обрезка пропущена, тот же буфер."""
    buffer = PixelBuffer.from_gray(np.full((60, 80), 255, dtype=np.uint8))

    assert corrector.remove_borders(buffer) is buffer


def test_all_black_returns_input(corrector):
    """Тест: нет строк контента → полный размер → обрезка пропущена."""
    buffer = PixelBuffer.from_gray(np.zeros((50, 50), dtype=np.uint8))

    assert corrector.remove_borders(buffer) is buffer


def test_thin_frame_is_skipped(corrector):
    """Тест: обрезка оставила бы > 95% площади → без изменений."""
    gray = np.full((200, 200), 255, dtype=np.uint8)
    gray[0, :] = 0

    buffer = PixelBuffer.from_gray(gray)

    assert corrector.remove_borders(buffer) is buffer


# ----------------------------------------------------------------------
# Наклон
# ----------------------------------------------------------------------

@pytest.mark.parametrize("theta, expected", [
    (0.0, 0.0),
    (3.0, 3.0),
    (95.0, 5.0),
    (88.0, -2.0),
    (177.0, -3.0),
    (45.0, None),
    (135.0, None),
    (44.0, 44.0),
])
def test_normalize_line_angle(theta, expected):
    """Тест: нормализация угла нормали прямой."""
    assert normalize_line_angle(theta) == expected


@pytest.mark.parametrize("angle", [5.0, -3.0])
def test_projection_detects_skew(corrector, make_skewed_lines, angle):
    """Тест: проекционный профиль находит угол с точностью 0.5°."""
    buffer = make_skewed_lines(angle)

    detected = corrector.detect_skew_projection(buffer.grayscale)

    assert detected == pytest.approx(angle, abs=0.5)


def test_projection_correction_converges(corrector, make_skewed_lines):
    """Тест: после коррекции остаточный наклон в пределах ±0.5°."""
    corrected = corrector.correct_skew(make_skewed_lines(5.0), SkewMethod.PROJECTION)

    residual = corrector.detect_skew_projection(corrected.grayscale)

    assert abs(residual) <= 0.5
    assert (corrected.width, corrected.height) == (800, 600)


def test_line_based_detects_skew(corrector, make_skewed_lines):
    """Тест: прямые Хафа находят угол 5° (шаг аккумулятора 1°)."""
    detected = corrector.detect_skew_line_based(make_skewed_lines(5.0).grayscale)

    assert detected is not None
    assert detected == pytest.approx(5.0, abs=1.5)


def test_straight_page_is_not_rotated(corrector, make_skewed_lines):
    """Тест: ровные строки → буфер без изменений для обоих методов."""
    buffer = make_skewed_lines(0.0)

    assert corrector.correct_skew(buffer, SkewMethod.LINE_BASED) is buffer
    assert corrector.correct_skew(buffer, SkewMethod.PROJECTION) is buffer


def test_blank_page_has_no_reliable_skew(corrector):
    """Тест: пустая страница → нет прямых, нет чернил → без коррекции."""
    buffer = PixelBuffer.from_gray(np.full((120, 160), 255, dtype=np.uint8))

    assert corrector.detect_skew_line_based(buffer.grayscale) is None
    assert corrector.detect_skew_projection(buffer.grayscale) == 0.0
    assert corrector.correct_skew(buffer, SkewMethod.LINE_BASED) is buffer
    assert corrector.correct_skew(buffer, SkewMethod.PROJECTION) is buffer


def test_single_row_page_is_not_rotated(corrector):
    """Тест: одна строка с чернилами → дисперсия профиля всегда 0 → без коррекции."""
    gray = np.full((1, 50), 255, dtype=np.uint8)
    gray[0, 10:20] = 0
    buffer = PixelBuffer.from_gray(gray)

    assert corrector.detect_skew_projection(buffer.grayscale) == 0.0
    assert corrector.correct_skew(buffer, SkewMethod.PROJECTION) is buffer


def test_rotation_fills_with_white(corrector, make_skewed_lines):
    """Тест: углы после поворота заливаются белым, альфа 255."""
    buffer = make_skewed_lines(5.0)

    assert np.all(buffer.pixels[0, 0] == 255)
    assert np.all(buffer.pixels[..., 3] == 255)
