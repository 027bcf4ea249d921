import numpy as np
import pytest
from PIL import Image

from imagio.domain.exceptions import InvalidInputError
from imagio.pre_ocr.pixel_buffer import PixelBuffer


def test_from_rgb_adds_opaque_alpha():
    """Тест: RGB (3 канала) → RGBA с альфой 255."""
    rgb = np.zeros((10, 20, 3), dtype=np.uint8)
    rgb[..., 0] = 200

    buffer = PixelBuffer.from_rgb(rgb)

    assert buffer.width == 20
    assert buffer.height == 10
    assert buffer.pixels.shape == (10, 20, 4)
    assert np.all(buffer.pixels[..., 3] == 255)
    assert np.all(buffer.pixels[..., 0] == 200)


def test_from_rgba_forces_alpha():
    """Тест: прозрачность исходника игнорируется, альфа всегда 255."""
    rgba = np.zeros((5, 5, 4), dtype=np.uint8)
    rgba[..., 3] = 17

    buffer = PixelBuffer.from_rgba(rgba)

    assert np.all(buffer.pixels[..., 3] == 255)
    # Проверка: исходный массив не изменён
    assert np.all(rgba[..., 3] == 17)


def test_pixels_are_copied_and_read_only():
    """Тест: буфер владеет копией пикселей, запись запрещена."""
    gray = np.full((4, 4), 10, dtype=np.uint8)
    buffer = PixelBuffer.from_gray(gray)

    gray[:] = 99
    assert np.all(buffer.grayscale == 10)

    with pytest.raises(ValueError):
        buffer.pixels[0, 0, 0] = 1


def test_grayscale_of_gray_buffer_is_identity():
    """Тест: серый → RGBA → серый без потерь."""
    gray = np.arange(256, dtype=np.uint8).reshape(16, 16)

    buffer = PixelBuffer.from_gray(gray)

    assert np.array_equal(buffer.grayscale, gray)
    assert np.array_equal(buffer.pixels[..., 0], buffer.pixels[..., 2])


def test_crop_returns_independent_region():
    """Тест: crop возвращает новый буфер нужного размера."""
    gray = np.arange(100, dtype=np.uint8).reshape(10, 10)
    buffer = PixelBuffer.from_gray(gray)

    cropped = buffer.crop(2, 3, 4, 5)

    assert (cropped.width, cropped.height) == (4, 5)
    assert np.array_equal(cropped.grayscale, gray[3:8, 2:6])


@pytest.mark.parametrize("args", [(0, 0, 0, 5), (8, 0, 5, 5), (-1, 0, 2, 2)])
def test_crop_out_of_bounds_raises(args):
    """Тест: пустая или выходящая за буфер область → InvalidInputError."""
    buffer = PixelBuffer.from_gray(np.zeros((10, 10), dtype=np.uint8))

    with pytest.raises(InvalidInputError):
        buffer.crop(*args)


@pytest.mark.parametrize("shape", [(10, 10), (10, 10, 3), (0, 10, 4)])
def test_invalid_shapes_rejected(shape):
    """Тест: массив не H x W x 4 или пустой → InvalidInputError."""
    with pytest.raises(InvalidInputError):
        PixelBuffer(np.zeros(shape, dtype=np.uint8))


def test_non_uint8_rejected():
    """Тест: float массив → InvalidInputError."""
    with pytest.raises(InvalidInputError):
        PixelBuffer(np.zeros((2, 2, 4), dtype=np.float32))


@pytest.mark.parametrize("constructor, shape", [
    (PixelBuffer.from_rgba, (4, 4, 4)),
    (PixelBuffer.from_rgb, (4, 4, 3)),
    (PixelBuffer.from_gray, (4, 4)),
])
def test_constructors_reject_non_uint8(constructor, shape):
    """Тест: int32 со значением 300 → InvalidInputError, без переполнения при приведении."""
    with pytest.raises(InvalidInputError):
        constructor(np.full(shape, 300, dtype=np.int32))

    with pytest.raises(InvalidInputError):
        constructor(np.full(shape, 0.5, dtype=np.float64))


def test_pil_interop():
    """Тест: PIL (режим L) → PixelBuffer → PIL RGBA."""
    image = Image.new("L", (30, 20), color=77)

    buffer = PixelBuffer.from_pil(image)
    back = buffer.to_pil()

    assert (buffer.width, buffer.height) == (30, 20)
    assert np.all(buffer.grayscale == 77)
    assert back.mode == "RGBA"
    assert back.size == (30, 20)
