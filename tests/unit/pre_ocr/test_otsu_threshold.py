import numpy as np

from imagio.pre_ocr.infrastructure.histogram import histogram, otsu_threshold


def test_bimodal_threshold_separates_modes():
    """Тест: 1000 пикселей 50 + 1000 пикселей 200 → порог разделяет моды."""
    gray = np.concatenate([np.full(1000, 50), np.full(1000, 200)]).astype(np.uint8)

    t = otsu_threshold(histogram(gray))

    # Проверка: все пороги в [50, 200) дают одинаковую дисперсию, берётся первый,
    # поэтому порог равен нижней моде, а не лежит строго между модами
    assert t == 50
    assert np.all(gray[:1000] <= t)
    assert np.all(gray[1000:] > t)


def test_unbalanced_bimodal_threshold_separates_modes():
    """Тест: 1000 пикселей 50 + 200 пикселей 200."""
    gray = np.concatenate([np.full(1000, 50), np.full(200, 200)]).astype(np.uint8)

    t = otsu_threshold(histogram(gray))

    assert 50 <= t < 200


def test_noisy_bimodal_threshold_between_modes():
    """Тест: две размытые моды → порог строго между ними."""
    rng = np.random.default_rng(1)
    dark = np.clip(rng.normal(50, 8, 5000), 0, 255)
    light = np.clip(rng.normal(200, 8, 5000), 0, 255)
    gray = np.concatenate([dark, light]).astype(np.uint8)

    t = otsu_threshold(histogram(gray))

    assert 50 < t < 200


def test_single_level_is_degenerate():
    """Тест: гистограмма из одного уровня → порог 0."""
    assert otsu_threshold(histogram(np.full((10, 10), 255, dtype=np.uint8))) == 0
    assert otsu_threshold(histogram(np.full((10, 10), 90, dtype=np.uint8))) == 0


def test_empty_histogram_is_degenerate():
    """Тест: пустая гистограмма → порог 0."""
    assert otsu_threshold(np.zeros(256, dtype=np.int64)) == 0


def test_histogram_has_256_bins():
    """Тест: 256 бинов даже без ярких пикселей."""
    hist = histogram(np.zeros((3, 3), dtype=np.uint8))

    assert hist.shape == (256,)
    assert hist[0] == 9
