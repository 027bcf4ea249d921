import pytest

from imagio.domain.contracts import (
    AdaptiveThresholds,
    BinarizationMethod,
    MorphologyOperation,
    QualityMetrics,
)
from imagio.pre_ocr.s0_analyzer.parameter_tuner import AdaptiveParameterTuner


@pytest.fixture
def tuner():
    """Fixture для AdaptiveParameterTuner с порогами по умолчанию."""
    return AdaptiveParameterTuner()


def metrics(blur=80.0, contrast=80.0, noise=5.0, brightness=150.0):
    """Метрики "хорошего" изображения, которые ничего не переопределяют."""
    return QualityMetrics(
        blur_score=blur,
        contrast_score=contrast,
        noise_level=noise,
        brightness_level=brightness,
    )


def test_good_image_only_disables_adaptive_flag(tuner, identity_params):
    """Тест: хорошие метрики → меняется только adaptive_mode и none → otsu."""
    base = identity_params.model_copy(update={"adaptive_mode": True})

    derived = tuner.derive(metrics(), base)

    assert derived.adaptive_mode is False
    assert derived.binarization_method == BinarizationMethod.OTSU
    assert derived.sharpness == base.sharpness
    assert derived.contrast == base.contrast
    # Проверка: базовые параметры не изменились
    assert base.adaptive_mode is True


@pytest.mark.parametrize("blur, expected", [(10.0, 2.0), (29.9, 2.0), (30.0, 1.5), (49.9, 1.5), (50.0, 1.0)])
def test_blur_sets_sharpness(tuner, identity_params, blur, expected):
    """Тест: размытие → резкость 2.0 / 1.5 / без изменений."""
    assert tuner.derive(metrics(blur=blur), identity_params).sharpness == expected


def test_low_contrast_enables_enhancement(tuner, identity_params):
    """Тест: contrast < 40 → выравнивание + contrast 1.5."""
    derived = tuner.derive(metrics(contrast=20.0), identity_params)

    assert derived.use_contrast_enhancement is True
    assert derived.contrast == 1.5


def test_moderate_contrast(tuner, identity_params):
    """Тест: 40 <= contrast < 60 → contrast 1.3, выравнивание не трогаем."""
    derived = tuner.derive(metrics(contrast=45.0), identity_params)

    assert derived.contrast == 1.3
    assert derived.use_contrast_enhancement is False


def test_high_noise_enables_bilateral_and_opening(tuner, identity_params):
    """Тест: noise > 20 → bilateral + opening."""
    derived = tuner.derive(metrics(noise=25.0), identity_params)

    assert derived.bilateral_filter is True
    assert derived.morphology == MorphologyOperation.OPENING
    assert derived.gaussian_blur == identity_params.gaussian_blur


def test_moderate_noise_enables_gaussian(tuner, identity_params):
    """Тест: 12 < noise <= 20 → gaussian 1.0."""
    derived = tuner.derive(metrics(noise=20.0), identity_params)

    assert derived.gaussian_blur == 1.0
    assert derived.bilateral_filter is False


@pytest.mark.parametrize("base_brightness, level, expected", [
    (0.0, 50.0, 0.2),
    (0.3, 50.0, 0.5),
    (0.95, 50.0, 1.0),
    (0.0, 220.0, -0.1),
    (-0.95, 220.0, -1.0),
    (0.4, 150.0, 0.4),
])
def test_brightness_is_shifted_and_clamped(tuner, identity_params, base_brightness, level, expected):
    """Тест: яркость сдвигается относительно базовой и зажимается в [-1, 1]."""
    base = identity_params.model_copy(update={"brightness": base_brightness})

    derived = tuner.derive(metrics(brightness=level), base)

    assert derived.brightness == pytest.approx(expected)


@pytest.mark.parametrize("level, method, expected", [
    (50.0, BinarizationMethod.ADAPTIVE, BinarizationMethod.SAUVOLA),
    (190.0, BinarizationMethod.OTSU, BinarizationMethod.SAUVOLA),
    (50.0, BinarizationMethod.NONE, BinarizationMethod.NONE),
    (150.0, BinarizationMethod.NONE, BinarizationMethod.OTSU),
    (150.0, BinarizationMethod.ADAPTIVE, BinarizationMethod.ADAPTIVE),
])
def test_binarization_choice(tuner, identity_params, level, method, expected):
    """Тест: неравномерное освещение → Sauvola, хорошее + none → Otsu."""
    base = identity_params.model_copy(update={"binarization_method": method})

    derived = tuner.derive(metrics(brightness=level), base)

    assert derived.binarization_method == expected


def test_custom_thresholds(identity_params):
    """Тест: пороги берутся из AdaptiveThresholds."""
    tuner = AdaptiveParameterTuner(AdaptiveThresholds(blur_severe_below=90.0, severe_sharpness=3.0))

    assert tuner.derive(metrics(blur=80.0), identity_params).sharpness == 3.0
