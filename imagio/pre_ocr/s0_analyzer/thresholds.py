"""
Загрузка порогов адаптивного режима из YAML.

Формат файла - секции по метрикам (blur, contrast, noise, brightness,
illumination). Ключ секции сопоставляется полю AdaptiveThresholds как
"<секция>_<ключ>", а если такого поля нет - как "<ключ>".
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger
from pydantic import ValidationError

from config.settings import ADAPTIVE_THRESHOLDS_FILE
from imagio.domain.contracts import AdaptiveThresholds, ContractValidationError


def _flatten(raw: Dict[str, Any]) -> Dict[str, Any]:
    fields = AdaptiveThresholds.model_fields
    flat: Dict[str, Any] = {}
    for section, values in raw.items():
        if not isinstance(values, dict):
            if section in fields:
                flat[section] = values
            else:
                logger.warning(f"[Thresholds] Неизвестный ключ '{section}' пропущен")
            continue
        for key, value in values.items():
            prefixed = f"{section}_{key}"
            name = prefixed if prefixed in fields else key
            if name in fields:
                flat[name] = value
            else:
                logger.warning(f"[Thresholds] Неизвестный ключ '{section}.{key}' пропущен")
    return flat


def load_adaptive_thresholds(path: Optional[Path] = None) -> AdaptiveThresholds:
    """
    Загружает пороги из YAML.

    Нет файла -> значения по умолчанию (с предупреждением).
    Неизвестные ключи пропускаются с предупреждением, неверные типы -> ContractValidationError.
    """
    path = Path(path) if path is not None else ADAPTIVE_THRESHOLDS_FILE

    if not path.exists():
        logger.warning(f"[Thresholds] Файл {path} не найден, используются значения по умолчанию")
        return AdaptiveThresholds()

    with open(path, 'r', encoding='utf-8') as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ContractValidationError(
            "S0", "AdaptiveThresholds", [f"Ожидается словарь в {path}, получено {type(raw).__name__}"]
        )

    try:
        thresholds = AdaptiveThresholds(**_flatten(raw))
    except ValidationError as e:
        raise ContractValidationError("S0", "AdaptiveThresholds", e.errors())

    logger.debug(f"[Thresholds] Загружены из {path}")
    return thresholds
