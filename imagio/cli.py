"""
Точка входа imagio-preprocess: препроцессинг одного изображения.

Использование:
    # Оценить качество (JSON в stdout)
    imagio-preprocess scan.jpg --assess-only

    # Препроцессинг с параметрами по умолчанию -> scan_processed.png
    imagio-preprocess scan.jpg

    # Адаптивный режим, бинаризация Sauvola, коррекция наклона
    imagio-preprocess scan.jpg -o out.png --adaptive --binarization sauvola --correct-skew
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import ValidationError

from config.settings import DEFAULT_PROCESSING_PARAMS, LOG_FORMAT, LOG_LEVEL, validate_config
from imagio.domain.contracts import (
    BinarizationMethod,
    ContractValidationError,
    MorphologyOperation,
    ProcessingParameters,
    SkewMethod,
)
from imagio.domain.exceptions import PreprocessingError
from imagio.pre_ocr.image_encoder import ImageEncoder
from imagio.pre_ocr.image_file_reader import ImageFileReader
from imagio.pre_ocr.observers import TimingObserver
from imagio.pre_ocr.pipeline import PreprocessingPipeline
from imagio.pre_ocr.s0_analyzer.thresholds import load_adaptive_thresholds


def build_parser() -> argparse.ArgumentParser:
    d = DEFAULT_PROCESSING_PARAMS
    parser = argparse.ArgumentParser(
        prog="imagio-preprocess",
        description="Imagio: препроцессинг изображения перед OCR"
    )
    parser.add_argument("input", type=Path, help="Путь к изображению")
    parser.add_argument("-o", "--output", type=Path, help="Куда сохранить PNG (по умолчанию <имя>_processed.png)")
    parser.add_argument("--assess-only", action="store_true", help="Только метрики качества (JSON)")

    parser.add_argument("--contrast", type=float, default=d["contrast"])
    parser.add_argument("--brightness", type=float, default=d["brightness"])
    parser.add_argument("--sharpness", type=float, default=d["sharpness"])
    parser.add_argument(
        "--binarization",
        default=d["binarization_method"],
        choices=[m.value for m in BinarizationMethod],
    )
    parser.add_argument(
        "--morphology",
        default=d["morphology"],
        choices=[m.value for m in MorphologyOperation],
    )
    parser.add_argument("--gaussian-blur", type=float, default=d["gaussian_blur"])
    parser.add_argument("--bilateral", action="store_true", default=d["bilateral_filter"])
    parser.add_argument(
        "--no-contrast-enhancement",
        dest="contrast_enhancement",
        action="store_false",
        default=d["use_contrast_enhancement"],
    )
    parser.add_argument("--correct-skew", action="store_true", default=d["correct_skew"])
    parser.add_argument(
        "--skew-method",
        default=d["skew_method"],
        choices=[m.value for m in SkewMethod] + ["hough"],
    )
    parser.add_argument("--remove-borders", action="store_true", default=d["remove_borders"])
    parser.add_argument("--adaptive", action="store_true", default=d["adaptive_mode"])
    parser.add_argument("--timings", action="store_true", help="Вывести тайминги стадий (JSON в stderr)")
    return parser


def params_from_args(args: argparse.Namespace) -> ProcessingParameters:
    raw: Dict[str, Any] = {
        "contrast": args.contrast,
        "brightness": args.brightness,
        "sharpness": args.sharpness,
        "binarization_method": args.binarization,
        "use_contrast_enhancement": args.contrast_enhancement,
        "gaussian_blur": args.gaussian_blur,
        "bilateral_filter": args.bilateral,
        "morphology": args.morphology,
        "correct_skew": args.correct_skew,
        "skew_method": args.skew_method,
        "remove_borders": args.remove_borders,
        "adaptive_mode": args.adaptive,
    }
    try:
        return ProcessingParameters(**raw)
    except ValidationError as e:
        raise ContractValidationError("CLI", "ProcessingParameters", e.errors())


def setup_logging() -> None:
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=LOG_LEVEL)


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)

    try:
        validate_config()
    except ValueError as e:
        logger.error(f"[CLI] Ошибка конфигурации: {e}")
        return 2

    try:
        buffer = ImageFileReader.read(args.input)
        observer = TimingObserver()
        pipeline = PreprocessingPipeline(observer=observer, thresholds=load_adaptive_thresholds())

        if args.assess_only:
            metrics = pipeline.assess_quality(buffer)
            print(metrics.model_dump_json(indent=2))
            return 0

        params = params_from_args(args)
        processed = pipeline.preprocess(buffer, params)

        output = args.output or args.input.with_name(f"{args.input.stem}_processed.png")
        ImageEncoder.save(processed, output)
    except (FileNotFoundError, PreprocessingError, ContractValidationError) as e:
        logger.error(f"[CLI] ❌ {e}")
        return 1

    if args.timings:
        print(json.dumps(observer.as_dict(), indent=2), file=sys.stderr)

    logger.info(f"[CLI] ✅ {args.input.name} → {output} ({processed.width}x{processed.height})")
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
