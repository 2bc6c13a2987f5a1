"""
Main entry point for the Booru Tagger command line.
"""

import argparse
import json
import sys
from typing import List, Optional
from PIL import Image, UnidentifiedImageError
from rich.console import Console
from rich.table import Table

from .config import settings
from .errors import TaggerError
from .logging import setup_logging, get_logger
from .models import Predictions
from .tagging_engine import construct_session


def threshold(value: str) -> float:
    """Argparse type for a threshold in [0, 1]."""
    try:
        parsed = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid threshold: {value!r}")
    if not 0.0 <= parsed <= 1.0:
        raise argparse.ArgumentTypeError(f"threshold must be between 0 and 1, got {parsed}")
    return parsed


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Booru Tagger - tag images with a WD-14 style ONNX model"
    )

    parser.add_argument("images", nargs="+", help="Image files to tag")

    parser.add_argument(
        "--model",
        default=settings.model_path,
        help="Path to the ONNX model (default: TAGGER_MODEL_PATH)"
    )

    parser.add_argument(
        "--tags",
        default=settings.tags_path,
        help="Path to the tag metadata CSV (default: TAGGER_TAGS_PATH)"
    )

    parser.add_argument(
        "--general-threshold",
        type=threshold,
        default=settings.general_threshold,
        help=f"Threshold for general tags (default: {settings.general_threshold})"
    )

    parser.add_argument(
        "--character-threshold",
        type=threshold,
        default=settings.character_threshold,
        help=f"Threshold for character tags (default: {settings.character_threshold})"
    )

    parser.add_argument(
        "--general-mcut",
        action="store_true",
        default=settings.general_mcut_enabled,
        help="Use the MCut adaptive threshold for general tags"
    )

    parser.add_argument(
        "--character-mcut",
        action="store_true",
        default=settings.character_mcut_enabled,
        help="Use the MCut adaptive threshold for character tags"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print predictions as JSON"
    )

    return parser.parse_args(argv)


def load_images(paths: List[str]) -> List[Image.Image]:
    """Decode image files, fully loading them into memory."""
    images = []
    for path in paths:
        with Image.open(path) as image:
            image.load()
            images.append(image.copy())
    return images


def print_predictions(console: Console, path: str, prediction: Predictions) -> None:
    """Render one image's predictions as a table."""
    table = Table(title=path, show_lines=False)
    table.add_column("Category")
    table.add_column("Tag")
    table.add_column("Score", justify="right")

    top = prediction.top_rating()
    if top:
        table.add_row("rating", top[0], f"{top[1]:.3f}")
    for name, score in sorted(prediction.character.items(), key=lambda item: item[1], reverse=True):
        table.add_row("character", name, f"{score:.3f}")
    for name in prediction.names():
        table.add_row("general", name, f"{prediction.general[name]:.3f}")

    console.print(table)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    setup_logging()
    logger = get_logger("main")

    args = parse_arguments(argv)

    if not args.model or not args.tags:
        logger.error("❌ Both --model and --tags are required (or TAGGER_MODEL_PATH / TAGGER_TAGS_PATH)")
        return 1

    try:
        images = load_images(args.images)
    except (OSError, UnidentifiedImageError) as e:
        logger.error(f"❌ Failed to read image: {e}")
        return 1

    try:
        with construct_session(args.model, args.tags) as session:
            predictions = session.run(
                images,
                args.general_threshold,
                args.character_threshold,
                args.general_mcut,
                args.character_mcut,
            )
    except TaggerError as e:
        logger.error(f"❌ Tagging failed: {e}")
        return 1

    if args.json:
        payload = [
            {"path": path, "predictions": p.model_dump()}
            for path, p in zip(args.images, predictions)
        ]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        console = Console()
        for path, prediction in zip(args.images, predictions):
            print_predictions(console, path, prediction)

    logger.info(f"✅ Tagged {len(predictions)} images")
    return 0


if __name__ == "__main__":
    sys.exit(main())
