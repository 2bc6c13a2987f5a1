"""
Tagging session: chunked inference and per-image tag assembly.
"""

import os
import time
from typing import List, Optional, Sequence
import numpy as np
from PIL import Image

from .batching import DYNAMIC_DIM, plan_chunks, resolve_shape
from .catalog import TagCatalog, load_tag_catalog
from .config import settings
from .errors import ConfigError, ResourceError, TaggerError
from .inference import ChunkTensors, InferenceEngine, OnnxInferenceEngine
from .logging import get_logger, MetricsLogger
from .models import Category, Predictions, DEFAULT_GENERAL_THRESHOLD, DEFAULT_CHARACTER_THRESHOLD
from .preprocessing import prepare_batch
from .thresholds import CHARACTER_MCUT_FLOOR, resolve_threshold


def assemble_predictions(
    scores: np.ndarray,
    catalog: TagCatalog,
    general_threshold: float,
    character_threshold: float,
    general_mcut_enabled: bool = False,
    character_mcut_enabled: bool = False,
) -> Predictions:
    """
    Split one image's score vector into rating/general/character tags.

    Rating tags are always reported. General and character tags are kept only
    when their score is strictly greater than the effective threshold, which is
    either the given one or the MCut threshold over that category's scores.
    """
    scores = np.asarray(scores).ravel()
    width = min(len(scores), len(catalog))
    categories = catalog.categories[:width]
    scores = scores[:width]

    general = resolve_threshold(
        scores[categories == Category.GENERAL], general_threshold, general_mcut_enabled
    )
    character = resolve_threshold(
        scores[categories == Category.CHARACTER],
        character_threshold,
        character_mcut_enabled,
        floor=CHARACTER_MCUT_FLOOR,
    )

    names = catalog.names
    predictions = Predictions()
    for index in np.flatnonzero(categories == Category.RATING):
        predictions.rating[names[index]] = float(scores[index])
    for index in np.flatnonzero((categories == Category.GENERAL) & (scores > general)):
        predictions.general[names[index]] = float(scores[index])
    for index in np.flatnonzero((categories == Category.CHARACTER) & (scores > character)):
        predictions.character[names[index]] = float(scores[index])

    return predictions


class TaggerSession:
    """A loaded model plus its tag catalog."""

    def __init__(self, engine: InferenceEngine, catalog: TagCatalog):
        self.logger = get_logger("tagging_engine")
        self.metrics = MetricsLogger()
        self.engine: Optional[InferenceEngine] = engine
        self.catalog = catalog

        self.input_shape = tuple(engine.input_shape)
        self.output_shape = tuple(engine.output_shape)
        if len(self.input_shape) != 4 or len(self.output_shape) != 2:
            raise ConfigError(
                f"Expected NHWC input and (batch, tags) output, got {self.input_shape} -> {self.output_shape}"
            )

        self.batch_size = self.input_shape[0]
        self.target_size = self.input_shape[1]
        if self.target_size == DYNAMIC_DIM:
            raise ConfigError(f"Model input size must be static, got {self.input_shape}")

        self.output_width = self.output_shape[1]
        if self.output_width == DYNAMIC_DIM:
            self.output_width = len(catalog)
        elif self.output_width != len(catalog):
            raise ConfigError(
                f"Model outputs {self.output_width} scores but the tag catalog has {len(catalog)} tags"
            )

        self.logger.info(
            f"🚀 Tagger session ready | batch size {self.batch_size}, "
            f"input {self.target_size}px, {len(catalog)} tags"
        )

    @property
    def closed(self) -> bool:
        return self.engine is None

    def run(
        self,
        images: Sequence[Image.Image],
        general_threshold: float = DEFAULT_GENERAL_THRESHOLD,
        character_threshold: float = DEFAULT_CHARACTER_THRESHOLD,
        general_mcut_enabled: bool = False,
        character_mcut_enabled: bool = False,
    ) -> List[Predictions]:
        """
        Tag images, returning one Predictions per image in input order.

        All-or-nothing: any tensor or inference error aborts the whole call.
        """
        if self.closed:
            raise ResourceError("run: session has been destroyed")
        for name, value in (("general_threshold", general_threshold), ("character_threshold", character_threshold)):
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")

        predictions: List[Predictions] = []
        try:
            for chunk in plan_chunks(images, self.batch_size):
                predictions.extend(self._run_chunk(
                    chunk,
                    general_threshold,
                    character_threshold,
                    general_mcut_enabled,
                    character_mcut_enabled,
                ))
        except TaggerError as e:
            self.metrics.log_run_failure(str(e))
            raise

        return predictions

    def _run_chunk(
        self,
        chunk: List[Image.Image],
        general_threshold: float,
        character_threshold: float,
        general_mcut_enabled: bool,
        character_mcut_enabled: bool,
    ) -> List[Predictions]:
        start_time = time.time()
        batch = len(chunk) if self.batch_size == DYNAMIC_DIM else self.batch_size

        flat_input = prepare_batch(chunk, self.target_size)
        if batch > len(chunk):
            # Fixed batch dimension with a short final chunk: fill the rest with zeros
            per_image = 3 * self.target_size * self.target_size
            flat_input = np.concatenate([
                flat_input,
                np.zeros(per_image * (batch - len(chunk)), dtype=np.float32),
            ])

        in_shape = resolve_shape(self.input_shape, batch)
        out_shape = resolve_shape(self.output_shape, batch)
        if out_shape[1] == DYNAMIC_DIM:
            out_shape = (out_shape[0], self.output_width)

        with ChunkTensors(flat_input, in_shape, out_shape) as tensors:
            out = tensors.run(self.engine)
            results = [
                assemble_predictions(
                    out[self.output_width * i:self.output_width * (i + 1)],
                    self.catalog,
                    general_threshold,
                    character_threshold,
                    general_mcut_enabled,
                    character_mcut_enabled,
                )
                for i in range(len(chunk))
            ]

        self.metrics.log_chunk_complete(len(chunk), time.time() - start_time)
        return results

    def destroy(self) -> None:
        """Release the inference engine. The session cannot be used afterwards."""
        if self.engine is None:
            raise ResourceError("destroy: session has already been destroyed")
        engine, self.engine = self.engine, None
        try:
            engine.close()
        except Exception as e:
            raise ResourceError(f"destroy: failed to release inference engine: {e}") from e
        self.logger.debug("Tagger session destroyed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self.closed:
            self.destroy()


def construct_session(
    model_path: str,
    tags_path: str,
    engine: Optional[InferenceEngine] = None,
    providers: Optional[List[str]] = None,
) -> TaggerSession:
    """
    Create a session from a model file and its tag metadata CSV.

    An already-built engine can be passed in place of loading model_path.
    """
    if engine is None:
        if not os.path.isfile(model_path):
            raise ConfigError(f"Model file not found: {model_path}")
        try:
            engine = OnnxInferenceEngine(model_path, providers=providers or settings.providers)
        except Exception as e:
            raise ConfigError(f"Failed to load model {model_path}: {e}") from e

    try:
        catalog = load_tag_catalog(tags_path)
        return TaggerSession(engine, catalog)
    except ConfigError:
        engine.close()
        raise
