"""
Shared fixtures: an in-memory inference engine and small tag catalogs.
"""

import numpy as np
import pytest
from PIL import Image

from booru_tagger.catalog import TagCatalog
from booru_tagger.inference import InferenceEngine


class FakeEngine(InferenceEngine):
    """Engine that scores each image row with score_fn(row) and records calls."""

    def __init__(self, input_shape, output_shape, score_fn=None, error=None, close_error=None):
        self.input_shape = tuple(input_shape)
        self.output_shape = tuple(output_shape)
        self.score_fn = score_fn
        self.error = error
        self.close_error = close_error
        self.calls = []
        self.closed = False

    def run(self, inputs, outputs):
        self.calls.append(inputs.shape)
        if self.error is not None:
            raise self.error
        for i in range(inputs.shape[0]):
            outputs[i, :] = self.score_fn(inputs[i])

    def close(self):
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


@pytest.fixture
def small_catalog():
    """rating, general, character and an ignored tag."""
    return TagCatalog.from_records([
        ("general", "9"),
        ("long_hair", "0"),
        ("hatsune_miku", "4"),
        ("artist_name", "1"),
    ])


@pytest.fixture
def tags_csv(tmp_path):
    path = tmp_path / "selected_tags.csv"
    path.write_text(
        "tag_id,name,category,count\n"
        "9999999,general,9,0\n"
        "9999998,sensitive,9,0\n"
        "470575,1girl,0,4000000\n"
        "16751,long_hair,0,2000000\n"
        "402217,^_^,0,10000\n"
        "15080,hatsune_miku,4,100000\n"
        "1,some_artist,1,5\n",
        encoding="utf-8",
    )
    return path


def solid_image(value, size=(4, 4), mode="RGB"):
    return Image.new(mode, size, (value, value, value))


def gray_score(row):
    """Scores for the 4-tag catalog: the general tag gets the image's mean gray level."""
    return np.array([0.8, row.mean() / 255.0, 0.9, 0.99], dtype=np.float32)
