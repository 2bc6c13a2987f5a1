"""
Tag catalog: maps model output indexes to tag names and categories.
"""

import os
from typing import FrozenSet, List, Sequence, Tuple
import numpy as np
import pandas as pd

from .errors import ConfigError
from .logging import get_logger
from .models import Category

logger = get_logger("catalog")

# Emoticon tags whose underscores are part of the name
KAOMOJIS: FrozenSet[str] = frozenset({
    "0_0",
    "(o)_(o)",
    "+_+",
    "+_-",
    "._.",
    "<o>_<o>",
    "<|>_<|>",
    "=_=",
    ">_<",
    "3_3",
    "6_9",
    ">_o",
    "@_@",
    "^_^",
    "o_o",
    "u_u",
    "x_x",
    "|_|",
    "||_||",
})

REQUIRED_COLUMNS = ("name", "category")


def normalize_tag_name(name: str) -> str:
    """Replace underscores with spaces, leaving kaomojis untouched."""
    if name in KAOMOJIS:
        return name
    return name.replace("_", " ")


class TagCatalog:
    """Read-only tag names and per-index categories for one model."""

    def __init__(self, names: Sequence[str], categories: Sequence[Category]):
        if len(names) != len(categories):
            raise ValueError(
                f"names and categories must have the same length ({len(names)} != {len(categories)})"
            )
        self._names: Tuple[str, ...] = tuple(names)
        self._categories = np.array([int(c) for c in categories], dtype=np.int8)
        self._categories.setflags(write=False)
        self._indexes = {
            category: self._freeze(np.flatnonzero(self._categories == category))
            for category in (Category.RATING, Category.GENERAL, Category.CHARACTER)
        }

    @staticmethod
    def _freeze(indexes: np.ndarray) -> np.ndarray:
        indexes.setflags(write=False)
        return indexes

    @classmethod
    def from_records(cls, records: Sequence[Tuple[str, str]]) -> "TagCatalog":
        """Build a catalog from (raw tag name, category code) pairs."""
        names = [normalize_tag_name(str(name)) for name, _ in records]
        categories = [Category.from_code(code) for _, code in records]
        return cls(names, categories)

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def categories(self) -> np.ndarray:
        """Category per output index, as int8 Category values."""
        return self._categories

    @property
    def rating_indexes(self) -> np.ndarray:
        return self._indexes[Category.RATING]

    @property
    def general_indexes(self) -> np.ndarray:
        return self._indexes[Category.GENERAL]

    @property
    def character_indexes(self) -> np.ndarray:
        return self._indexes[Category.CHARACTER]

    def category_of(self, index: int) -> Category:
        return Category(int(self._categories[index]))

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return (
            f"TagCatalog(tags={len(self)}, rating={len(self.rating_indexes)}, "
            f"general={len(self.general_indexes)}, character={len(self.character_indexes)})"
        )


def load_tag_catalog(tags_path: str) -> TagCatalog:
    """Load a catalog from a tag metadata CSV with `name` and `category` columns."""
    if not os.path.isfile(tags_path):
        raise ConfigError(f"Tag metadata file not found: {tags_path}")

    try:
        df = pd.read_csv(tags_path, dtype=str, keep_default_na=False)
    except (OSError, ValueError) as e:
        raise ConfigError(f"Failed to read tag metadata {tags_path}: {e}") from e

    missing: List[str] = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ConfigError(f"Tag metadata {tags_path} is missing columns: {missing}")

    catalog = TagCatalog.from_records(list(zip(df["name"], df["category"])))
    logger.info(
        f"🏷️  Loaded {len(catalog.general_indexes)} general, "
        f"{len(catalog.character_indexes)} character, "
        f"{len(catalog.rating_indexes)} rating tags from {tags_path}"
    )
    return catalog
