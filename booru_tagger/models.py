"""
Data models for the tagging pipeline.
"""

from enum import IntEnum
from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel, Field


DEFAULT_GENERAL_THRESHOLD = 0.35
DEFAULT_CHARACTER_THRESHOLD = 0.85


class Category(IntEnum):
    """Tag category of one output index."""
    NONE = 0
    RATING = 1
    GENERAL = 2
    CHARACTER = 3

    @classmethod
    def from_code(cls, code: str) -> "Category":
        """Map a tag-metadata category code to a category."""
        return _CATEGORY_CODES.get(str(code).strip(), cls.NONE)


_CATEGORY_CODES = {
    "9": Category.RATING,
    "0": Category.GENERAL,
    "4": Category.CHARACTER,
}


class Predictions(BaseModel):
    """Tag predictions for one image."""
    rating: Dict[str, float] = Field(default_factory=dict)
    general: Dict[str, float] = Field(default_factory=dict)
    character: Dict[str, float] = Field(default_factory=dict)

    def names(self) -> List[str]:
        """General tag names sorted by score (descending)."""
        return sorted(self.general, key=lambda name: self.general[name], reverse=True)

    def top_rating(self) -> Optional[Tuple[str, float]]:
        """Highest scoring rating tag, if any."""
        if not self.rating:
            return None
        return max(self.rating.items(), key=lambda item: item[1])
