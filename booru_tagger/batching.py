"""
Batch planning against a model's batch-size contract.
"""

from typing import List, Sequence, Tuple, TypeVar

T = TypeVar("T")

# Symbolic dimension marker, resolved at call time
DYNAMIC_DIM = -1


def plan_chunks(images: Sequence[T], batch_size: int) -> List[List[T]]:
    """
    Split images into ordered, non-overlapping chunks.

    A batch size of -1 yields a single chunk with every image. Otherwise each
    chunk holds batch_size images, except possibly the last one.
    """
    if batch_size != DYNAMIC_DIM and batch_size <= 0:
        raise ValueError(f"batch_size must be positive or {DYNAMIC_DIM}, got {batch_size}")

    if not images:
        return []

    if batch_size == DYNAMIC_DIM:
        return [list(images)]

    return [list(images[i:i + batch_size]) for i in range(0, len(images), batch_size)]


def resolve_shape(shape: Sequence[int], batch: int) -> Tuple[int, ...]:
    """Replace a symbolic leading (batch) dimension with the actual chunk size."""
    resolved = list(shape)
    if resolved and resolved[0] == DYNAMIC_DIM:
        resolved[0] = batch
    return tuple(resolved)
