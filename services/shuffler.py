"""
Shuffle Generator

Randomized projections of folders and of the liked set. Views are re-pairings:
the source values are permuted and each value is matched back to the first
track name holding it, so a folder with duplicate sources collapses those
entries onto one name.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Hashable, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)


def shuffle(values: Sequence[Any], times: int = 1, rng: Optional[random.Random] = None) -> list[Any]:
    """Return a uniformly permuted copy of ``values``.

    Args:
        values: Items to permute.
        times: Number of Fisher-Yates passes.
        rng: Random source, defaults to the module-level generator.

    Returns:
        New list with the same items in random order.
    """
    rng = rng or random
    result = list(values)
    for _ in range(max(1, times)):
        for i in range(len(result) - 1, 0, -1):
            j = rng.randint(0, i)
            result[i], result[j] = result[j], result[i]
    return result


def key_for_value(mapping: Mapping[Hashable, Any], value: Any) -> Optional[Hashable]:
    """Return the first key of ``mapping`` holding ``value``."""
    for key, candidate in mapping.items():
        if candidate == value:
            return key
    return None


def _repair(mapping: Mapping[Hashable, Any], rng: Optional[random.Random]) -> dict:
    shuffled_values = shuffle(list(mapping.values()), rng=rng)
    view = {}
    for value in shuffled_values:
        view[key_for_value(mapping, value)] = value
    if len(view) != len(mapping):
        logger.debug(f"Duplicate values collapsed while shuffling: {len(mapping)} -> {len(view)} entries")
    return view


def shuffle_folder(tracks: Mapping[str, str], rng: Optional[random.Random] = None) -> dict[str, str]:
    """Shuffle one folder's track mapping."""
    return _repair(tracks, rng)


def build_shuffled_view(library: Mapping[str, Mapping[str, str]], rng: Optional[random.Random] = None) -> dict[str, dict[str, str]]:
    """Shuffle every folder of a library, keeping folder order."""
    return {folder: shuffle_folder(tracks, rng) for folder, tracks in library.items()}


def shuffle_liked_set(liked: Mapping[str, tuple[str, str]], rng: Optional[random.Random] = None) -> dict[str, tuple[str, str]]:
    """Shuffle the liked set's source -> (folder, track) entries."""
    return _repair(liked, rng)
