"""
Flat text persistence of per-location predicate sets (the ``.R`` file).

One line per location: ``e`` for the empty set, otherwise the predicate
indices in ascending order separated by spaces.

    0 2 5
    e
    7

The number of locations is the number of non-blank lines; matching it
against the expected location count is up to the caller.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, List, Set, Union

from ..errors import PredicateFileError
from ..fileio import replace_files

logger = logging.getLogger(__name__)

EMPTY = "e"

PathLike = Union[str, os.PathLike]


def format_predicate_sets(sets: Iterable[Set[int]]) -> str:
    lines = []
    for predicates in sets:
        if predicates:
            lines.append(" ".join(str(p) for p in sorted(predicates)))
        else:
            lines.append(EMPTY)
    return "\n".join(lines) + "\n"


def parse_predicate_sets(text: str, source: str = "<string>") -> List[Set[int]]:
    sets: List[Set[int]] = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        if line == EMPTY:
            sets.append(set())
            continue

        predicates: Set[int] = set()
        for token in line.split():
            try:
                p = int(token)
            except ValueError:
                p = -1
            if p < 0:
                raise PredicateFileError(
                    f"{source}:{lineno}: expected a predicate index, got {token!r}"
                )
            predicates.add(p)
        sets.append(predicates)
    return sets


def write_predicate_sets(path: PathLike, sets: Iterable[Set[int]]) -> None:
    """
    Write ``sets`` to ``path``.

    The content goes to a temporary file next to ``path`` that is renamed
    over it, so a failed write leaves no partial file behind.
    """
    replace_files([(path, format_predicate_sets(sets))], error_type=PredicateFileError)


def read_predicate_sets(path: PathLike) -> List[Set[int]]:
    """Read a file produced by ``write_predicate_sets``."""
    path = Path(path)
    try:
        with open(path) as f:
            text = f.read()
    except OSError as e:
        raise PredicateFileError(f"Error opening {path}: {e}") from e
    sets = parse_predicate_sets(text, source=str(path))
    logger.debug("Read %d predicate sets from %s", len(sets), path)
    return sets
