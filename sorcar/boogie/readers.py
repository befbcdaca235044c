"""
Readers for the files a verifier hands to one learning round.

For a file stem ``S`` the verifier writes:

    S.attributes   int,<name>            one boolean predicate
                   cat,<name>,<n>        the location selector, n locations
    S.data         <loc>,<v_0>,...,<v_m>,<label>   label: 1 / 0 / ?
    S.horn         <p_1>,...,<p_k>,<c>   datapoint line numbers, c = -1: none
    S.intervals    <lo>,<hi>             predicate range of each location
    S.status       <round>

Line numbers in ``S.horn`` are 0-based indices into ``S.data`` (blank lines
do not count). Every reader raises InputFormatError naming the offending file
and line.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

from ..errors import InputFormatError
from ..learning.datapoint import Datapoint, HornConstraint

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

POSITIVE_LABELS = {"1", "true"}
NEGATIVE_LABELS = {"0", "false"}
UNKNOWN_LABELS = {"?"}


@dataclass
class AttributesMetadata:
    """Names of the predicates and of the categorical location attribute."""
    int_names: List[str] = field(default_factory=list)
    categorical_names: List[str] = field(default_factory=list)
    categorical_sizes: List[int] = field(default_factory=list)

    @property
    def location_attribute(self) -> str:
        return self.categorical_names[0] if self.categorical_names else "$func"

    def attribute_count(self) -> int:
        return len(self.int_names) + len(self.categorical_names)


@dataclass
class RoundInput:
    """Everything read for one round."""
    metadata: AttributesMetadata
    datapoints: List[Datapoint]
    horn_constraints: List[HornConstraint]
    intervals: List[Tuple[int, int]]
    round: int


def _lines(path: PathLike) -> Iterator[Tuple[int, str]]:
    """Non-blank, stripped lines with their 1-based line numbers."""
    try:
        with open(path) as f:
            content = f.read()
    except OSError as e:
        raise InputFormatError(f"Error opening {path}: {e}") from e
    for lineno, raw in enumerate(content.splitlines(), start=1):
        line = raw.strip()
        if line:
            yield lineno, line


def _int(token: str, path: PathLike, lineno: int) -> int:
    try:
        return int(token.strip())
    except ValueError:
        raise InputFormatError(f"{path}:{lineno}: expected an integer, got {token!r}") from None


def read_attributes_file(path: PathLike) -> AttributesMetadata:
    metadata = AttributesMetadata()
    for lineno, line in _lines(path):
        fields = [f.strip() for f in line.split(",")]
        kind = fields[0]
        if kind == "int" and len(fields) == 2:
            metadata.int_names.append(fields[1])
        elif kind == "cat" and len(fields) == 3:
            metadata.categorical_names.append(fields[1])
            metadata.categorical_sizes.append(_int(fields[2], path, lineno))
        else:
            raise InputFormatError(f"{path}:{lineno}: unknown attribute declaration {line!r}")
    return metadata


def read_data_file(path: PathLike, metadata: AttributesMetadata) -> List[Datapoint]:
    width = len(metadata.int_names)
    datapoints: List[Datapoint] = []

    for lineno, line in _lines(path):
        fields = [f.strip() for f in line.split(",")]
        if len(fields) != width + 2:
            raise InputFormatError(
                f"{path}:{lineno}: expected {width + 2} fields, got {len(fields)}"
            )

        location = _int(fields[0], path, lineno)
        values = tuple(_int(v, path, lineno) != 0 for v in fields[1:-1])
        label = fields[-1].lower()

        if label in POSITIVE_LABELS:
            datapoints.append(Datapoint.positive(location, values))
        elif label in NEGATIVE_LABELS:
            datapoints.append(Datapoint.negative(location, values))
        elif label in UNKNOWN_LABELS:
            datapoints.append(Datapoint.unclassified(location, values))
        else:
            raise InputFormatError(f"{path}:{lineno}: unknown classification {fields[-1]!r}")

    return datapoints


def read_horn_file(path: PathLike, datapoints: List[Datapoint]) -> List[HornConstraint]:
    constraints: List[HornConstraint] = []
    n = len(datapoints)

    for lineno, line in _lines(path):
        indices = [_int(f, path, lineno) for f in line.split(",")]
        *premises, last = indices
        conclusion: Optional[int] = None if last == -1 else last

        for i in premises + ([conclusion] if conclusion is not None else []):
            if not 0 <= i < n:
                raise InputFormatError(
                    f"{path}:{lineno}: datapoint index {i} out of range (0..{n - 1})"
                )
        constraints.append(HornConstraint(tuple(premises), conclusion))

    return constraints


def read_intervals_file(path: PathLike) -> List[Tuple[int, int]]:
    intervals: List[Tuple[int, int]] = []
    for lineno, line in _lines(path):
        fields = line.split(",")
        if len(fields) != 2:
            raise InputFormatError(f"{path}:{lineno}: expected 'lo,hi', got {line!r}")
        lo, hi = (_int(f, path, lineno) for f in fields)
        if lo < 0 or lo > hi:
            raise InputFormatError(f"{path}:{lineno}: invalid interval [{lo}, {hi}]")
        intervals.append((lo, hi))
    return intervals


def read_status_file(path: PathLike) -> int:
    for lineno, line in _lines(path):
        round_number = _int(line, path, lineno)
        if round_number < 1:
            raise InputFormatError(f"{path}:{lineno}: round must be positive, got {round_number}")
        return round_number
    raise InputFormatError(f"{path}: no round number")


def read_round(file_stem: PathLike) -> RoundInput:
    """Read ``<stem>.attributes`` ... ``<stem>.status``."""
    stem = str(file_stem)

    metadata = read_attributes_file(stem + ".attributes")
    datapoints = read_data_file(stem + ".data", metadata)
    horn_constraints = read_horn_file(stem + ".horn", datapoints)
    intervals = read_intervals_file(stem + ".intervals")
    round_number = read_status_file(stem + ".status")

    width = len(metadata.int_names)
    for lo, hi in intervals:
        if hi >= width:
            raise InputFormatError(
                f"{stem}.intervals: interval [{lo}, {hi}] exceeds the "
                f"{width} declared predicates"
            )

    logger.info("Round %d: %d datapoints, %d horn constraints, %d locations",
                round_number, len(datapoints), len(horn_constraints), len(intervals))

    return RoundInput(
        metadata=metadata,
        datapoints=datapoints,
        horn_constraints=horn_constraints,
        intervals=intervals,
        round=round_number,
    )
