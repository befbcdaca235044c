"""
One refinement round of the learner.

Reads the round's input files, computes Horndini's X, optionally shrinks it
with a Sorcar variant, and writes the result for the verifier:

    <stem>.json   decision-tree invariant (formula_json)
    <stem>.R      predicate sets carried to the next round (predicate_file)

Round policies:
    reset_r               start every round from an empty R
    horndini_first_round  output plain X in round 1
    alternate             output plain X in odd rounds
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Set, Union

from .boogie.formula_json import format_json_tree
from .boogie.readers import RoundInput, read_round
from .config import SorcarConfig
from .errors import InvalidArgumentError
from .fileio import replace_files
from .learning.conjunction import total_size
from .learning.horndini import horndini
from .learning.minimal import Z3CardinalitySolver, reduce_predicates_minimal
from .learning.predicate_file import format_predicate_sets, read_predicate_sets
from .learning.reduce import reduce_predicates_all, reduce_predicates_first
from .learning.greedy import reduce_predicates_greedy

logger = logging.getLogger(__name__)


@dataclass
class RoundResult:
    """What a round computed and wrote."""
    algorithm: str
    round: int
    conjunctions: List[Set[int]]
    reset_r: bool = False
    ran_sorcar: bool = False
    statistics: Dict[str, Any] = field(default_factory=dict)

    def summary(self) -> str:
        lines = [
            f"Round {self.round}: {self.algorithm}"
            f"{' (Sorcar)' if self.ran_sorcar else ' (Horndini output)'}",
            f"  |X| = {self.statistics.get('x_size', 0)}, "
            f"|result| = {total_size(self.conjunctions)}",
        ]
        if self.algorithm != "horndini":
            lines.append(f"  empty R: {self.reset_r}")
        return "\n".join(lines)


def _sorcar_variant(config: SorcarConfig) -> Callable[..., None]:
    if config.algorithm == "sorcar":
        return reduce_predicates_all
    if config.algorithm == "sorcar-first":
        return reduce_predicates_first
    if config.algorithm == "sorcar-greedy":
        return reduce_predicates_greedy
    if config.algorithm == "sorcar-minimal":
        solver = Z3CardinalitySolver(timeout_ms=config.solver_timeout_ms)

        def minimal(datapoints, horn_constraints, X, R, check_consistency=True):
            reduce_predicates_minimal(datapoints, horn_constraints, X, R,
                                      solver=solver,
                                      check_consistency=check_consistency)
        return minimal
    raise InvalidArgumentError(f"Unknown algorithm '{config.algorithm}'")


def run_sorcar_round(data: RoundInput, config: SorcarConfig,
                     r_path: Union[str, os.PathLike]) -> RoundResult:
    """Compute this round's conjunctions from already-read input."""
    start_time = time.time()

    if data.metadata.attribute_count() == 0:
        raise InvalidArgumentError("No attributes defined")

    X = horndini(data.datapoints, data.horn_constraints, data.intervals,
                 check_consistency=config.check_consistency)
    stats: Dict[str, Any] = {'x_size': total_size(X)}

    if config.algorithm == "horndini":
        stats['time_ms'] = (time.time() - start_time) * 1000
        return RoundResult("horndini", data.round, X, statistics=stats)

    reset = config.reset_r or data.round == 1
    if reset:
        R: List[Set[int]] = [set() for _ in X]
    else:
        R = read_predicate_sets(r_path)
        if len(R) != len(X):
            raise InvalidArgumentError(
                f"{r_path} holds {len(R)} predicate sets, expected {len(X)}"
            )

    skip_sorcar = (config.horndini_first_round and data.round == 1) or \
                  (config.alternate and data.round % 2 == 1)
    if skip_sorcar:
        logger.info("Round %d: writing Horndini result", data.round)
        stats['time_ms'] = (time.time() - start_time) * 1000
        return RoundResult(config.algorithm, data.round, X,
                           reset_r=reset, statistics=stats)

    stats['r_prev_size'] = total_size(R)
    _sorcar_variant(config)(data.datapoints, data.horn_constraints, X, R,
                            check_consistency=config.check_consistency)
    stats['time_ms'] = (time.time() - start_time) * 1000

    return RoundResult(config.algorithm, data.round, R,
                       reset_r=reset, ran_sorcar=True, statistics=stats)


def run_round(file_stem: Union[str, os.PathLike], config: SorcarConfig) -> RoundResult:
    """Read ``<stem>.*``, learn, and write ``<stem>.json`` and ``<stem>.R``."""
    stem = str(file_stem)
    logger.info("alg=%s; alternate=%s; reset-R=%s; first round=%s",
                config.algorithm, config.alternate, config.reset_r,
                config.horndini_first_round)

    data = read_round(stem)
    result = run_sorcar_round(data, config, stem + ".R")

    # .json goes first: if it cannot be replaced, the old .R stays too
    replace_files([
        (stem + ".json", format_json_tree(data.metadata, result.conjunctions)),
        (stem + ".R", format_predicate_sets(result.conjunctions)),
    ])

    logger.info("Round %d finished in %.1f ms", result.round,
                result.statistics.get('time_ms', 0.0))
    return result
