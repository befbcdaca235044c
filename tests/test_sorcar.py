"""
Tests for the Sorcar variants (all, first, greedy, minimal).

The shared properties run against every variant; the variant-specific
tests pin down which predicates each selection policy picks.
"""

import copy
import itertools

import pytest

from sorcar.errors import InfeasibleError, InvalidArgumentError
from sorcar.learning import (
    Datapoint,
    HornConstraint,
    horndini,
    is_consistent,
    reduce_predicates_all,
    reduce_predicates_first,
    reduce_predicates_greedy,
    reduce_predicates_minimal,
    total_size,
)

VARIANTS = [
    reduce_predicates_all,
    reduce_predicates_first,
    reduce_predicates_greedy,
    reduce_predicates_minimal,
]


def _hidden_invariant_corpus():
    """
    Two locations with four predicates each, labelled by the invariant
    {0, 1} at location 0 and {5} at location 1. Every third datapoint is
    left unclassified and feeds the Horn constraints; so are half of the
    remaining ones the invariant admits, to keep X larger than it.
    """
    invariant = [{0, 1}, {5}]
    intervals = [(0, 3), (4, 7)]
    datapoints = []
    unclassified = {0: [], 1: []}

    k = 0
    for location, (lo, hi) in enumerate(intervals):
        for bits in itertools.product((1, 0), repeat=hi - lo + 1):
            values = [1] * 8
            values[lo:hi + 1] = bits
            holds = all(values[p] for p in invariant[location])
            if k % 3 == 0:
                datapoints.append(Datapoint.unclassified(location, values))
                unclassified[location].append((len(datapoints) - 1, holds))
            elif holds and k % 2 == 1:
                datapoints.append(Datapoint.unclassified(location, values))
            elif holds:
                datapoints.append(Datapoint.positive(location, values))
            else:
                datapoints.append(Datapoint.negative(location, values))
            k += 1

    constraints = []
    for (a, a_holds), (b, b_holds) in itertools.product(unclassified[0][:4], unclassified[1][:4]):
        if not a_holds or b_holds:
            constraints.append(HornConstraint((a,), b))
    for a, a_holds in unclassified[0]:
        if not a_holds:
            constraints.append(HornConstraint((a,), None))
            break

    return datapoints, constraints, intervals


@pytest.mark.parametrize("reduce", VARIANTS)
def test_result_is_consistent_subset_of_x(reduce):
    datapoints, constraints, intervals = _hidden_invariant_corpus()
    X = horndini(datapoints, constraints, intervals)
    R = [set() for _ in X]

    reduce(datapoints, constraints, X, R)

    assert is_consistent(R, datapoints, constraints)
    for r, x in zip(R, X):
        assert r <= x


@pytest.mark.parametrize("reduce", VARIANTS)
def test_previous_r_is_kept_where_it_lies_in_x(reduce):
    datapoints, constraints, intervals = _hidden_invariant_corpus()
    X = horndini(datapoints, constraints, intervals)
    R_prev = [{0, 2, 3}, {4, 6, 7}]
    kept = [r & x for r, x in zip(R_prev, X)]
    R = copy.deepcopy(R_prev)

    reduce(datapoints, constraints, X, R)

    assert is_consistent(R, datapoints, constraints)
    for r, k, x in zip(R, kept, X):
        assert k <= r <= x


@pytest.mark.parametrize("reduce", VARIANTS)
def test_scenario_a_negative_adds_its_only_candidate(reduce):
    datapoints = [
        Datapoint.positive(0, (1, 1, 1)),
        Datapoint.negative(0, (0, 1, 1)),
    ]
    X = horndini(datapoints, [], [(0, 2)])
    R = [set()]
    reduce(datapoints, [], X, R)
    assert R == [{0}]


@pytest.mark.parametrize("reduce", VARIANTS)
def test_scenario_b_horn_repair_rejects_premise(reduce):
    # Location 0 owns predicates 0..2, location 1 owns 3..5
    datapoints = [
        Datapoint.unclassified(0, (0, 1, 1, 1, 1, 1)),
        Datapoint.unclassified(1, (1, 1, 1, 1, 1, 0)),
        Datapoint.negative(1, (1, 1, 1, 1, 1, 0)),
    ]
    constraints = [HornConstraint((0,), 1)]
    X = horndini(datapoints, constraints, [(0, 2), (3, 5)])
    assert X == [{0, 1, 2}, {3, 4, 5}]

    R = [set(), set()]
    reduce(datapoints, constraints, X, R)
    assert R == [{0}, {5}]


@pytest.mark.parametrize("reduce", VARIANTS)
def test_unrepairable_constraint_is_infeasible(reduce):
    # The premise satisfies all of X, so no predicate can reject it
    datapoints = [
        Datapoint.unclassified(0, (1, 1, 1, 1, 1, 1)),
        Datapoint.unclassified(1, (1, 1, 1, 1, 1, 0)),
    ]
    constraints = [HornConstraint((0,), 1)]
    X = [{0, 1, 2}, {3, 4, 5}]
    R = [set(), {5}]
    with pytest.raises(InfeasibleError):
        reduce(datapoints, constraints, X, R)


@pytest.mark.parametrize("reduce", VARIANTS)
def test_bad_sizes_rejected_without_touching_r(reduce):
    datapoints = [Datapoint.negative(0, (0, 1))]

    R = [{0, 1}]
    with pytest.raises(InvalidArgumentError):
        reduce(datapoints, [], [], R)
    assert R == [{0, 1}]

    R = [{0, 1}, set()]
    with pytest.raises(InvalidArgumentError):
        reduce(datapoints, [], [{0}], R)
    assert R == [{0, 1}, set()]


@pytest.mark.parametrize("reduce", VARIANTS)
def test_consistent_r_is_left_alone(reduce):
    datapoints = [
        Datapoint.positive(0, (1, 1, 1)),
        Datapoint.negative(0, (0, 1, 1)),
    ]
    R = [{0}]
    reduce(datapoints, [], [{0, 1, 2}], R)
    assert R == [{0}]


def _two_negatives():
    datapoints = [
        Datapoint.positive(0, (1, 1, 1)),
        Datapoint.negative(0, (0, 0, 1)),
        Datapoint.negative(0, (1, 0, 0)),
    ]
    return datapoints, [{0, 1, 2}]


@pytest.mark.parametrize("reduce, expected", [
    (reduce_predicates_all, {0, 1}),
    (reduce_predicates_first, {0, 1}),
    (reduce_predicates_greedy, {1}),
    (reduce_predicates_minimal, {1}),
])
def test_selection_policy_for_negatives(reduce, expected):
    datapoints, X = _two_negatives()
    R = [set()]
    reduce(datapoints, [], X, R)
    assert R == [expected]


def test_first_picks_lowest_index():
    datapoints = [Datapoint.negative(0, (1, 0, 0, 1))]
    R = [set()]
    reduce_predicates_first(datapoints, [], [{0, 1, 2, 3}], R)
    assert R == [{1}]


def test_greedy_breaks_ties_by_lowest_candidate():
    datapoints = [Datapoint.negative(0, (0, 0, 1))]
    R = [set()]
    reduce_predicates_greedy(datapoints, [], [{0, 1, 2}], R)
    assert R == [{0}]


def _guarded_corpus():
    datapoints = [
        Datapoint.positive(0, (1, 1, 1)),
        Datapoint.unclassified(0, (1, 1, 0)),  # premise
        Datapoint.unclassified(0, (1, 0, 1)),  # conclusion
        Datapoint.negative(0, (1, 0, 0)),
    ]
    constraints = [HornConstraint((1,), 2)]
    return datapoints, constraints


@pytest.mark.parametrize("reduce, expected", [
    (reduce_predicates_all, {1, 2}),
    (reduce_predicates_first, {1, 2}),
    (reduce_predicates_greedy, {1, 2}),
    (reduce_predicates_minimal, {2}),
])
def test_repair_of_broken_conclusion(reduce, expected):
    datapoints, constraints = _guarded_corpus()
    X = horndini(datapoints, constraints, [(0, 2)])
    assert X == [{0, 1, 2}]

    R = [set()]
    reduce(datapoints, constraints, X, R)
    assert R == [expected]
    assert is_consistent(R, datapoints, constraints)


def test_minimal_is_never_larger_than_other_variants():
    datapoints, constraints, intervals = _hidden_invariant_corpus()
    X = horndini(datapoints, constraints, intervals)

    for R_prev in ([set(), set()], [{2}, {7}]):
        R_min = copy.deepcopy(R_prev)
        reduce_predicates_minimal(datapoints, constraints, X, R_min)
        for reduce in VARIANTS[:3]:
            R = copy.deepcopy(R_prev)
            reduce(datapoints, constraints, X, R)
            assert total_size(R_min) <= total_size(R)


@pytest.mark.parametrize("reduce", VARIANTS)
def test_satisfied_constraint_is_rechecked_after_later_repair(reduce):
    # a → b holds under the empty R until rejecting c drops predicate 1,
    # which b falsifies while a still satisfies it
    datapoints = [
        Datapoint.unclassified(0, (0, 1, 1)),  # a
        Datapoint.unclassified(0, (1, 0, 1)),  # b
        Datapoint.unclassified(0, (1, 0, 1)),  # c
    ]
    constraints = [HornConstraint((0,), 1), HornConstraint((2,), None)]
    X = horndini(datapoints, constraints, [(0, 2)])
    assert X == [{0, 1, 2}]

    R = [set()]
    reduce(datapoints, constraints, X, R)
    assert R == [{0, 1}]
    assert is_consistent(R, datapoints, constraints)
