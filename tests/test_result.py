"""Tests for OptimizationResult accessors, summary and comparison."""

from __future__ import annotations

import math

import numpy as np
import pytest

from itersolve.core.iteration_state import IterationState
from itersolve.core.problem import Problem, ProblemWrapper
from itersolve.core.result import OptimizationResult
from itersolve.core.termination import TerminationReason


def _result(cost, solver_name="solver"):
    state = IterationState().set_param(np.array([1.0, 2.0])).set_cost(cost)
    state.update()
    return OptimizationResult(ProblemWrapper(Problem(name="toy")), state, solver_name)


def test_epsilon_equality():
    assert _result(1.0) == _result(1.0 + 1e-16)
    assert _result(1.0) != _result(1.0 + 1e-10)


def test_ordering():
    low, high = _result(1.0), _result(1.1)

    assert low != high
    assert low < high
    assert high > low
    assert low <= _result(1.0)
    assert sorted([high, low]) == [low, high]


def test_infinite_costs():
    assert _result(math.inf) == _result(math.inf)
    assert _result(-math.inf) != _result(math.inf)
    assert _result(-math.inf) < _result(math.inf)
    assert _result(1.0) < _result(math.inf)


def test_mixed_float_types():
    assert _result(np.float32(1.0)) == _result(1.0)
    assert _result(np.float32(1.0)) != _result(1.0 + 1e-9)


def test_results_are_unhashable():
    with pytest.raises(TypeError):
        hash(_result(1.0))


def test_accessors():
    state = IterationState().set_param(np.array([3.0])).set_cost(2.0)
    state.update()
    state.increment_iter()
    state.set_termination_reason(TerminationReason.SOLVER_CONVERGED, "done")
    state.eval_counts["cost_count"] = 4
    result = OptimizationResult(ProblemWrapper(Problem()), state, "s")

    assert np.array_equal(result.best_param, [3.0])
    assert result.best_cost == 2.0
    assert result.iterations == 1
    assert result.last_best_iter == 0
    assert result.termination_reason is TerminationReason.SOLVER_CONVERGED
    assert result.termination_message == "done"
    assert result.eval_counts == {"cost_count": 4}
    assert result.elapsed == 0.0


def test_summary_text():
    state = IterationState().set_param(np.array([1.0, 2.0])).set_cost(0.25)
    state.update()
    state.set_termination_reason(TerminationReason.MAX_ITERS_REACHED)
    state.eval_counts.update({"cost_count": 2, "gradient_count": 1})
    result = OptimizationResult(ProblemWrapper(Problem(name="toy")), state, "Newton method")

    text = str(result)

    assert text.startswith("OptimizationResult:")
    assert "Newton method" in text
    assert "toy" in text
    assert "0.25" in text
    assert "Maximum number of iterations reached" in text
    assert "cost_count=2, gradient_count=1" in text
    assert "param (current)" not in text


def test_summary_shows_current_param_without_cost():
    """With no cost reported the best param is the start, so the last one is shown too."""
    state = IterationState().set_param(np.zeros(2))
    state.update()
    state.set_param(np.array([4.0, 4.0]))
    state.increment_iter()
    state.update()
    result = OptimizationResult(ProblemWrapper(Problem()), state, "Newton method")

    text = result.summary()

    assert "param (best):     [0. 0.]" in text
    assert "param (current):  [4. 4.]" in text


def test_nan_costs_sort_last():
    nan, one, half = _result(math.nan), _result(1.0), _result(0.5)

    assert one < nan
    assert not nan < one
    assert nan > one
    assert not one > nan
    assert nan == _result(math.nan)
    assert [r.cost for r in sorted([nan, one, half])][:2] == [0.5, 1.0]
    assert math.isnan(sorted([nan, one, half])[-1].cost)


def test_state_accessor_returns_a_copy():
    result = _result(0.25)

    result.state.set_termination_reason(TerminationReason.SOLVER_EXIT, "changed")
    result.state.eval_counts["cost_count"] = 99

    assert result.termination_reason is TerminationReason.NOT_TERMINATED
    assert result.eval_counts == {}
    assert result.state.cost == 0.25
