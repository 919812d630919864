"""Tests for Problem / ProblemWrapper evaluation and counting."""

from __future__ import annotations

import numpy as np
import pytest

from itersolve.core.errors import EvaluationError, OptimizationError
from itersolve.core.functions import (
    TEST_PROBLEMS,
    exponential_decay_jacobian,
    exponential_decay_residuals,
    make_problem,
    rosenbrock_gradient,
    rosenbrock_hessian,
    sphere,
)
from itersolve.core.problem import Problem, ProblemWrapper


def test_counts_appear_only_after_use():
    wrapper = ProblemWrapper(make_problem("sphere"))
    assert wrapper.operation_counts() == {}

    wrapper.evaluate_cost(np.zeros(2))
    wrapper.evaluate_cost(np.ones(2))
    wrapper.evaluate_gradient(np.ones(2))

    assert wrapper.operation_counts() == {"cost_count": 2, "gradient_count": 1}


def test_operation_counts_is_a_copy():
    wrapper = ProblemWrapper(make_problem("sphere"))
    wrapper.evaluate_cost(np.zeros(2))

    counts = wrapper.operation_counts()
    counts["cost_count"] = 99

    assert wrapper.operation_counts() == {"cost_count": 1}


def test_wrappers_do_not_share_counters():
    problem = make_problem("sphere")
    first = ProblemWrapper(problem)
    second = ProblemWrapper(problem)

    first.evaluate_cost(np.zeros(2))

    assert second.operation_counts() == {}


def test_numerical_gradient_fallback():
    """Without an analytic gradient the cost is differentiated numerically."""
    wrapper = ProblemWrapper(Problem(cost=sphere))
    grad = wrapper.evaluate_gradient(np.array([1.0, 2.0]))

    assert np.allclose(grad, [-6.0, -4.0], atol=1e-5)
    assert wrapper.operation_counts() == {"gradient_count": 1}


def test_numerical_hessian_fallback_matches_analytic():
    problem = make_problem("rosenbrock")
    wrapper = ProblemWrapper(Problem(cost=problem.cost))
    x = np.array([-1.2, 1.0])

    assert np.allclose(wrapper.evaluate_hessian(x), rosenbrock_hessian(x), rtol=1e-3, atol=1e-2)


def test_numerical_jacobian_fallback_matches_analytic():
    wrapper = ProblemWrapper(Problem(operator=exponential_decay_residuals))
    x = np.array([1.5, -0.5])

    assert np.allclose(wrapper.evaluate_jacobian(x), exponential_decay_jacobian(x), atol=1e-6)
    assert wrapper.operation_counts() == {"jacobian_count": 1}


def test_analytic_gradient_is_used():
    wrapper = ProblemWrapper(make_problem("rosenbrock"))
    x = np.array([0.5, 0.5])

    assert np.array_equal(wrapper.evaluate_gradient(x), rosenbrock_gradient(x))


def test_user_exception_becomes_evaluation_error():
    def broken(x):
        raise ZeroDivisionError("boom")

    wrapper = ProblemWrapper(Problem(cost=broken))

    with pytest.raises(EvaluationError, match="cost: ZeroDivisionError: boom") as info:
        wrapper.evaluate_cost(np.zeros(2))

    assert isinstance(info.value, OptimizationError)
    assert isinstance(info.value.__cause__, ZeroDivisionError)
    assert info.value.operation == "cost"
    assert wrapper.operation_counts() == {"cost_count": 1}


@pytest.mark.parametrize(
    "method,args",
    [
        ("evaluate_cost", ()),
        ("evaluate_gradient", ()),
        ("evaluate_hessian", ()),
        ("evaluate_jacobian", ()),
        ("evaluate_operator", ()),
        ("evaluate_modify", (0.1,)),
    ],
)
def test_missing_function_raises(method, args):
    wrapper = ProblemWrapper(Problem())

    with pytest.raises(EvaluationError):
        getattr(wrapper, method)(np.zeros(2), *args)


def test_modify_is_counted():
    wrapper = ProblemWrapper(Problem(modify=lambda x, extent: x + extent))

    assert np.allclose(wrapper.evaluate_modify(np.zeros(2), 0.5), [0.5, 0.5])
    assert wrapper.operation_counts() == {"modify_count": 1}


def test_provides_and_name():
    wrapper = ProblemWrapper(make_problem("exponential_decay"))

    assert wrapper.provides("operator")
    assert not wrapper.provides("hessian")
    assert wrapper.name == "Exponential decay fit"
    assert ProblemWrapper(Problem()).name == "problem"


def test_make_problem_unknown_key():
    with pytest.raises(KeyError):
        make_problem("does-not-exist")


def test_registry_problems_have_names():
    for key in TEST_PROBLEMS:
        assert make_problem(key).name
