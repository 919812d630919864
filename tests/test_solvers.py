"""Tests for the bundled solvers driven through the Executor."""

from __future__ import annotations

import numpy as np
import pytest

from itersolve.core.engine import Executor
from itersolve.core.errors import InvalidParameterError, OptimizationError
from itersolve.core.functions import make_problem, rosenbrock, sphere_gradient, sphere_hessian
from itersolve.core.gauss_newton import GaussNewton
from itersolve.core.iteration_state import IterationState
from itersolve.core.nelder_mead import NelderMead
from itersolve.core.newton import Newton
from itersolve.core.problem import Problem, ProblemWrapper
from itersolve.core.solver_base import IterationDelta, Solver
from itersolve.core.steepest_descent import SteepestDescent
from itersolve.core.termination import TerminationReason


def _run(problem, solver, **config):
    return Executor(problem, solver).configure(**config).run()


# ---------------------------------------------------------------------------
# Option validation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "factory,options",
    [
        (Newton, {"gamma": 0.0}),
        (Newton, {"gamma": 1.5}),
        (GaussNewton, {"gamma": -0.1}),
        (GaussNewton, {"tol": 0.0}),
        (SteepestDescent, {"line_search": "wolfe"}),
        (SteepestDescent, {"tau": 2.0}),
        (NelderMead, {"gamma": 0.5}),
        (NelderMead, {"sigma": 1.0}),
    ],
)
def test_invalid_options_rejected_at_construction(factory, options):
    with pytest.raises(InvalidParameterError):
        factory(options=options)


def test_solver_name_defaults_and_override():
    assert Newton().name == "Newton method"
    assert Newton(name="custom").name == "custom"


def test_step_checks_return_type():
    class Broken(Solver):
        def next_iteration(self, problem, state):
            return {"param": 1.0}

    with pytest.raises(TypeError):
        Broken().step(ProblemWrapper(Problem()), IterationState())


def test_delta_merge_leaves_missing_fields():
    state = IterationState().set_grad(np.ones(2)).set_cost(3.0)
    IterationDelta(param=np.zeros(2)).apply_to(state)

    assert np.array_equal(state.grad, np.ones(2))
    assert state.prev_grad is None
    assert state.cost == 3.0
    assert state.prev_cost == np.inf


@pytest.mark.parametrize("solver_cls", [SteepestDescent, Newton, GaussNewton, NelderMead])
def test_missing_initial_param(solver_cls):
    with pytest.raises(InvalidParameterError):
        Executor(make_problem("exponential_decay"), solver_cls()).run()


# ---------------------------------------------------------------------------
# Steepest descent
# ---------------------------------------------------------------------------

def test_steepest_descent_on_sphere():
    result = _run(make_problem("sphere"), SteepestDescent(), initial_param=np.zeros(2), max_iters=20)

    assert result.termination_reason is TerminationReason.SOLVER_CONVERGED
    assert result.termination_message == "gradient norm below tolerance"
    assert np.allclose(result.best_param, [4.0, 4.0])
    assert result.best_cost == pytest.approx(0.0)
    assert result.iterations == 2
    assert result.last_best_iter == 1


def test_steepest_descent_golden_section():
    solver = SteepestDescent(options={"line_search": "golden_section", "line_search_max_step": 1.0})
    result = _run(make_problem("sphere"), solver, initial_param=np.zeros(2), max_iters=5)

    assert result.best_cost < 1e-8
    assert np.allclose(result.best_param, [4.0, 4.0], atol=1e-3)


def test_steepest_descent_decreases_rosenbrock():
    x0 = np.array([-1.2, 1.0])
    result = _run(make_problem("rosenbrock"), SteepestDescent(), initial_param=x0, max_iters=50)

    assert result.termination_reason is TerminationReason.MAX_ITERS_REACHED
    assert result.best_cost < rosenbrock(x0)
    assert result.eval_counts["gradient_count"] == 50


def test_steepest_descent_line_search_failure():
    solver = SteepestDescent(options={"max_backtracking": 1})
    result = _run(make_problem("sphere"), solver, initial_param=np.zeros(2), max_iters=10)

    assert result.termination_reason is TerminationReason.SOLVER_EXIT
    assert result.termination_message == "line search failed to find a valid step"
    assert result.iterations == 1
    assert np.array_equal(result.state.param, np.zeros(2))


# ---------------------------------------------------------------------------
# Newton
# ---------------------------------------------------------------------------

def test_newton_one_step_on_quadratic():
    result = _run(make_problem("sphere"), Newton(), initial_param=np.zeros(2), max_iters=10)

    assert result.termination_reason is TerminationReason.SOLVER_CONVERGED
    assert np.allclose(result.best_param, [4.0, 4.0])
    assert result.last_best_iter == 1
    assert result.iterations == 2
    assert result.eval_counts["hessian_count"] == 1


def test_newton_damped_step():
    result = _run(make_problem("sphere"), Newton(options={"gamma": 0.5}), initial_param=np.zeros(2), max_iters=1)

    assert np.allclose(result.state.param, [2.0, 2.0])
    assert result.termination_reason is TerminationReason.MAX_ITERS_REACHED


def test_newton_without_cost_keeps_infinite_cost():
    problem = Problem(gradient=sphere_gradient, hessian=sphere_hessian, name="no cost")
    result = _run(problem, Newton(), initial_param=np.zeros(2), max_iters=1)

    assert result.cost == np.inf
    assert result.best_cost == np.inf
    assert np.allclose(result.state.param, [4.0, 4.0])
    assert np.array_equal(result.best_param, np.zeros(2))
    assert result.state.hessian is not None
    assert "cost_count" not in result.eval_counts


def test_newton_regularizes_singular_hessian():
    p, lam, fallback = Newton._compute_newton_direction(
        np.array([1.0, 1.0]), np.zeros((2, 2)), 1e-6, 1e6
    )

    assert lam == pytest.approx(1e-6)
    assert not fallback
    assert np.allclose(p, [-1e6, -1e6])


# ---------------------------------------------------------------------------
# Gauss-Newton
# ---------------------------------------------------------------------------

def test_gauss_newton_fits_exponential_decay():
    result = _run(
        make_problem("exponential_decay"),
        GaussNewton(),
        initial_param=np.array([1.8, -0.6]),
        max_iters=50,
    )

    assert result.termination_reason is TerminationReason.SOLVER_CONVERGED
    assert np.allclose(result.best_param, [2.0, -0.7], atol=1e-5)
    assert result.best_cost < 1e-10
    assert result.state.jacobian.shape == (7, 2)
    assert "operator_count" in result.eval_counts
    assert result.eval_counts["jacobian_count"] == result.iterations


def test_gauss_newton_singular_system():
    problem = Problem(
        operator=lambda x: np.array([x[0] + x[1] - 1.0, 2.0 * (x[0] + x[1]) - 2.0]),
        jacobian=lambda x: np.array([[1.0, 1.0], [2.0, 2.0]]),
        name="rank deficient",
    )

    with pytest.raises(OptimizationError):
        _run(problem, GaussNewton(), initial_param=np.zeros(2), max_iters=5)


# ---------------------------------------------------------------------------
# Nelder-Mead
# ---------------------------------------------------------------------------

def test_nelder_mead_converges_on_sphere():
    result = _run(make_problem("sphere"), NelderMead(), initial_param=np.zeros(2), max_iters=2000)

    assert result.termination_reason is TerminationReason.SOLVER_CONVERGED
    assert np.allclose(result.best_param, [4.0, 4.0], atol=1e-4)
    assert len(result.state.population) == 3
    costs = [cost for _, cost in result.state.population]
    assert costs == sorted(costs)
    assert "gradient_count" not in result.eval_counts


def test_nelder_mead_initial_simplex():
    solver = NelderMead(options={"initial_simplex_scale": 0.1})
    wrapper = ProblemWrapper(make_problem("sphere"))
    state = IterationState().set_param(np.array([1.0, 0.0]))

    delta = solver.initialize(wrapper, state)

    vertices = sorted(tuple(v) for v, _ in delta.population)
    assert vertices == sorted([(1.0, 0.0), (1.1, 0.0), (1.0, 0.1)])
    assert delta.cost == min(c for _, c in delta.population)
    assert wrapper.operation_counts() == {"cost_count": 3}


def test_nelder_mead_requires_population():
    with pytest.raises(OptimizationError):
        NelderMead().next_iteration(ProblemWrapper(make_problem("sphere")), IterationState())


def test_nelder_mead_accepts_scalar_start():
    problem = Problem(cost=lambda x: float((x[0] - 2.0) ** 2), name="parabola")
    wrapper = ProblemWrapper(problem)

    delta = NelderMead().initialize(wrapper, IterationState().set_param(np.float64(0.0)))

    assert sorted(float(v[0]) for v, _ in delta.population) == [0.0, 0.05]

    result = _run(problem, NelderMead(), initial_param=0.0, max_iters=500)

    assert np.allclose(result.best_param, [2.0], atol=1e-3)
