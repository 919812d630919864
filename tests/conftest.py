"""Shared fixtures and toy solvers for the itersolve test-suite."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from itersolve.core.problem import Problem
from itersolve.core.solver_base import IterationDelta, Solver
from itersolve.logging import configure_logging


class CountdownSolver(Solver):
    """Starts at cost 10.0 and lowers the cost by 1.0 on every iteration."""

    default_name = "countdown"

    def initialize(self, problem, state):
        return IterationDelta(param=np.array([0.0]), cost=10.0)

    def next_iteration(self, problem, state):
        return IterationDelta(
            param=np.array([float(state.iter + 1)]),
            cost=state.cost - 1.0,
            meta={"step": state.iter + 1},
        )


@pytest.fixture
def countdown():
    return CountdownSolver()


@pytest.fixture
def empty_problem():
    return Problem(name="empty")


@pytest.fixture(autouse=True)
def _reset_logging():
    """Keep log configuration from leaking between tests."""
    yield
    configure_logging(logging.WARNING)
