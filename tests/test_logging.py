"""Tests for the package logging helpers."""

from __future__ import annotations

import io
import logging

import numpy as np
import pytest

from itersolve.core.engine import Executor
from itersolve.core.solver_base import Solver
from itersolve.logging import configure_logging, get_logger, set_log_level


def test_logger_names_are_namespaced():
    assert get_logger("engine").name == "itersolve.engine"
    assert get_logger("itersolve.custom").name == "itersolve.custom"
    assert get_logger().name == "itersolve"


def test_logger_is_cached():
    assert get_logger("cached") is get_logger("cached")


def test_default_level_is_warning():
    configure_logging(logging.WARNING)
    assert get_logger("fresh-default").level == logging.WARNING


def test_configure_logging_stream_and_format():
    stream = io.StringIO()
    configure_logging("DEBUG", stream=stream)

    get_logger("unit").debug("hello %s", "world")

    assert stream.getvalue() == "[DEBUG] itersolve.unit: hello world\n"


def test_new_loggers_use_configured_stream():
    stream = io.StringIO()
    configure_logging(logging.INFO, format_string="%(name)s|%(message)s", stream=stream)

    get_logger("created-after-configure").info("ping")

    assert stream.getvalue() == "itersolve.created-after-configure|ping\n"


def test_set_log_level_filters_messages():
    stream = io.StringIO()
    configure_logging(logging.DEBUG, stream=stream)
    set_log_level("ERROR")

    get_logger("quiet").warning("dropped")

    assert stream.getvalue() == ""


def test_executor_logs_run_lifecycle(countdown, empty_problem):
    stream = io.StringIO()
    configure_logging(logging.DEBUG, stream=stream)

    Executor(empty_problem, countdown).configure(max_iters=2).run()

    output = stream.getvalue()
    assert "Run started: solver=countdown, problem=empty" in output
    assert "iter=2 cost=8.0" in output
    assert "Run terminated after 2 iterations: Maximum number of iterations reached" in output


def test_executor_logs_failure(empty_problem):
    stream = io.StringIO()
    configure_logging(logging.INFO, stream=stream)

    class Boom(Solver):
        def next_iteration(self, problem, state):
            raise ArithmeticError("boom")

    executor = Executor(empty_problem, Boom())
    with pytest.raises(ArithmeticError):
        executor.run()

    assert "[ERROR] itersolve.engine: Run failed at iteration 0 (solver=solver): boom" in stream.getvalue()
    assert np.isinf(executor.state.cost)
