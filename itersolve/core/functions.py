"""
functions.py

Чисельні похідні та набір тестових задач.

Формат:
    - усі функції працюють з вектором x: numpy.ndarray форми (n,);
    - numerical_gradient / numerical_hessian / numerical_jacobian
      використовуються ProblemWrapper-ом, якщо аналітичні похідні не задані;
    - реєстр TEST_PROBLEMS описує тестові задачі, make_problem(key)
      збирає з них Problem для прикладів і тестів.
"""

from __future__ import annotations

from typing import Any, Callable, Dict

import numpy as np

ArrayLike = np.ndarray
ScalarFunction = Callable[[ArrayLike], float]
VectorFunction = Callable[[ArrayLike], ArrayLike]
MatrixFunction = Callable[[ArrayLike], ArrayLike]


# ---------------------------------------------------------------------------
# Чисельні похідні (центральні різниці)
# ---------------------------------------------------------------------------

def numerical_gradient(
    func: ScalarFunction,
    x: ArrayLike,
    h: float = 1e-6,
) -> np.ndarray:
    """
    Чисельний градієнт за центральною різницею.

    ∂f/∂x_i ≈ (f(x + h e_i) - f(x - h e_i)) / (2h)
    """
    x = np.asarray(x, dtype=float)
    grad = np.zeros_like(x, dtype=float)

    for i in range(len(x)):
        x_fwd = x.copy()
        x_bwd = x.copy()
        x_fwd[i] += h
        x_bwd[i] -= h
        grad[i] = (func(x_fwd) - func(x_bwd)) / (2.0 * h)

    return grad


def numerical_hessian(
    func: ScalarFunction,
    x: ArrayLike,
    h: float = 1e-4,
) -> np.ndarray:
    """
    Чисельний Гессіан за центральною різницею.

    Діагональ:
        ∂²f/∂x_i² ≈ (f(x+h e_i) - 2f(x) + f(x-h e_i)) / h²

    Позадіагональні елементи (i != j):
        ∂²f/∂x_i∂x_j ≈
            ( f(x_i+h, x_j+h) - f(x_i+h, x_j-h)
            - f(x_i-h, x_j+h) + f(x_i-h, x_j-h) ) / (4 h²)
    """
    x = np.asarray(x, dtype=float)
    n = len(x)
    H = np.zeros((n, n), dtype=float)

    f_x = func(x)

    for i in range(n):
        x_fwd = x.copy()
        x_bwd = x.copy()
        x_fwd[i] += h
        x_bwd[i] -= h
        H[i, i] = (func(x_fwd) - 2.0 * f_x + func(x_bwd)) / (h ** 2)

    for i in range(n):
        for j in range(i + 1, n):
            x_pp = x.copy()
            x_pm = x.copy()
            x_mp = x.copy()
            x_mm = x.copy()

            x_pp[i] += h; x_pp[j] += h
            x_pm[i] += h; x_pm[j] -= h
            x_mp[i] -= h; x_mp[j] += h
            x_mm[i] -= h; x_mm[j] -= h

            value = (func(x_pp) - func(x_pm) - func(x_mp) + func(x_mm)) / (4.0 * h ** 2)
            H[i, j] = H[j, i] = value

    return H


def numerical_jacobian(
    operator: VectorFunction,
    x: ArrayLike,
    h: float = 1e-6,
) -> np.ndarray:
    """
    Чисельна матриця Якобі вектор-функції r(x) (m × n).

    J[:, i] ≈ (r(x + h e_i) - r(x - h e_i)) / (2h)
    """
    x = np.asarray(x, dtype=float)
    columns = []

    for i in range(len(x)):
        x_fwd = x.copy()
        x_bwd = x.copy()
        x_fwd[i] += h
        x_bwd[i] -= h
        r_fwd = np.asarray(operator(x_fwd), dtype=float)
        r_bwd = np.asarray(operator(x_bwd), dtype=float)
        columns.append((r_fwd - r_bwd) / (2.0 * h))

    return np.column_stack(columns)


# ---------------------------------------------------------------------------
# Тестові задачі
# ---------------------------------------------------------------------------

def rosenbrock(x: ArrayLike) -> float:
    """
    f(x1, x2) = 100 * (x2 - x1^2)^2 + (1 - x1)^2
    (функція Розенброка, мінімум у (1, 1))
    """
    x1, x2 = np.asarray(x, dtype=float)
    return 100.0 * (x2 - x1 ** 2) ** 2 + (1.0 - x1) ** 2


def rosenbrock_gradient(x: ArrayLike) -> np.ndarray:
    x1, x2 = np.asarray(x, dtype=float)
    return np.array(
        [
            -400.0 * x1 * (x2 - x1 ** 2) - 2.0 * (1.0 - x1),
            200.0 * (x2 - x1 ** 2),
        ]
    )


def rosenbrock_hessian(x: ArrayLike) -> np.ndarray:
    x1, x2 = np.asarray(x, dtype=float)
    return np.array(
        [
            [1200.0 * x1 ** 2 - 400.0 * x2 + 2.0, -400.0 * x1],
            [-400.0 * x1, 200.0],
        ]
    )


def sphere(x: ArrayLike) -> float:
    """
    f(x1, x2) = (x1 - 4)^2 + (x2 - 4)^2
    (проста квадратична форма, мінімум у (4, 4))
    """
    x = np.asarray(x, dtype=float)
    return float(np.sum((x - 4.0) ** 2))


def sphere_gradient(x: ArrayLike) -> np.ndarray:
    x = np.asarray(x, dtype=float)
    return 2.0 * (x - 4.0)


def sphere_hessian(x: ArrayLike) -> np.ndarray:
    x = np.asarray(x, dtype=float)
    return 2.0 * np.eye(x.size)


def valley(x: ArrayLike) -> float:
    """
    f(x1, x2) = (x1 - x2)^2 + (x1 + x2 - 10)^2 / 9
    (мінімум у (5, 5))
    """
    x1, x2 = np.asarray(x, dtype=float)
    return (x1 - x2) ** 2 + (x1 + x2 - 10.0) ** 2 / 9.0


# Точки для задачі найменших квадратів y ≈ a * exp(b * t)
_DECAY_T = np.array([0.0, 0.5, 1.0, 1.5, 2.0, 2.5, 3.0])
_DECAY_Y = 2.0 * np.exp(-0.7 * _DECAY_T)


def exponential_decay_residuals(x: ArrayLike) -> np.ndarray:
    """
    Нев'язки r_i(a, b) = a * exp(b * t_i) - y_i.
    Дані згенеровані з a = 2, b = -0.7 без шуму.
    """
    a, b = np.asarray(x, dtype=float)
    return a * np.exp(b * _DECAY_T) - _DECAY_Y


def exponential_decay_jacobian(x: ArrayLike) -> np.ndarray:
    a, b = np.asarray(x, dtype=float)
    e = np.exp(b * _DECAY_T)
    return np.column_stack([e, a * _DECAY_T * e])


def exponential_decay_cost(x: ArrayLike) -> float:
    r = exponential_decay_residuals(x)
    return 0.5 * float(np.dot(r, r))


# ---------------------------------------------------------------------------
# Реєстр задач
# ---------------------------------------------------------------------------

TEST_PROBLEMS: Dict[str, Dict[str, Any]] = {
    "rosenbrock": {
        "cost": rosenbrock,
        "gradient": rosenbrock_gradient,
        "hessian": rosenbrock_hessian,
        "name": "Rosenbrock",
    },
    "sphere": {
        "cost": sphere,
        "gradient": sphere_gradient,
        "hessian": sphere_hessian,
        "name": "Sphere (x - 4)^2",
    },
    "valley": {
        "cost": valley,
        "name": "Valley (x1 - x2)^2 + (x1 + x2 - 10)^2 / 9",
    },
    "exponential_decay": {
        "cost": exponential_decay_cost,
        "operator": exponential_decay_residuals,
        "jacobian": exponential_decay_jacobian,
        "name": "Exponential decay fit",
    },
}


def make_problem(key: str):
    """Створити нову Problem за ключем реєстру TEST_PROBLEMS."""
    # problem.py сам імпортує чисельні похідні з цього модуля
    from .problem import Problem

    try:
        spec = TEST_PROBLEMS[key]
    except KeyError:
        raise KeyError(f"Невідома тестова задача: {key}") from None
    return Problem(**spec)


__all__ = [
    "ArrayLike",
    "ScalarFunction",
    "VectorFunction",
    "MatrixFunction",
    "numerical_gradient",
    "numerical_hessian",
    "numerical_jacobian",
    "rosenbrock",
    "rosenbrock_gradient",
    "rosenbrock_hessian",
    "sphere",
    "sphere_gradient",
    "sphere_hessian",
    "valley",
    "exponential_decay_residuals",
    "exponential_decay_jacobian",
    "exponential_decay_cost",
    "TEST_PROBLEMS",
    "make_problem",
]
