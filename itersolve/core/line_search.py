"""
line_search.py

Одномірний пошук (line search) вздовж заданого напрямку.

Ідея:
    - Працюємо з допоміжною функцією φ(α) = f(x_k + α p_k), але в цьому
      модулі φ — абстрактна скалярна функція одного аргументу.
    - Методи (SteepestDescent) будують φ(α) самі через
      ProblemWrapper.evaluate_cost(...), щоб лічильники викликів f(x)
      залишалися коректними.

Підтримувані методи:
    1) Armijo backtracking (для градієнтних методів);
    2) метод золотого перерізу на відрізку [a, b].

Публічний інтерфейс:
    - LineSearchResult       – результат 1D-пошуку;
    - armijo_backtracking()  – пошук кроку за умовою Арміхо;
    - golden_section()       – мінімізація φ на відрізку;
    - line_search_1d(...)    – виклик методу за іменем;
    - константи LINE_SEARCH_* – імена методів для options у Solver-ах.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from math import sqrt
from typing import Any, Callable, Dict, Optional

from .errors import InvalidParameterError

# Скалярна функція від одного аргументу α
Scalar1DFunction = Callable[[float], float]

LINE_SEARCH_ARMIJO = "armijo_backtracking"
LINE_SEARCH_GOLDEN_SECTION = "golden_section"

LINE_SEARCH_METHODS = (LINE_SEARCH_ARMIJO, LINE_SEARCH_GOLDEN_SECTION)


# ---------------------------------------------------------------------------
# Результат одномірного пошуку
# ---------------------------------------------------------------------------

@dataclass
class LineSearchResult:
    """
    Результат процедури одномірного пошуку.

    Атрибути:
        alpha       - знайдений крок α*;
        phi_value   - φ(α*);
        accepted    - чи виконано критерій методу (умова Арміхо / точність);
        iterations  - кількість ітерацій 1D-алгоритму;
        func_evals  - кількість викликів φ;
        meta        - службова інформація (кінцевий інтервал, причина зупинки).
    """
    alpha: float
    phi_value: float
    accepted: bool
    iterations: int
    func_evals: int
    meta: Dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Armijo backtracking
# ---------------------------------------------------------------------------

def armijo_backtracking(
    phi: Scalar1DFunction,
    f0: float,
    directional_derivative: float,
    alpha0: float = 1.0,
    tau: float = 0.5,
    c1: float = 1e-4,
    max_backtracking: int = 20,
    min_alpha: float = 1e-12,
) -> LineSearchResult:
    """
    Armijo backtracking для φ(α).

    Припущення:
        - φ(α) = f(x_k + α p_k), напрямок p_k — напрямок спуску,
          тобто φ'(0) = ∇f(x_k)^T p_k < 0.

    Алгоритм:
        - стартуємо з α0 > 0;
        - поки не виконується умова Арміхо
              φ(α) <= φ(0) + c1 * α * φ'(0),
          множимо α на tau (0 < tau < 1);
        - якщо α < min_alpha або вичерпано max_backtracking кроків —
          зупиняємося з accepted = False.
    """
    if alpha0 <= 0.0:
        raise InvalidParameterError("Armijo: alpha0 має бути > 0.")
    if not 0.0 < tau < 1.0:
        raise InvalidParameterError("Armijo: tau має лежати в (0, 1).")
    if not 0.0 < c1 < 1.0:
        raise InvalidParameterError("Armijo: c1 має лежати в (0, 1).")
    if max_backtracking <= 0:
        raise InvalidParameterError("Armijo: max_backtracking має бути > 0.")

    alpha = alpha0
    alpha_curr = alpha
    phi_curr = f0
    iterations = 0
    accepted = False
    reason = "max_backtracking"

    for _ in range(max_backtracking):
        iterations += 1
        alpha_curr = alpha
        phi_curr = phi(alpha_curr)

        if phi_curr <= f0 + c1 * alpha_curr * directional_derivative:
            accepted = True
            reason = "armijo"
            break

        alpha *= tau
        if alpha < min_alpha:
            reason = "min_alpha"
            break

    return LineSearchResult(
        alpha=alpha_curr,
        phi_value=phi_curr,
        accepted=accepted,
        iterations=iterations,
        func_evals=iterations,
        meta={
            "method": LINE_SEARCH_ARMIJO,
            "stopped_by": reason,
            "f0": f0,
            "directional_derivative": directional_derivative,
        },
    )


# ---------------------------------------------------------------------------
# Золотий переріз
# ---------------------------------------------------------------------------

def golden_section(
    phi: Scalar1DFunction,
    a: float,
    b: float,
    tol: float = 1e-6,
    max_iter: int = 100,
) -> LineSearchResult:
    """
    Метод золотого перерізу для мінімуму φ(α) на [a, b].

    Припущення: φ(α) неперервна та унімодальна на [a, b].

    На кожній ітерації тримаємо дві внутрішні точки
        c = a + (1 - 1/φ) * (b - a),   d = a + 1/φ * (b - a)
    і відкидаємо частину інтервалу, зберігаючи одну з точок.
    """
    if a >= b:
        raise InvalidParameterError(
            "golden_section: ліва межа інтервалу повинна бути меншою за праву (a < b)."
        )
    if tol <= 0.0:
        raise InvalidParameterError("golden_section: tol має бути > 0.")

    left = float(a)
    right = float(b)

    inv_phi = (sqrt(5.0) - 1.0) / 2.0      # ≈ 0.618
    inv_phi_sq = (3.0 - sqrt(5.0)) / 2.0   # ≈ 0.382

    h = right - left
    c = left + inv_phi_sq * h
    d = left + inv_phi * h
    fc = phi(c)
    fd = phi(d)
    func_evals = 2
    iterations = 0

    while h > tol and iterations < max_iter:
        iterations += 1
        if fc < fd:
            # Мінімум у [left, d]
            right, d, fd = d, c, fc
            h = right - left
            c = left + inv_phi_sq * h
            fc = phi(c)
        else:
            # Мінімум у [c, right]
            left, c, fc = c, d, fd
            h = right - left
            d = left + inv_phi * h
            fd = phi(d)
        func_evals += 1

    alpha_star = 0.5 * (left + right)
    phi_star = phi(alpha_star)
    func_evals += 1

    return LineSearchResult(
        alpha=alpha_star,
        phi_value=phi_star,
        accepted=h <= tol,
        iterations=iterations,
        func_evals=func_evals,
        meta={
            "method": LINE_SEARCH_GOLDEN_SECTION,
            "interval": (left, right),
            "stopped_by": "tol" if h <= tol else "max_iter",
        },
    )


# ---------------------------------------------------------------------------
# Виклик за іменем
# ---------------------------------------------------------------------------

def line_search_1d(
    phi: Scalar1DFunction,
    method: str = LINE_SEARCH_ARMIJO,
    options: Optional[Dict[str, Any]] = None,
) -> LineSearchResult:
    """
    Виконати одномірний пошук методом method.

    options передаються як іменовані аргументи відповідної функції:
        - armijo_backtracking: f0, directional_derivative (обов'язкові),
          alpha0, tau, c1, max_backtracking, min_alpha;
        - golden_section: a, b (обов'язкові), tol, max_iter.
    """
    options = dict(options or {})

    if method == LINE_SEARCH_ARMIJO:
        if "f0" not in options or "directional_derivative" not in options:
            raise InvalidParameterError(
                "Armijo backtracking потребує 'f0' та 'directional_derivative' в options."
            )
        return armijo_backtracking(phi, **options)

    if method == LINE_SEARCH_GOLDEN_SECTION:
        if "a" not in options or "b" not in options:
            raise InvalidParameterError("golden_section потребує 'a' та 'b' в options.")
        return golden_section(phi, **options)

    raise InvalidParameterError(f"Невідомий метод лінійного пошуку: '{method}'")


__all__ = [
    "Scalar1DFunction",
    "LINE_SEARCH_ARMIJO",
    "LINE_SEARCH_GOLDEN_SECTION",
    "LINE_SEARCH_METHODS",
    "LineSearchResult",
    "armijo_backtracking",
    "golden_section",
    "line_search_1d",
]
