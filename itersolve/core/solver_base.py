"""
solver_base.py

Базові класи для реалізації методів оптимізації (Strategy).

Ідея:
    - Є абстрактний клас Solver, від якого наслідуються всі конкретні методи:
        * SteepestDescent
        * Newton
        * GaussNewton
        * NelderMead
    - Кожен метод реалізує next_iteration(), а движок викликає step().
    - Метод повертає IterationDelta — лише ті величини, які він справді
      обчислив на цій ітерації. Решту полів стану движок не чіпає.

Формат:
    step(problem, state) -> IterationDelta
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .iteration_state import IterationState
from .problem import ProblemWrapper
from .termination import TerminationReason


# ---------------------------------------------------------------------------
# Результат одного кроку методу оптимізації
# ---------------------------------------------------------------------------

@dataclass
class IterationDelta:
    """
    Часткове оновлення стану за одну ітерацію.

    Атрибути:
        param, cost, grad, hessian,
        inverse_hessian, jacobian,
        population   - нові значення; None означає "не обчислено"
        termination  - явний запит методу на зупинку (NOT_TERMINATED — продовжити)
        message      - пояснення до termination
        meta         - довільна діагностика (α, норма градієнта, тип кроку, ...)
    """
    param: Optional[Any] = None
    cost: Optional[float] = None
    grad: Optional[Any] = None
    hessian: Optional[Any] = None
    inverse_hessian: Optional[Any] = None
    jacobian: Optional[Any] = None
    population: Optional[List[Tuple[Any, float]]] = None
    termination: TerminationReason = TerminationReason.NOT_TERMINATED
    message: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    def terminate(
        self,
        reason: TerminationReason,
        message: Optional[str] = None,
    ) -> "IterationDelta":
        """Позначити, що метод хоче зупинити процес після цієї ітерації."""
        self.termination = reason
        self.message = message
        return self

    def apply_to(self, state: IterationState) -> IterationState:
        """
        Перенести обчислені величини в стан через сеттери зі зсувом.
        Поля, яких немає в delta, залишаються без змін.
        """
        if self.param is not None:
            state.set_param(self.param)
        if self.cost is not None:
            state.set_cost(self.cost)
        if self.grad is not None:
            state.set_grad(self.grad)
        if self.hessian is not None:
            state.set_hessian(self.hessian)
        if self.inverse_hessian is not None:
            state.set_inverse_hessian(self.inverse_hessian)
        if self.jacobian is not None:
            state.set_jacobian(self.jacobian)
        if self.population is not None:
            state.set_population(self.population)
        return state


# ---------------------------------------------------------------------------
# Базовий клас Solver (Strategy)
# ---------------------------------------------------------------------------

class Solver(ABC):
    """
    Абстрактний базовий клас для всіх методів оптимізації.

    Кожен конкретний метод:
        - наслідується від Solver;
        - реалізує next_iteration();
        - за потреби переозначає initialize() / terminate() / _validate_options().

    Використання:
        solver = SteepestDescent(options={...})
        delta = solver.step(problem, state)  # IterationDelta
    """

    default_name: str = "solver"

    def __init__(
        self,
        options: Optional[Dict[str, Any]] = None,
        name: Optional[str] = None,
    ) -> None:
        """
        Parameters
        ----------
        options : Optional[dict]
            Параметри методу (крок, толеранси тощо). Перевіряються одразу,
            некоректні значення дають InvalidParameterError.
        name : Optional[str]
            Людяна назва методу (для логів/таблиць).
        """
        self.options: Dict[str, Any] = dict(options or {})
        self.name: str = name or self.default_name
        self._validate_options()

    def _validate_options(self) -> None:
        """Перевірити options. За замовчуванням нічого не робить."""

    # ------------------------------------------------------------------
    # Життєвий цикл методу
    # ------------------------------------------------------------------

    def initialize(
        self,
        problem: ProblemWrapper,
        state: IterationState,
    ) -> Optional[IterationDelta]:
        """
        Підготувати метод перед першою ітерацією (опційно).

        Може повернути IterationDelta з початковими значеннями
        (наприклад, f(x0) або початковий симплекс).
        """
        return None

    def step(self, problem: ProblemWrapper, state: IterationState) -> IterationDelta:
        """
        Виконати одну ітерацію методу для поточного стану.

        Повертає:
            IterationDelta з обчисленими величинами.
        """
        result = self.next_iteration(problem, state)

        if not isinstance(result, IterationDelta):
            raise TypeError(
                f"{self.__class__.__name__}.next_iteration() "
                f"повинен повертати IterationDelta, отримано: {type(result)}"
            )

        return result

    def terminate(self, state: IterationState) -> TerminationReason:
        """
        Власний критерій зупинки методу, який перевіряється після
        оновлення стану. За замовчуванням — продовжувати.
        """
        return TerminationReason.NOT_TERMINATED

    @abstractmethod
    def next_iteration(
        self,
        problem: ProblemWrapper,
        state: IterationState,
    ) -> IterationDelta:
        """
        Реалізація однієї ітерації.

        Parameters
        ----------
        problem : ProblemWrapper
            Задача з лічильниками викликів.
        state : IterationState
            Поточний стан (метод його не змінює).

        Returns
        -------
        IterationDelta
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, options={self.options!r})"


__all__ = [
    "IterationDelta",
    "Solver",
]
