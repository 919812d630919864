"""
iteration_state.py

Стан ітераційного процесу: поточні, попередні та найкращі значення
всіх артефактів оптимізації (параметри, f, градієнт, Гессіан,
обернений Гессіан, Якобіан, популяція) разом із лічильниками ітерацій
і викликів, часом роботи та причиною зупинки.

Правила:
    - кожен set_X(...) для величини з "попереднім" значенням працює як
      зсув: старе поточне значення стає попереднім, нове — поточним;
    - best_* змінюються лише в update(), ніколи безумовно;
    - is_best() істинне лише на тій ітерації, де найкраще значення
      було (пере)знайдене.

Типи параметрів / градієнта / Гессіана / Якобіана довільні: стан їх
не аналізує, а лише зберігає (і копіює поточний параметр у best_param).
"""

from __future__ import annotations

import copy
import math
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .termination import TerminationReason

# "Необмежена" кількість ітерацій
UNBOUNDED_ITERS: int = sys.maxsize

# Поля, які можна "забрати" через take()
TAKEABLE_FIELDS = frozenset(
    {
        "param",
        "prev_param",
        "best_param",
        "prev_best_param",
        "grad",
        "prev_grad",
        "hessian",
        "prev_hessian",
        "inverse_hessian",
        "prev_inverse_hessian",
        "jacobian",
        "prev_jacobian",
        "population",
    }
)


@dataclass(eq=False)
class IterationState:
    """
    Стан оптимізації між ітераціями.

    Атрибути:
        param, prev_param                 - поточний / попередній вектор параметрів
        best_param, prev_best_param       - найкращий / попередній найкращий вектор
        cost, prev_cost                   - поточне / попереднє значення f (+inf на старті)
        best_cost, prev_best_cost         - найкраще / попереднє найкраще f (+inf)
        target_cost                       - поріг зупинки за f (-inf, тобто вимкнено)
        grad, hessian, inverse_hessian,
        jacobian (+ prev_*)               - необов'язкові артефакти
        population                        - список пар (параметр, f) або None
        iter                              - номер ітерації (з 0)
        last_best_iter                    - ітерація, де востаннє знайдено найкраще
        max_iters                         - ліміт ітерацій (за замовчуванням необмежений)
        eval_counts                       - лічильники викликів за іменами операцій
        elapsed                           - час роботи в секундах (None, якщо таймер вимкнено)
        termination_reason                - причина зупинки
        termination_message               - пояснення від методу (якщо є)
        best_found                        - чи прийнято вже хоч одне найкраще значення
    """

    param: Optional[Any] = None
    prev_param: Optional[Any] = None
    best_param: Optional[Any] = None
    prev_best_param: Optional[Any] = None

    cost: float = math.inf
    prev_cost: float = math.inf
    best_cost: float = math.inf
    prev_best_cost: float = math.inf
    target_cost: float = -math.inf

    grad: Optional[Any] = None
    prev_grad: Optional[Any] = None
    hessian: Optional[Any] = None
    prev_hessian: Optional[Any] = None
    inverse_hessian: Optional[Any] = None
    prev_inverse_hessian: Optional[Any] = None
    jacobian: Optional[Any] = None
    prev_jacobian: Optional[Any] = None

    population: Optional[List[Tuple[Any, float]]] = None

    iter: int = 0
    last_best_iter: int = 0
    max_iters: int = UNBOUNDED_ITERS

    eval_counts: Dict[str, int] = field(default_factory=dict)
    elapsed: Optional[float] = 0.0

    termination_reason: TerminationReason = TerminationReason.NOT_TERMINATED
    termination_message: Optional[str] = None

    # Чи було вже прийнято хоч одне "найкраще" значення
    best_found: bool = False

    # ------------------------------------------------------------------
    # Сеттери зі зсувом: поточне -> попереднє, нове -> поточне
    # ------------------------------------------------------------------

    def set_param(self, param: Any) -> "IterationState":
        self.prev_param, self.param = self.param, param
        return self

    def set_best_param(self, param: Any) -> "IterationState":
        self.prev_best_param, self.best_param = self.best_param, param
        return self

    def set_cost(self, cost: float) -> "IterationState":
        self.prev_cost, self.cost = self.cost, cost
        return self

    def set_best_cost(self, cost: float) -> "IterationState":
        self.prev_best_cost, self.best_cost = self.best_cost, cost
        return self

    def set_grad(self, grad: Any) -> "IterationState":
        self.prev_grad, self.grad = self.grad, grad
        return self

    def set_hessian(self, hessian: Any) -> "IterationState":
        self.prev_hessian, self.hessian = self.hessian, hessian
        return self

    def set_inverse_hessian(self, inverse_hessian: Any) -> "IterationState":
        self.prev_inverse_hessian, self.inverse_hessian = (
            self.inverse_hessian,
            inverse_hessian,
        )
        return self

    def set_jacobian(self, jacobian: Any) -> "IterationState":
        self.prev_jacobian, self.jacobian = self.jacobian, jacobian
        return self

    # ------------------------------------------------------------------
    # Звичайні сеттери (без історії)
    # ------------------------------------------------------------------

    def set_target_cost(self, target_cost: float) -> "IterationState":
        self.target_cost = target_cost
        return self

    def set_max_iters(self, max_iters: int) -> "IterationState":
        self.max_iters = max_iters
        return self

    def set_population(self, population: List[Tuple[Any, float]]) -> "IterationState":
        self.population = population
        return self

    def set_termination_reason(
        self,
        reason: TerminationReason,
        message: Optional[str] = None,
    ) -> "IterationState":
        self.termination_reason = reason
        self.termination_message = message
        return self

    def set_elapsed(self, elapsed: Optional[float]) -> "IterationState":
        self.elapsed = elapsed
        return self

    # ------------------------------------------------------------------
    # Лічильники
    # ------------------------------------------------------------------

    def increment_iter(self) -> None:
        self.iter += 1

    def refresh_eval_counts(self, problem: Any) -> None:
        """
        Перезаписати лічильники значеннями з обгортки задачі.

        Обгортка — джерело істини для сумарних лічильників, тому значення
        не додаються, а замінюються.
        """
        for name, count in problem.operation_counts().items():
            self.eval_counts[name] = count

    # ------------------------------------------------------------------
    # Відстеження найкращого розв'язку
    # ------------------------------------------------------------------

    def _is_improvement(self) -> bool:
        # Порівняння строго "<", щоб рівне значення не вважалося новим
        # найкращим. Метод, що не рахує f, має +inf; перша така ітерація
        # приймається, якщо нескінченності одного знака.
        if self.cost < self.best_cost:
            return True
        return (
            not self.best_found
            and math.isinf(self.cost)
            and math.isinf(self.best_cost)
            and math.copysign(1.0, self.cost) == math.copysign(1.0, self.best_cost)
        )

    def update(self) -> None:
        """
        Перевірити, чи поточний розв'язок найкращий.

        Якщо так:
            - поточний param (якщо він є) копіюється в best_param зі зсувом;
            - cost записується в best_cost зі зсувом;
            - last_best_iter = iter.
        """
        if not self._is_improvement():
            return

        if self.param is not None:
            self.set_best_param(copy.deepcopy(self.param))
        self.set_best_cost(self.cost)
        self.last_best_iter = self.iter
        self.best_found = True

    def is_best(self) -> bool:
        return self.last_best_iter == self.iter

    @property
    def terminated(self) -> bool:
        return self.termination_reason.terminated

    # ------------------------------------------------------------------
    # "Забрати" артефакт без копіювання
    # ------------------------------------------------------------------

    def take(self, name: str) -> Optional[Any]:
        """
        Повернути значення поля name і залишити на його місці None.

        Корисно, коли методу потрібно спожити великий артефакт
        (наприклад, Гессіан), а не копіювати його.
        """
        if name not in TAKEABLE_FIELDS:
            raise KeyError(f"Поле '{name}' не можна забрати зі стану")
        value = getattr(self, name)
        setattr(self, name, None)
        return value


__all__ = [
    "UNBOUNDED_ITERS",
    "TAKEABLE_FIELDS",
    "IterationState",
]
