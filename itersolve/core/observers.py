"""
observers.py

Спостерігачі за ітераційним процесом.

Executor викликає:
    observe_init(solver_name, state, meta)  - один раз після ініціалізації методу;
    observe_iter(state, meta)               - після кожної ітерації, якщо
                                              ObserverMode дозволяє.

Спостерігач лише читає стан і нічого в ньому не змінює.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from ..logging import get_logger
from .iteration_result import IterationResult
from .iteration_state import IterationState


# ---------------------------------------------------------------------------
# Частота спостереження
# ---------------------------------------------------------------------------

class ObserverMode:
    """
    Коли викликати observe_iter:

        ObserverMode.NEVER     - ніколи
        ObserverMode.ALWAYS    - на кожній ітерації
        ObserverMode.NEW_BEST  - лише коли знайдено нове найкраще значення
        ObserverMode.every(n)  - на кожній n-й ітерації
    """

    NEVER: "ObserverMode"
    ALWAYS: "ObserverMode"
    NEW_BEST: "ObserverMode"

    def __init__(self, kind: str, period: int = 1) -> None:
        self.kind = kind
        self.period = period

    @classmethod
    def every(cls, n: int) -> "ObserverMode":
        if int(n) <= 0:
            raise ValueError("ObserverMode.every: n має бути > 0.")
        return cls("every", int(n))

    def should_observe(self, state: IterationState) -> bool:
        if self.kind == "never":
            return False
        if self.kind == "always":
            return True
        if self.kind == "new_best":
            return state.is_best()
        return state.iter % self.period == 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObserverMode):
            return NotImplemented
        return (self.kind, self.period) == (other.kind, other.period)

    def __hash__(self) -> int:
        return hash((self.kind, self.period))

    def __repr__(self) -> str:
        if self.kind == "every":
            return f"ObserverMode.every({self.period})"
        return f"ObserverMode.{self.kind.upper()}"


ObserverMode.NEVER = ObserverMode("never")
ObserverMode.ALWAYS = ObserverMode("always")
ObserverMode.NEW_BEST = ObserverMode("new_best")


# ---------------------------------------------------------------------------
# Базовий клас
# ---------------------------------------------------------------------------

class Observer:
    """Базовий спостерігач: обидва методи за замовчуванням нічого не роблять."""

    def observe_init(
        self,
        solver_name: str,
        state: IterationState,
        meta: Dict[str, Any],
    ) -> None:
        pass

    def observe_iter(self, state: IterationState, meta: Dict[str, Any]) -> None:
        pass


# ---------------------------------------------------------------------------
# Готові спостерігачі
# ---------------------------------------------------------------------------

class LoggingObserver(Observer):
    """Пише по одному рядку INFO на кожну спостережену ітерацію."""

    def __init__(self, logger_name: str = "observers") -> None:
        self.logger = get_logger(logger_name)

    def observe_init(self, solver_name, state, meta) -> None:
        self.logger.info(
            "%s: init cost=%s best_cost=%s",
            solver_name,
            state.cost,
            state.best_cost,
        )

    def observe_iter(self, state, meta) -> None:
        self.logger.info(
            "iter=%d cost=%s best_cost=%s best_iter=%d counts=%s",
            state.iter,
            state.cost,
            state.best_cost,
            state.last_best_iter,
            dict(state.eval_counts),
        )


class HistoryObserver(Observer):
    """
    Збирає трасу запуску як список IterationResult
    (для таблиць, графіків і зведень).
    """

    def __init__(self) -> None:
        self.solver_name: Optional[str] = None
        self.trace: List[IterationResult] = []

    def observe_init(self, solver_name, state, meta) -> None:
        self.solver_name = solver_name
        self.trace = [IterationResult.from_state(state, meta)]

    def observe_iter(self, state, meta) -> None:
        self.trace.append(IterationResult.from_state(state, meta))

    def costs(self) -> List[float]:
        return [rec.cost for rec in self.trace]

    def best_costs(self) -> List[float]:
        return [rec.best_cost for rec in self.trace]

    def __len__(self) -> int:
        return len(self.trace)


# Тип callback'а для GUI/логів
IterationCallback = Callable[[IterationResult], None]


class CallbackObserver(Observer):
    """
    Обгортка над звичайною функцією callback(record: IterationResult).

    Функція викликається і для початкового стану, і для кожної ітерації.
    """

    def __init__(self, callback: IterationCallback) -> None:
        self.callback = callback

    def observe_init(self, solver_name, state, meta) -> None:
        self.callback(IterationResult.from_state(state, meta))

    def observe_iter(self, state, meta) -> None:
        self.callback(IterationResult.from_state(state, meta))


__all__ = [
    "ObserverMode",
    "Observer",
    "LoggingObserver",
    "HistoryObserver",
    "IterationCallback",
    "CallbackObserver",
]
