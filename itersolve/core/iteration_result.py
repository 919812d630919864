"""
iteration_result.py

Запис однієї ітерації для траси запуску (таблиці, графіки, логи).

На відміну від IterationState, який змінюється на кожній ітерації,
IterationResult — незмінний "знімок", що його збирає HistoryObserver.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .iteration_state import IterationState


@dataclass(frozen=True)
class IterationResult:
    """
    Опис однієї ітерації оптимізаційного процесу.

    Атрибути:
        index      - номер ітерації (0 — стан після ініціалізації методу)
        param      - параметри x_k (копія; None, якщо метод їх ще не задав)
        cost       - значення f(x_k) (+inf, якщо метод f не рахує)
        best_cost  - найкраще f на момент цієї ітерації
        is_best    - чи на цій ітерації знайдено нове найкраще значення
        meta       - діагностика від методу (α, норма градієнта, тип кроку, ...)
    """
    index: int
    param: Optional[Any]
    cost: float
    best_cost: float
    is_best: bool
    meta: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_state(
        cls,
        state: IterationState,
        meta: Optional[Dict[str, Any]] = None,
    ) -> "IterationResult":
        return cls(
            index=state.iter,
            param=copy.deepcopy(state.param),
            cost=state.cost,
            best_cost=state.best_cost,
            is_best=state.is_best(),
            meta=dict(meta or {}),
        )


__all__ = [
    "IterationResult",
]
