"""
termination.py

Причини зупинки ітераційного процесу.

Замість рядкових кодів ("step_norm", "max_iter", "method:...") використовуємо
перелік TerminationReason: стан ітерацій, движок і результат посилаються
на ті самі значення.
"""

from __future__ import annotations

from enum import Enum


class TerminationReason(Enum):
    """
    Чому зупинився запуск оптимізації.

    Значення кожного елемента — людяний опис (для логів / зведеної таблиці).
    """

    NOT_TERMINATED = "Not terminated"
    MAX_ITERS_REACHED = "Maximum number of iterations reached"
    TARGET_COST_REACHED = "Target cost value reached"
    SOLVER_CONVERGED = "Solver converged"
    STEP_BELOW_TOLERANCE = "Step length below tolerance"
    NO_CHANGE_IN_COST = "No change in cost function value"
    SOLVER_EXIT = "Solver exit"
    TIMEOUT = "Timeout reached"
    INTERRUPTED = "Interrupted"

    @property
    def text(self) -> str:
        return self.value

    @property
    def terminated(self) -> bool:
        """True для будь-якої причини, крім NOT_TERMINATED."""
        return self is not TerminationReason.NOT_TERMINATED

    def __str__(self) -> str:
        return self.value


__all__ = ["TerminationReason"]
