"""
errors.py

Ієрархія винятків itersolve.

    OptimizationError          - базовий клас
      InvalidParameterError    - некоректні параметри методу / запуску
      EvaluationError          - помилка обчислення f, ∇f, J, H задачі
      ExecutorStateError       - операція недоступна в поточному стані движка

Запит методу на зупинку помилкою НЕ є: він передається через
TerminationReason у IterationDelta.
"""

from __future__ import annotations


class OptimizationError(RuntimeError):
    """Базовий виняток для всіх помилок пакета."""


class InvalidParameterError(OptimizationError, ValueError):
    """
    Параметр методу або запуску поза допустимим діапазоном.

    Піднімається одразу під час конфігурації, до першої ітерації.
    """


class EvaluationError(OptimizationError):
    """
    Обчислення задачі (cost / gradient / Jacobian / Hessian / operator)
    завершилося помилкою для заданого параметра.
    """

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation


class ExecutorStateError(OptimizationError):
    """Движок уже запущено або завершено."""


__all__ = [
    "OptimizationError",
    "InvalidParameterError",
    "EvaluationError",
    "ExecutorStateError",
]
