"""
config.py

Конфігурація одного запуску Executor.

Розпізнаються лише чотири параметри:
    initial_param  - початковий вектор параметрів (None — метод задає сам)
    target_cost    - поріг зупинки за f (default: -inf, тобто вимкнено)
    max_iters      - ліміт ітерацій (default: None — необмежено)
    timeout        - ліміт часу роботи в секундах (default: None — без ліміту)
"""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, fields
from numbers import Integral
from typing import Any, Mapping, Optional

from .errors import InvalidParameterError
from .iteration_state import UNBOUNDED_ITERS, IterationState


@dataclass
class RunConfig:
    initial_param: Optional[Any] = None
    target_cost: float = -math.inf
    max_iters: Optional[int] = None
    timeout: Optional[float] = None

    @classmethod
    def option_names(cls) -> tuple:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "RunConfig":
        """
        Побудувати конфігурацію зі словника. Невідомі ключі — помилка.
        """
        options = dict(options or {})
        unknown = sorted(set(options) - set(cls.option_names()))
        if unknown:
            raise InvalidParameterError(
                f"Невідомі параметри запуску: {', '.join(unknown)}"
            )
        config = cls(**options)
        config.validate()
        return config

    def replace(self, **options: Any) -> "RunConfig":
        """Нова конфігурація з оновленими полями (поточна не змінюється)."""
        merged = {f.name: getattr(self, f.name) for f in fields(self)}
        unknown = sorted(set(options) - set(merged))
        if unknown:
            raise InvalidParameterError(
                f"Невідомі параметри запуску: {', '.join(unknown)}"
            )
        merged.update(options)
        return RunConfig.from_options(merged)

    def validate(self) -> None:
        if self.max_iters is not None:
            if isinstance(self.max_iters, bool) or not isinstance(self.max_iters, Integral):
                raise InvalidParameterError("max_iters має бути цілим числом.")
            if self.max_iters < 0:
                raise InvalidParameterError("max_iters має бути >= 0.")

        if self.timeout is not None:
            timeout = float(self.timeout)
            if math.isnan(timeout) or timeout <= 0.0:
                raise InvalidParameterError("timeout має бути > 0 секунд.")

        if math.isnan(float(self.target_cost)):
            raise InvalidParameterError("target_cost не може бути NaN.")

    def apply(self, state: IterationState) -> IterationState:
        """
        Записати конфігурацію у свіжий стан.

        initial_param копіюється, щоб запуск не змінював об'єкт користувача.
        """
        if self.initial_param is not None:
            state.set_param(copy.deepcopy(self.initial_param))
        state.set_target_cost(self.target_cost)
        state.set_max_iters(
            UNBOUNDED_ITERS if self.max_iters is None else int(self.max_iters)
        )
        return state


__all__ = [
    "RunConfig",
]
