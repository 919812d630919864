"""
engine.py

Ітераційний двигун (Executor) для запуску методів оптимізації (Solver).

Функціонал:
    - застосовує RunConfig до свіжого IterationState;
    - виконує цикл: next_iteration -> злиття delta -> лічильники ->
      iter += 1 -> update() -> час -> перевірка зупинки -> спостерігачі;
    - фіксує причину зупинки у фіксованому пріоритеті:
        1) явний запит методу (delta.termination, потім solver.terminate),
        2) cost <= target_cost,
        3) iter >= max_iters,
        4) тайм-аут, потім зовнішнє скасування (cancel(), Ctrl-C);
    - повертає рівно один OptimizationResult.

Винятки методу чи задачі не перехоплюються: запуск переривається,
стан залишається таким, яким був після останньої успішної ітерації,
а результат не створюється.
"""

from __future__ import annotations

import signal
import threading
import time
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from ..logging import get_logger
from .config import RunConfig
from .errors import ExecutorStateError, InvalidParameterError
from .iteration_state import IterationState
from .observers import Observer, ObserverMode
from .problem import Problem, ProblemWrapper
from .result import OptimizationResult
from .solver_base import IterationDelta, Solver
from .termination import TerminationReason

logger = get_logger("engine")


class ExecutorStatus(Enum):
    INITIALIZING = "initializing"
    RUNNING = "running"
    TERMINATED = "terminated"


class Executor:
    """
    Движок, який керує ітераційним процесом для заданого Solver.

    Використання:
        executor = Executor(problem, SteepestDescent())
        executor.configure(initial_param=np.array([-1.2, 1.0]), max_iters=100)
        executor.add_observer(HistoryObserver(), ObserverMode.ALWAYS)
        result = executor.run()

    Один Executor виконує рівно один запуск. Для мультистарту потрібен
    новий Executor (і нова обгортка задачі) на кожен запуск.
    """

    def __init__(
        self,
        problem: Union[Problem, ProblemWrapper],
        solver: Solver,
        config: Optional[RunConfig] = None,
        *,
        timer: bool = True,
        cancel_event: Optional[threading.Event] = None,
        handle_interrupt: bool = False,
    ) -> None:
        """
        Parameters
        ----------
        problem : Problem | ProblemWrapper
            Задача; Problem автоматично обгортається в ProblemWrapper.
        solver : Solver
            Метод оптимізації.
        config : Optional[RunConfig]
            Початкова конфігурація (можна доповнити через configure()).
        timer : bool
            Чи вимірювати час роботи (state.elapsed). Без таймера тайм-аут
            неможливий.
        cancel_event : Optional[threading.Event]
            Подія скасування; перевіряється лише між ітераціями.
        handle_interrupt : bool
            Перехоплювати Ctrl-C (SIGINT) на час запуску.
        """
        if isinstance(problem, ProblemWrapper):
            self.problem = problem
        else:
            self.problem = ProblemWrapper(problem)

        self.solver = solver
        self.config = config if config is not None else RunConfig()
        self.config.validate()
        self.timer = timer
        self.cancel_event = cancel_event if cancel_event is not None else threading.Event()
        self.handle_interrupt = handle_interrupt

        self.status = ExecutorStatus.INITIALIZING
        self.state: Optional[IterationState] = None
        self._observers: List[Tuple[Observer, ObserverMode]] = []
        self._check_timer()

    # ------------------------------------------------------------------
    # Налаштування (лише до запуску)
    # ------------------------------------------------------------------

    def _require_initializing(self, action: str) -> None:
        if self.status is not ExecutorStatus.INITIALIZING:
            raise ExecutorStateError(
                f"Executor.{action}() недоступний у стані '{self.status.value}'"
            )

    def _check_timer(self) -> None:
        if self.config.timeout is not None and not self.timer:
            raise InvalidParameterError("timeout потребує увімкненого таймера (timer=True).")

    def configure(self, **options: Any) -> "Executor":
        """
        Оновити конфігурацію запуску: initial_param, target_cost,
        max_iters, timeout.
        """
        self._require_initializing("configure")
        self.config = self.config.replace(**options)
        self._check_timer()
        return self

    def add_observer(
        self,
        observer: Observer,
        mode: ObserverMode = ObserverMode.ALWAYS,
    ) -> "Executor":
        self._require_initializing("add_observer")
        self._observers.append((observer, mode))
        return self

    def cancel(self) -> None:
        """Попросити зупинитися після поточної ітерації."""
        self.cancel_event.set()

    # ------------------------------------------------------------------
    # Допоміжні кроки циклу
    # ------------------------------------------------------------------

    def _merge(self, state: IterationState, delta: Optional[IterationDelta]) -> None:
        if delta is not None:
            delta.apply_to(state)
        state.refresh_eval_counts(self.problem)

    def _update_elapsed(self, state: IterationState, started: float) -> None:
        if self.timer:
            state.set_elapsed(time.perf_counter() - started)
        else:
            state.set_elapsed(None)

    def _termination(
        self,
        state: IterationState,
        delta: Optional[IterationDelta],
    ) -> Tuple[TerminationReason, Optional[str]]:
        if delta is not None and delta.termination.terminated:
            return delta.termination, delta.message

        solver_reason = self.solver.terminate(state)
        if solver_reason.terminated:
            return solver_reason, None

        if state.cost <= state.target_cost:
            return TerminationReason.TARGET_COST_REACHED, None

        if state.iter >= state.max_iters:
            return TerminationReason.MAX_ITERS_REACHED, None

        timeout = self.config.timeout
        if timeout is not None and state.elapsed is not None and state.elapsed >= timeout:
            return TerminationReason.TIMEOUT, None

        if self.cancel_event.is_set():
            return TerminationReason.INTERRUPTED, None

        return TerminationReason.NOT_TERMINATED, None

    def _notify_init(self, state: IterationState, meta: Dict[str, Any]) -> None:
        for observer, mode in self._observers:
            if mode != ObserverMode.NEVER:
                observer.observe_init(self.solver.name, state, meta)

    def _notify_iter(self, state: IterationState, meta: Dict[str, Any]) -> None:
        for observer, mode in self._observers:
            if mode.should_observe(state):
                observer.observe_iter(state, meta)

    # ------------------------------------------------------------------
    # Ctrl-C
    # ------------------------------------------------------------------

    def _install_interrupt_handler(self) -> Optional[Any]:
        if not self.handle_interrupt:
            return None
        if threading.current_thread() is not threading.main_thread():
            logger.warning("SIGINT handler can only be installed from the main thread")
            return None

        previous = signal.getsignal(signal.SIGINT)

        def _on_interrupt(signum, frame):
            logger.warning("Interrupt received, stopping after the current iteration")
            self.cancel_event.set()

        signal.signal(signal.SIGINT, _on_interrupt)
        return previous if previous is not None else signal.SIG_DFL

    @staticmethod
    def _restore_interrupt_handler(previous: Optional[Any]) -> None:
        if previous is not None:
            signal.signal(signal.SIGINT, previous)

    # ------------------------------------------------------------------
    # Запуск
    # ------------------------------------------------------------------

    def run(self) -> OptimizationResult:
        """
        Запустити процес оптимізації.

        Returns
        -------
        OptimizationResult
            Фінальний стан разом з обгорткою задачі.
        """
        self._require_initializing("run")
        self.status = ExecutorStatus.RUNNING

        state = self.config.apply(IterationState())
        self.state = state

        logger.info(
            "Run started: solver=%s, problem=%s, max_iters=%s, timeout=%s",
            self.solver.name,
            self.problem.name,
            self.config.max_iters,
            self.config.timeout,
        )

        previous_handler = self._install_interrupt_handler()
        started = time.perf_counter()
        try:
            init_delta = self.solver.initialize(self.problem, state)
            self._merge(state, init_delta)
            state.update()
            self._update_elapsed(state, started)
            self._notify_init(state, init_delta.meta if init_delta is not None else {})

            reason, message = self._termination(state, init_delta)

            while not reason.terminated:
                delta = self.solver.step(self.problem, state)
                self._merge(state, delta)
                state.increment_iter()
                state.update()
                self._update_elapsed(state, started)

                reason, message = self._termination(state, delta)
                if reason.terminated:
                    state.set_termination_reason(reason, message)

                logger.debug(
                    "iter=%d cost=%s best_cost=%s best_iter=%d",
                    state.iter,
                    state.cost,
                    state.best_cost,
                    state.last_best_iter,
                )
                self._notify_iter(state, delta.meta)

            state.set_termination_reason(reason, message)
        except Exception as exc:
            logger.error(
                "Run failed at iteration %d (solver=%s): %s",
                state.iter,
                self.solver.name,
                exc,
            )
            raise
        finally:
            self.status = ExecutorStatus.TERMINATED
            self._restore_interrupt_handler(previous_handler)

        logger.info(
            "Run terminated after %d iterations: %s (best cost %s)",
            state.iter,
            state.termination_reason.text,
            state.best_cost,
        )
        return OptimizationResult(self.problem, state, self.solver.name)


__all__ = [
    "ExecutorStatus",
    "Executor",
]
