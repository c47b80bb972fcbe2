"""
Calculation Workflow - state machine for one asynchronous calculation.

The transition table is a pure function, next_state(state, event, payload).
CalculationWorkflow wraps it with the context (form data, wind data), a
bounded undo history, an append-only event log, observers and the asyncio
task that runs the calculation.

Usage:
    workflow = CalculationWorkflow()
    result = asyncio.run(workflow.start(request, wind_data, service.calculate))
"""

import asyncio
import inspect
import logging
import time
from collections import deque
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, Tuple, Union

from ..core.constants import PROGRESS_CEILING, WORKFLOW_EVENT_LOG_LIMIT, WORKFLOW_HISTORY_LIMIT
from ..core.data_models import CalculationRequest, CalculationResult, WindSpeedData
from ..core.errors import WorkflowError

logger = logging.getLogger(__name__)


class WorkflowEvent(Enum):
    START_CALCULATION = "START_CALCULATION"
    BEGIN_PROCESSING = "BEGIN_PROCESSING"
    UPDATE_PROGRESS = "UPDATE_PROGRESS"
    CALCULATION_SUCCESS = "CALCULATION_SUCCESS"
    CALCULATION_ERROR = "CALCULATION_ERROR"
    RETRY = "RETRY"
    RESET = "RESET"
    CANCEL_CALCULATION = "CANCEL_CALCULATION"


# --- States ---

@dataclass(frozen=True)
class IdleState:
    type: str = field(default="idle", init=False)


@dataclass(frozen=True)
class LoadingState:
    operation: str = "Preparing calculation..."
    type: str = field(default="loading", init=False)


@dataclass(frozen=True)
class CalculatingState:
    progress: float = 0.0   # 0-100
    stage: str = "Processing wind parameters..."
    type: str = field(default="calculating", init=False)


@dataclass(frozen=True)
class CompleteState:
    result: Optional[CalculationResult] = None
    timestamp: float = 0.0
    type: str = field(default="complete", init=False)


@dataclass(frozen=True)
class ErrorState:
    message: str = "Unknown error occurred"
    can_retry: bool = True
    last_known_state: Optional["WorkflowState"] = None
    type: str = field(default="error", init=False)


WorkflowState = Union[IdleState, LoadingState, CalculatingState, CompleteState, ErrorState]


@dataclass(frozen=True)
class WorkflowContext:
    """Everything undo restores: the state plus the inputs that produced it"""
    state: WorkflowState = IdleState()
    form_data: Optional[CalculationRequest] = None
    wind_data: Optional[WindSpeedData] = None


@dataclass(frozen=True)
class EventRecord:
    event: WorkflowEvent
    from_state: str
    to_state: str
    accepted: bool
    timestamp: float


def next_state(state: WorkflowState, event: WorkflowEvent,
               payload: Optional[Dict[str, Any]] = None) -> Optional[WorkflowState]:
    """Pure transition function. Returns None when the event is not allowed."""
    payload = payload or {}

    if event == WorkflowEvent.RESET:
        return IdleState()

    if event == WorkflowEvent.START_CALCULATION:
        if isinstance(state, (IdleState, ErrorState, CompleteState)):
            return LoadingState(operation=payload.get("operation", "Initializing calculation..."))
        return None

    if event == WorkflowEvent.BEGIN_PROCESSING:
        if isinstance(state, LoadingState):
            return CalculatingState(
                progress=0.0, stage=payload.get("stage", "Processing wind parameters...")
            )
        return None

    if event == WorkflowEvent.UPDATE_PROGRESS:
        if not isinstance(state, CalculatingState):
            return None
        progress = float(payload.get("progress", state.progress))
        ceiling = 100.0 if payload.get("final", False) else PROGRESS_CEILING
        # Monotonic: a lower value or a ceiling below the current value holds progress
        progress = max(state.progress, min(max(progress, 0.0), ceiling))
        return CalculatingState(progress=progress, stage=payload.get("stage") or state.stage)

    if event == WorkflowEvent.CALCULATION_SUCCESS:
        if isinstance(state, CalculatingState):
            return CompleteState(result=payload.get("result"), timestamp=payload.get("timestamp", 0.0))
        return None

    if event == WorkflowEvent.CALCULATION_ERROR:
        if isinstance(state, CalculatingState):
            return ErrorState(
                message=payload.get("error") or "Calculation failed",
                can_retry=True,
                last_known_state=state,
            )
        return None

    if event == WorkflowEvent.RETRY:
        if isinstance(state, ErrorState) and state.can_retry:
            return LoadingState(operation="Retrying calculation...")
        return None

    if event == WorkflowEvent.CANCEL_CALCULATION:
        if isinstance(state, (LoadingState, CalculatingState)):
            return IdleState()
        return None

    return None


CalcFn = Callable[[CalculationRequest, Optional[WindSpeedData]],
                  Union[CalculationResult, Awaitable[CalculationResult]]]
Listener = Callable[[WorkflowState, WorkflowContext], None]


class CalculationWorkflow:
    """
    One in-flight calculation at a time.

    Each run is tagged with a generation number; a run whose generation is
    no longer current (cancelled, reset, superseded) cannot change state.
    """

    def __init__(self, history_limit: int = WORKFLOW_HISTORY_LIMIT,
                 progress_interval: float = 0.2, progress_step: float = 10.0,
                 clock: Callable[[], float] = time.time,
                 event_log_limit: int = WORKFLOW_EVENT_LOG_LIMIT):
        self._context = WorkflowContext()
        self._history: Deque[WorkflowContext] = deque(maxlen=history_limit)
        self._events: Deque[EventRecord] = deque(maxlen=event_log_limit)
        self._listeners: List[Listener] = []
        self._progress_interval = progress_interval
        self._progress_step = progress_step
        self._clock = clock
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._calc_fn: Optional[CalcFn] = None

    @classmethod
    def from_config(cls, config) -> "CalculationWorkflow":
        return cls(
            history_limit=config.history_limit,
            progress_interval=config.progress_interval,
            progress_step=config.progress_step,
        )

    # --- Observation ---

    @property
    def state(self) -> WorkflowState:
        return self._context.state

    @property
    def context(self) -> WorkflowContext:
        return self._context

    @property
    def can_undo(self) -> bool:
        return len(self._history) > 0

    @property
    def history(self) -> Tuple[WorkflowContext, ...]:
        return tuple(self._history)

    @property
    def events(self) -> Tuple[EventRecord, ...]:
        return tuple(self._events)

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register an observer; returns a function that unregisters it"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- Transitions ---

    def dispatch(self, event: WorkflowEvent, **payload: Any) -> bool:
        """Apply one event. Returns False (state unchanged) when not allowed."""
        current = self._context.state
        new_state = next_state(current, event, payload)
        if new_state is None:
            logger.warning(f"No transition for {current.type} -> {event.value}")
            self._log(event, current, current, accepted=False)
            return False

        context = replace(self._context, state=new_state)
        if event == WorkflowEvent.START_CALCULATION and "form_data" in payload:
            context = replace(context, form_data=payload["form_data"], wind_data=payload.get("wind_data"))

        # Progress ticks are not undo points
        if event != WorkflowEvent.UPDATE_PROGRESS:
            self._history.append(self._context)
        self._context = context
        self._log(event, current, new_state, accepted=True)
        self._notify()
        return True

    def update_progress(self, progress: float, stage: Optional[str] = None, final: bool = False) -> bool:
        return self.dispatch(WorkflowEvent.UPDATE_PROGRESS, progress=progress, stage=stage, final=final)

    def undo(self) -> bool:
        """Restore the previous context. Any in-flight run is abandoned."""
        if not self._history:
            return False
        self._abandon_run()
        self._context = self._history.pop()
        self._notify()
        return True

    def reset(self) -> None:
        """Return to idle immediately, discarding any in-flight run"""
        self._abandon_run()
        self.dispatch(WorkflowEvent.RESET)

    def cancel(self) -> bool:
        """Cancel the in-flight run, if any"""
        if not isinstance(self.state, (LoadingState, CalculatingState)):
            return False
        self._abandon_run()
        return self.dispatch(WorkflowEvent.CANCEL_CALCULATION)

    # --- Async orchestration ---

    async def start(self, form_data: CalculationRequest, wind_data: Optional[WindSpeedData],
                    calc_fn: CalcFn) -> Optional[CalculationResult]:
        """
        Run calc_fn(form_data, wind_data) as the current calculation.

        Returns the result, or None when the run failed (state -> error) or
        was superseded. Sync callables run in a worker thread.
        """
        if isinstance(self.state, (LoadingState, CalculatingState)):
            logger.info("Cancelling in-flight calculation for a new start")
            self.cancel()

        self._calc_fn = calc_fn
        if not self.dispatch(WorkflowEvent.START_CALCULATION, form_data=form_data, wind_data=wind_data,
                             operation="Initializing calculation..."):
            return None
        return await self._run()

    async def retry(self, calc_fn: Optional[CalcFn] = None) -> Optional[CalculationResult]:
        """
        Re-run the last calculation with the stored form data.
        Without form data or a calc_fn the workflow stays in error.
        """
        if calc_fn is not None:
            self._calc_fn = calc_fn
        if self._calc_fn is None or self._context.form_data is None:
            logger.warning("Retry ignored: no previous calculation to re-run")
            return None
        if not self.dispatch(WorkflowEvent.RETRY):
            return None
        return await self._run()

    async def _run(self) -> Optional[CalculationResult]:
        self._generation += 1
        generation = self._generation
        form_data, wind_data = self._context.form_data, self._context.wind_data

        self.dispatch(WorkflowEvent.BEGIN_PROCESSING, stage="Processing wind parameters...")

        task = asyncio.ensure_future(self._invoke(self._calc_fn, form_data, wind_data))
        self._task = task
        ticker = asyncio.ensure_future(self._tick(generation))
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            # The caller was cancelled: abandon this run
            if generation == self._generation:
                self._abandon_run()
            raise
        finally:
            ticker.cancel()

        if generation != self._generation or task.cancelled():
            if not task.cancelled() and task.exception() is not None:
                logger.debug(f"Stale calculation failed: {task.exception()}")
            logger.debug(f"Discarding result of stale calculation (generation {generation})")
            return None

        self._task = None
        exc = task.exception()
        if exc is not None:
            error = WorkflowError(f"Calculation failed: {exc}", {"type": type(exc).__name__})
            logger.warning(str(error))
            self.dispatch(WorkflowEvent.CALCULATION_ERROR, error=error.message)
            return None

        result = task.result()
        self.update_progress(100.0, "Complete", final=True)
        self.dispatch(WorkflowEvent.CALCULATION_SUCCESS, result=result, timestamp=self._clock())
        return result

    @staticmethod
    async def _invoke(calc_fn: CalcFn, form_data: CalculationRequest,
                      wind_data: Optional[WindSpeedData]) -> CalculationResult:
        if inspect.iscoroutinefunction(calc_fn):
            return await calc_fn(form_data, wind_data)
        result = await asyncio.to_thread(calc_fn, form_data, wind_data)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _tick(self, generation: int) -> None:
        """Simulated progress until the run finishes, capped below 100"""
        while True:
            await asyncio.sleep(self._progress_interval)
            if generation != self._generation or not isinstance(self.state, CalculatingState):
                return
            self.update_progress(
                min(self.state.progress + self._progress_step, PROGRESS_CEILING),
                "Calculating pressures...",
            )

    def _abandon_run(self) -> None:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _log(self, event: WorkflowEvent, before: WorkflowState, after: WorkflowState, accepted: bool) -> None:
        self._events.append(EventRecord(event, before.type, after.type, accepted, self._clock()))

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._context.state, self._context)
