"""Regeneration controller: owns the current animation state for one session.

The controller turns generation requests and parameter changes into
pipeline runs. Parameter changes are debounced and coalesced (last write
wins), starting a run cancels the previous one, and results of cancelled or
superseded runs are dropped, so at most one run is live at any time and a
stale result never overwrites newer state.

All public methods must be called from the event loop that runs the
pipelines.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable

from .animation.cancellation import CancellationToken
from .animation.models import AnimationParameters, SourceImage
from .animation_pipeline import run_pipeline
from .constants import DEBOUNCE_MS
from .errors import PipelineCancelled, WigglerError
from .output.encoder import EncodedArtifact

logger = logging.getLogger(__name__)

Pipeline = Callable[[SourceImage, AnimationParameters, CancellationToken], Awaitable[EncodedArtifact]]


class ControllerStatus(str, Enum):
    """Controller states."""

    IDLE = "idle"
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


SETTLED_STATUSES = frozenset({ControllerStatus.IDLE, ControllerStatus.DONE, ControllerStatus.FAILED})


@dataclass(frozen=True)
class ControllerState:
    """Snapshot published on every transition."""

    status: ControllerStatus
    params: AnimationParameters | None = None
    run_id: int | None = None
    artifact: EncodedArtifact | None = None
    error: Exception | None = None

    @property
    def is_settled(self) -> bool:
        return self.status in SETTLED_STATUSES


@dataclass
class PipelineRun:
    """One in-flight pipeline execution."""

    run_id: int
    params: AnimationParameters
    token: CancellationToken = field(default_factory=CancellationToken)
    finished: bool = False

    @property
    def is_active(self) -> bool:
        return not self.finished and not self.token.is_cancelled


class Subscription:
    """Async iterator over controller state transitions."""

    _CLOSED = object()

    def __init__(self, on_close: Callable[["Subscription"], None]) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._on_close = on_close
        self.closed = False

    def push(self, state: ControllerState) -> None:
        if not self.closed:
            self._queue.put_nowait(state)

    def close(self) -> None:
        """Stop receiving transitions; pending ones are still delivered."""
        if self.closed:
            return
        self.closed = True
        self._queue.put_nowait(self._CLOSED)
        self._on_close(self)

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> ControllerState:
        item = await self._queue.get()
        if item is self._CLOSED:
            raise StopAsyncIteration
        return item  # type: ignore[return-value]


class RegenerationController:
    """Supervises the wiggle pipeline for one session."""

    def __init__(
        self,
        pipeline: Pipeline = run_pipeline,
        *,
        params: AnimationParameters | None = None,
        debounce_ms: int = DEBOUNCE_MS,
    ):
        """
        Initialize the controller.

        Args:
            pipeline: Coroutine function running one render-and-encode pass
            params: Initial parameters
            debounce_ms: Quiet period before a parameter change starts a run
        """
        self._pipeline = pipeline
        self.debounce_seconds = debounce_ms / 1000
        self._params = params or AnimationParameters()
        self._source: SourceImage | None = None
        self._artifact: EncodedArtifact | None = None
        self._state = ControllerState(ControllerStatus.IDLE, params=self._params)
        self._run: PipelineRun | None = None
        self._timer: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._next_run_id = 0
        self._subscriptions: list[Subscription] = []
        self._request_subscriptions: list[Subscription] = []
        self._listeners: list[Callable[[ControllerState], None]] = []
        self._settled = asyncio.Event()
        self._settled.set()

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def params(self) -> AnimationParameters:
        return self._params

    @property
    def active_run(self) -> PipelineRun | None:
        """The run that is neither cancelled nor finished, if any."""
        if self._run is not None and self._run.is_active:
            return self._run
        return None

    def subscribe(self) -> Subscription:
        """Receive every state transition from now on."""
        subscription = Subscription(self._subscriptions.remove)
        self._subscriptions.append(subscription)
        return subscription

    def add_listener(self, listener: Callable[[ControllerState], None]) -> Callable[[], None]:
        """Call ``listener`` synchronously on every transition; returns a remover."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def select_source(self, source: SourceImage) -> None:
        """Switch to a new source image, dropping any run and artifact."""
        self._cancel_timer()
        self._cancel_run()
        self._source = source
        self._artifact = None
        self._transition(ControllerState(ControllerStatus.IDLE, params=self._params))

    def request_generation(
        self, source: SourceImage, params: AnimationParameters | None = None
    ) -> Subscription:
        """
        Generate an animation for ``source``.

        The run starts on the next turn of the event loop, not synchronously.

        Args:
            source: Image to animate; a different image resets the controller first
            params: Parameters to use, the current ones if omitted

        Returns:
            Subscription to the resulting state transitions; it closes itself
            once the controller next settles in Idle, Done or Failed
        """
        subscription = self.subscribe()
        if source is not self._source:
            self.select_source(source)
        if params is not None:
            self._params = params
        self._enter_pending(0.0)
        self._request_subscriptions.append(subscription)
        return subscription

    def update_parameters(self, params: AnimationParameters) -> None:
        """
        Store new parameters and schedule a debounced regeneration.

        A run is only scheduled once there is something to regenerate: an
        existing artifact or a pending or running generation.
        """
        self._params = params
        if self._source is None:
            return
        if self._artifact is not None or self._state.status in (
            ControllerStatus.PENDING,
            ControllerStatus.RUNNING,
        ):
            self._enter_pending(self.debounce_seconds)

    def cancel_current(self) -> None:
        """Cancel any pending or running generation and go idle."""
        self._cancel_timer()
        self._cancel_run()
        self._artifact = None
        self._transition(ControllerState(ControllerStatus.IDLE, params=self._params))

    async def wait_until_settled(self) -> ControllerState:
        """Wait until the controller is Idle, Done or Failed."""
        await self._settled.wait()
        return self._state

    async def aclose(self) -> None:
        """Cancel everything, close subscriptions and wait for background tasks."""
        self._cancel_timer()
        self._cancel_run()
        for subscription in list(self._subscriptions):
            subscription.close()
        self._request_subscriptions.clear()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _enter_pending(self, delay: float) -> None:
        self._cancel_timer()
        self._transition(ControllerState(ControllerStatus.PENDING, params=self._params))
        self._timer = self._spawn(self._start_after(delay))

    async def _start_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self._timer = None
        self._start_run(self._params)

    def _start_run(self, params: AnimationParameters) -> None:
        self._cancel_run()
        self._next_run_id += 1
        run = PipelineRun(run_id=self._next_run_id, params=params)
        self._run = run
        logger.info("Starting run %d (%d frames)", run.run_id, params.frame_count)
        self._transition(ControllerState(ControllerStatus.RUNNING, params=params, run_id=run.run_id))
        self._spawn(self._execute(run, self._source))

    async def _execute(self, run: PipelineRun, source: SourceImage | None) -> None:
        try:
            if source is None:
                raise WigglerError("No source image selected")
            artifact = await self._pipeline(source, run.params, run.token)
        except PipelineCancelled as exc:
            logger.debug("Run %d stopped: %s", run.run_id, exc)
            return
        except Exception as exc:
            if not self._is_current(run):
                logger.debug("Discarding failure of stale run %d: %s", run.run_id, exc)
                return
            if isinstance(exc, WigglerError):
                logger.warning("Run %d failed: %s", run.run_id, exc)
            else:
                logger.exception("Run %d failed unexpectedly", run.run_id)
            self._finish(run)
            self._transition(
                ControllerState(ControllerStatus.FAILED, params=run.params, run_id=run.run_id, error=exc)
            )
            return
        finally:
            run.finished = True

        if not self._is_current(run):
            logger.debug("Discarding result of stale run %d", run.run_id)
            return
        self._finish(run)
        self._artifact = artifact
        logger.info("Run %d done: %d bytes", run.run_id, artifact.size_bytes)
        self._transition(
            ControllerState(ControllerStatus.DONE, params=run.params, run_id=run.run_id, artifact=artifact)
        )

    def _is_current(self, run: PipelineRun) -> bool:
        # A newer request waiting in Pending supersedes the run
        return (
            run is self._run
            and not run.token.is_cancelled
            and self._state.status is ControllerStatus.RUNNING
        )

    def _finish(self, run: PipelineRun) -> None:
        run.finished = True
        if self._run is run:
            self._run = None

    def _cancel_run(self) -> None:
        if self._run is not None:
            if self._run.is_active:
                logger.info("Cancelling run %d", self._run.run_id)
            self._run.token.cancel()
            self._run = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _spawn(self, coro: Awaitable[None]) -> "asyncio.Task[None]":
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _transition(self, state: ControllerState) -> None:
        self._state = state
        if state.is_settled:
            self._settled.set()
        else:
            self._settled.clear()
        for subscription in list(self._subscriptions):
            subscription.push(state)
        if state.is_settled:
            for subscription in self._request_subscriptions:
                subscription.close()
            self._request_subscriptions.clear()
        for listener in list(self._listeners):
            listener(state)
