"""Scan session state machine.

Orchestrates repeated frame delivery into the VIN pipeline:

    IDLE --start()--> ALIGNING --delay--> DETECTING --+--> MATCHED
                          |                   |        +--> TIMED_OUT
                          +-------------------+-------+--> CANCELLED

- ALIGNING: frames are accepted but ignored while the user positions the
  label (alignment delay).
- DETECTING: every ``frame_stride``-th frame is analysed.
- MATCHED / TIMED_OUT / CANCELLED are terminal; nothing delivered after a
  terminal state has any observable effect.

All mutable state (state, frame counter, result) is guarded by one lock.
Whichever terminal transition takes the lock first wins; the other is a
no-op. Sinks are invoked while holding the (re-entrant) lock so that
notifications are delivered in transition order. A failing sink is logged
and never propagates out of frame delivery or timer callbacks.

Example:
    >>> session = ScanSession(guide, analyzer, on_result=print)
    >>> session.start()
    >>> for frame in camera_frames():
    ...     session.on_image(frame, provider)
"""

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

import numpy as np

from .config_loader import SessionConfig
from .merger import FrameAnalyzer
from .provider import OCRProvider
from .types import (
    ErrorKind,
    GuideRegion,
    OutcomeStatus,
    ScanResult,
    ScanSessionState,
    ScanStatus,
    StatusUpdate,
    TextObservation,
    ValidationOutcome,
)

logger = logging.getLogger(__name__)

ResultSink = Callable[[ScanResult], None]
StatusSink = Callable[[StatusUpdate], None]
# Called as factory(interval_s, callback); the returned object must provide
# start() and cancel(), like threading.Timer.
TimerFactory = Callable[[float, Callable[[], None]], Any]


class ScanSession:
    """Single-use VIN scan session.

    Args:
        guide: Guide region the user aligns the VIN within (never mutated).
        analyzer: Frame analyzer (filter + merger) for the camera path.
        on_result: Receives the single ScanResult on MATCHED.
        on_status: Optional status sink for UI display.
        config: Timing configuration.
        verify_checksum: Overrides ``config.verify_checksum`` when given.
        timer_factory: Creates the alignment and timeout timers.
        clock: Produces the ``captured_at`` timestamp.
    """

    def __init__(
        self,
        guide: GuideRegion,
        analyzer: FrameAnalyzer,
        on_result: ResultSink,
        on_status: Optional[StatusSink] = None,
        config: Optional[SessionConfig] = None,
        verify_checksum: Optional[bool] = None,
        timer_factory: TimerFactory = threading.Timer,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.guide = guide
        self.analyzer = analyzer
        self.config = config or SessionConfig()
        self.verify_checksum = (
            self.config.verify_checksum if verify_checksum is None else verify_checksum
        )

        self._on_result = on_result
        self._on_status = on_status
        self._timer_factory = timer_factory
        self._clock = clock

        self._lock = threading.RLock()
        self._state = ScanSessionState.IDLE
        self._frame_counter = 0
        self._result: Optional[ScanResult] = None
        self._last_status: Optional[ScanStatus] = None
        self._alignment_timer: Optional[Any] = None
        self._timeout_timer: Optional[Any] = None

    @property
    def state(self) -> ScanSessionState:
        with self._lock:
            return self._state

    @property
    def result(self) -> Optional[ScanResult]:
        with self._lock:
            return self._result

    @property
    def frame_counter(self) -> int:
        with self._lock:
            return self._frame_counter

    @property
    def termination_reason(self) -> Optional[ErrorKind]:
        """ErrorKind.TIMEOUT once timed out, None otherwise."""
        with self._lock:
            if self._state == ScanSessionState.TIMED_OUT:
                return ErrorKind.TIMEOUT
            return None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin the session: IDLE -> ALIGNING, arm alignment and timeout timers.

        Raises:
            RuntimeError: If the session was already started.
        """
        with self._lock:
            if self._state != ScanSessionState.IDLE:
                raise RuntimeError(f"Cannot start session in state {self._state.value}")

            self._state = ScanSessionState.ALIGNING
            self._alignment_timer = self._arm(
                self.config.alignment_delay_s, self._on_alignment_elapsed
            )
            self._timeout_timer = self._arm(self.config.timeout_s, self._on_timeout)

            logger.info(
                f"Scan session started: alignment_delay={self.config.alignment_delay_s}s, "
                f"timeout={self.config.timeout_s}s, stride={self.config.frame_stride}, "
                f"verify_checksum={self.verify_checksum}"
            )
            self._emit(ScanStatus.ALIGNING)

    def cancel(self) -> bool:
        """Cancel from ALIGNING or DETECTING and release timers.

        Returns:
            True if the session was cancelled, False if it was not active.
        """
        with self._lock:
            if self._state not in (ScanSessionState.ALIGNING, ScanSessionState.DETECTING):
                return False

            self._state = ScanSessionState.CANCELLED
            self._release_timers()
            logger.info("Scan session cancelled")
            self._emit(ScanStatus.CANCELLED)
            return True

    def _on_alignment_elapsed(self) -> None:
        with self._lock:
            if self._state != ScanSessionState.ALIGNING:
                return
            self._state = ScanSessionState.DETECTING
            self._alignment_timer = None
            logger.debug("Alignment delay elapsed, detection enabled")
            self._emit(ScanStatus.SCANNING)

    def _on_timeout(self) -> None:
        with self._lock:
            if self._state not in (ScanSessionState.ALIGNING, ScanSessionState.DETECTING):
                return
            self._state = ScanSessionState.TIMED_OUT
            self._release_timers()
            logger.warning(f"Scan session timed out after {self.config.timeout_s}s")
            self._emit(ScanStatus.TIMED_OUT)

    # ------------------------------------------------------------------
    # Frame delivery
    # ------------------------------------------------------------------

    def on_frame(
        self, observations: Sequence[TextObservation]
    ) -> Optional[ValidationOutcome]:
        """Deliver one frame's OCR observations.

        Args:
            observations: Observations recognized in the frame.

        Returns:
            The frame's outcome if it was analysed and the session was still
            detecting, None if the frame was skipped or had no effect.
        """
        if not self._admit_frame():
            return None
        return self._process(observations)

    def on_image(
        self, frame: np.ndarray, provider: OCRProvider
    ) -> Optional[ValidationOutcome]:
        """Deliver a raw frame; OCR runs only for admitted frames.

        A failing provider is treated as a frame without observations.

        Args:
            frame: Captured image.
            provider: OCR provider invoked at most once for this frame.

        Returns:
            Same as ``on_frame``.
        """
        if not self._admit_frame():
            return None

        try:
            observations = provider.recognize(frame)
        except Exception as e:
            logger.warning(
                f"Text recognition failed ({ErrorKind.PROVIDER_UNAVAILABLE.value}): {e}"
            )
            observations = []

        return self._process(observations)

    def _admit_frame(self) -> bool:
        """Apply the detection gate and frame stride."""
        with self._lock:
            if self._state != ScanSessionState.DETECTING:
                return False
            self._frame_counter += 1
            return self._frame_counter % self.config.frame_stride == 0

    def _process(
        self, observations: Sequence[TextObservation]
    ) -> Optional[ValidationOutcome]:
        outcome = self.analyzer.analyze(
            observations, self.verify_checksum, guide=self.guide
        )

        with self._lock:
            # A terminal transition may have happened while analysing
            if self._state != ScanSessionState.DETECTING:
                return None

            if outcome.status == OutcomeStatus.VALID:
                self._state = ScanSessionState.MATCHED
                self._result = ScanResult(vin=outcome.vin, captured_at=self._clock())
                self._release_timers()
                logger.info(f"VIN matched: {outcome.vin}")
                self._emit(ScanStatus.MATCHED, vin=outcome.vin)
                try:
                    self._on_result(self._result)
                except Exception as e:
                    logger.error(f"Result sink failed for VIN {outcome.vin}: {e}")
            elif outcome.status == OutcomeStatus.INVALID_CHECKSUM:
                logger.debug(f"Checksum mismatch for '{outcome.vin}', still scanning")
                self._emit(ScanStatus.PLAUSIBLE_UNVERIFIED)
            else:
                self._emit(ScanStatus.SCANNING)

        return outcome

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _arm(self, interval: float, callback: Callable[[], None]) -> Any:
        timer = self._timer_factory(interval, callback)
        timer.daemon = True
        timer.start()
        return timer

    def _release_timers(self) -> None:
        for timer in (self._alignment_timer, self._timeout_timer):
            if timer is not None:
                timer.cancel()
        self._alignment_timer = None
        self._timeout_timer = None

    def _emit(self, status: ScanStatus, vin: Optional[str] = None) -> None:
        """Notify the status sink, collapsing consecutive duplicates."""
        if status == self._last_status:
            return
        self._last_status = status
        if self._on_status is None:
            return
        try:
            self._on_status(StatusUpdate(status=status, vin=vin))
        except Exception as e:
            logger.error(f"Status sink failed for {status.value}: {e}")
