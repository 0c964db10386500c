"""
ReplayEngine: forward/backward firing of a trace against a net.

The engine owns the token table and the step position. Each step is
computed on immutable values and committed in one assignment, so an
observer only ever sees the state before or after a step.
"""

import logging
from typing import NoReturn, Optional, Sequence, Tuple

from ..config import ALL_CASES, EngineConfig
from ..core.errors import (
    ReplayError,
    TokenUnderflowError,
    TransitionNotEnabledError,
    TransitionNotFoundError,
)
from ..core.events import TraceEvent
from ..core.firing import fire, is_enabled, missing_inputs, unfire
from ..core.index import IOIndex, TransitionIO
from ..core.net import PetriNet
from ..core.state import ReplaySnapshot, TokenState
from .. import metrics

logger = logging.getLogger(__name__)


class ReplayEngine:
    """
    Token replay state machine.

    State:
        tokens: Current TokenState
        current_step: Events fired so far (0 <= current_step <= len(trace))
        playing: Whether playback is running
        last_error: Message of the current error, if any

    Usage:
        engine = ReplayEngine(net, IOIndex.build(net))
        engine.load_trace(events, case_ids=["c1", "c2"])
        engine.advance()
        engine.retreat()
    """

    def __init__(self, net: PetriNet, index: IOIndex, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()
        self._net = net
        self._index = index
        self._trace: Optional[Tuple[TraceEvent, ...]] = None
        self._case_ids: Tuple[str, ...] = ()
        self._selected_case = ALL_CASES

        self.tokens = TokenState()
        self.current_step = 0
        self.playing = False
        self.last_error: Optional[str] = None
        self.initialize()

    @property
    def trace(self) -> Optional[Tuple[TraceEvent, ...]]:
        """Active (filtered) trace, or None when no trace is loaded."""
        return self._trace

    @property
    def trace_length(self) -> int:
        return len(self._trace) if self._trace is not None else 0

    @property
    def finished(self) -> bool:
        return self.current_step >= self.trace_length

    def load_net(self, net: PetriNet, index: IOIndex) -> ReplaySnapshot:
        """Install a net and its freshly built index, then reinitialize."""
        self._net = net
        self._index = index
        return self.initialize()

    def load_trace(
        self,
        trace: Optional[Sequence[TraceEvent]],
        case_ids: Sequence[str] = (),
        selected_case: str = ALL_CASES,
    ) -> ReplaySnapshot:
        """
        Install the active trace, then reinitialize.

        Args:
            trace: Filtered trace to replay (None unloads the trace)
            case_ids: Distinct case ids of the full trace
            selected_case: Case the trace was filtered by
        """
        self._trace = tuple(trace) if trace is not None else None
        self._case_ids = tuple(case_ids)
        self._selected_case = selected_case
        return self.initialize()

    def initial_tokens(self) -> TokenState:
        """
        Token table at step 0.

        With a trace loaded, a place labelled like the start label gets one
        token per distinct case (at least one) when replaying all cases, and
        a single token when replaying one case. Every other place gets the
        model's initial tokens.
        """
        start = self.config.start_label.lower()
        counts = {}
        for place in self._net.places:
            if self._trace is not None and place.label.lower() == start:
                if self._selected_case == ALL_CASES:
                    counts[place.id] = len(self._case_ids) or 1
                else:
                    counts[place.id] = 1
            else:
                counts[place.id] = place.initial_tokens
        return TokenState.from_counts(self._index.place_slots, counts)

    def initialize(self) -> ReplaySnapshot:
        """Stop playback, rewind to step 0, clear the error and reseed tokens."""
        self.tokens = self.initial_tokens()
        self.current_step = 0
        self.playing = False
        self.last_error = None
        return self.snapshot()

    def reset(self) -> ReplaySnapshot:
        logger.debug("Replay reset")
        return self.initialize()

    def clear_error(self) -> None:
        self.last_error = None

    def _fail(self, error: ReplayError) -> NoReturn:
        self.last_error = str(error)
        self.playing = False
        metrics.track_error(type(error).__name__)
        logger.warning("%s", error)
        raise error

    def _resolve(self, position: int) -> Tuple[TraceEvent, Optional[TransitionIO]]:
        event = self._trace[position]  # type: ignore[index]
        return event, self._index.resolve(event.activity)

    def advance(self) -> ReplaySnapshot:
        """
        Fire the transition matched to the event at current_step.

        At the end of the trace (or with no trace) this only stops playback.

        Raises:
            TransitionNotFoundError: No transition carries the activity label
            TransitionNotEnabledError: An input place lacks a token
        """
        if self._trace is None or self.finished:
            self.playing = False
            return self.snapshot()

        step = self.current_step + 1
        event, io = self._resolve(self.current_step)
        if io is None:
            self._fail(TransitionNotFoundError(
                f'Step {step}: no transition labelled "{event.activity}" in the net',
                step=step, activity=event.activity,
            ))
        if not is_enabled(self.tokens, io):
            self._fail(TransitionNotEnabledError(
                f'Step {step}: transition "{io.label}" is not enabled '
                f"(missing token in {', '.join(missing_inputs(self.tokens, io))})",
                step=step, activity=event.activity,
            ))

        self.tokens, self.current_step = fire(self.tokens, io), step
        self.last_error = None
        metrics.track_fire("forward")
        return self.snapshot()

    def retreat(self) -> ReplaySnapshot:
        """
        Undo the firing of the event at current_step - 1.

        Enablement is not rechecked. An output place that no longer holds the
        token being taken back raises TokenUnderflowError, or is floored at
        zero when the config clamps reverse underflow.

        Raises:
            TransitionNotFoundError: The event no longer matches a transition
            TokenUnderflowError: An output place would drop below zero
        """
        if self._trace is None or self.current_step <= 0:
            return self.snapshot()

        step = self.current_step
        event, io = self._resolve(step - 1)
        if io is None:
            self._fail(TransitionNotFoundError(
                f'Cannot undo step {step}: no transition labelled "{event.activity}" in the net',
                step=step, activity=event.activity,
            ))

        clamp = self.config.clamp_reverse_underflow
        tokens, short = unfire(self.tokens, io, clamp=clamp)
        if short and not clamp:
            self._fail(TokenUnderflowError(
                f'Cannot undo step {step}: transition "{io.label}" output place(s) '
                f"{', '.join(short)} hold no token to take back",
                step=step, activity=event.activity,
            ))
        if short:
            logger.warning("Undo of step %d clamped place(s) %s at zero tokens", step, ", ".join(short))

        self.tokens, self.current_step = tokens, step - 1
        self.last_error = None
        metrics.track_fire("backward")
        return self.snapshot()

    def active_transition_id(self) -> Optional[str]:
        """Transition matched to the event at current_step, for highlighting."""
        if self._trace is None or self.finished:
            return None
        return self._index.label_to_id.get(self._trace[self.current_step].activity)

    def snapshot(self) -> ReplaySnapshot:
        return ReplaySnapshot(
            tokens=self.tokens,
            current_step=self.current_step,
            trace_length=self.trace_length,
            playing=self.playing,
            last_error=self.last_error,
            active_transition_id=self.active_transition_id(),
        )
