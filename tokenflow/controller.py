"""
ReplayController: the single owner of all replay state.

Callers (a UI, the CLI, tests) only go through the controller. Each
operation applies atomically and returns a fresh ControllerView. Any
engine error is kept as the one current error message and re-raised.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Generator, List, Optional, Tuple

from .config import ALL_CASES, EngineConfig, speed_interval
from .core.errors import EmptyTraceError, TokenflowError
from .core.events import TraceEvent
from .core.index import IOIndex
from .core.net import Arc, Node, PetriNet, Place, Transition
from .core.state import ReplaySnapshot
from .log.cases import case_ids as distinct_case_ids
from .log.cases import filter_trace
from .log.parser import parse_trace
from .logging_config import get_logger
from .model.document import dumps_model, loads_model
from .model.edit import GraphEditModel, Position
from .model.sample import sample_net
from .replay.engine import ReplayEngine
from .replay.playback import Player
from .replay.scheduler import AsyncioScheduler, Scheduler

MODE_VISUALIZE = "visualize"
MODE_EDIT = "edit"
MODES = (MODE_VISUALIZE, MODE_EDIT)


@dataclass(frozen=True)
class ControllerView:
    """
    Everything the editing/visualization layer reads.

    Fields:
        tokens: place id -> token count
        active_transition_id: Transition to highlight (visualize mode only)
        trace: Active (filtered) trace
        current_step: Position in the active trace
        trace_length: Length of the active trace
        trace_loaded: Whether a trace is loaded
        case_ids: Distinct case ids of the full trace
        selected_case: Current case filter ("all" for every case)
        playing: Whether playback is running
        interval_ms: Playback interval
        mode: "visualize" or "edit"
        error: Current error message, if any
    """
    tokens: Dict[str, int]
    active_transition_id: Optional[str]
    trace: Tuple[TraceEvent, ...]
    current_step: int
    trace_length: int
    trace_loaded: bool
    case_ids: Tuple[str, ...]
    selected_case: str
    playing: bool
    interval_ms: int
    mode: str
    error: Optional[str]


class ReplayController:
    """
    Owns the net, its index, the loaded trace and the replay engine.

    Usage:
        ctl = ReplayController()           # sample net
        ctl.load_trace(open("log.csv").read())
        ctl.select_case("case-1")
        ctl.step_forward()
        view = ctl.view()
    """

    def __init__(
        self,
        net: Optional[PetriNet] = None,
        config: Optional[EngineConfig] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.config = config or EngineConfig.from_env()
        self.net = net if net is not None else sample_net()
        self.index = IOIndex.build(self.net)
        self.editor = GraphEditModel(self.net)

        self._full_trace: Optional[Tuple[TraceEvent, ...]] = None
        self._case_ids: Tuple[str, ...] = ()
        self._selected_case = ALL_CASES
        self._error: Optional[str] = None
        self.mode = MODE_VISUALIZE
        self._log = get_logger(__name__, case_id=self._selected_case)

        self.engine = ReplayEngine(self.net, self.index, self.config)
        self.player = Player(
            self.engine,
            scheduler or AsyncioScheduler(),
            self.config.interval_ms,
            on_step=self._on_step,
        )

    @contextmanager
    def _surface_errors(self, context: Optional[str] = None) -> Generator[None, None, None]:
        try:
            yield
        except (TokenflowError, ValueError) as e:
            self._error = str(e)
            if context:
                self._log.warning("%s: %s", context, e)
            raise

    def _on_step(self, snapshot: ReplaySnapshot) -> None:
        self._error = snapshot.last_error

    # --- Net ---

    def load_net(self, net: PetriNet) -> ControllerView:
        """
        Install a net. The current net stays in place if indexing fails.

        Raises:
            IntegrityError / ArcEndpointError: The net is inconsistent
        """
        with self._surface_errors("Net rejected"):
            index = IOIndex.build(net)
        self.player.cancel()
        self.net, self.index = net, index
        self.editor = GraphEditModel(net)
        self.engine.load_net(net, index)
        self._error = None
        self._log.info("Loaded net: %d places, %d transitions, %d arcs",
                       len(net.places), len(net.transitions), len(net.arcs))
        return self.view()

    def import_model(self, text: str) -> ControllerView:
        """
        Replace the net with an interchange document.

        Raises:
            ModelStructureError: Not a net document; the current net is kept
        """
        with self._surface_errors("Model import rejected"):
            net = loads_model(text)
        return self.load_net(net)

    def export_model(self) -> str:
        return dumps_model(self.net)

    def _net_changed(self) -> None:
        self.index = IOIndex.build(self.net)
        self.player.cancel()
        self.engine.load_net(self.net, self.index)
        self._error = None

    # --- Trace ---

    def load_trace(self, content: str) -> ControllerView:
        """
        Parse and install a trace log, selecting all cases.

        On failure the trace is unloaded and the error becomes current.

        Raises:
            EmptyTraceError: No non-blank line in the content
            FileFormatError: Malformed content
        """
        self.player.cancel()
        try:
            with self._surface_errors("Trace rejected"):
                events = parse_trace(content)
                if not events:
                    raise EmptyTraceError("The file is empty or in an unsupported format")
        except TokenflowError:
            self._install_trace(None)
            raise
        self._install_trace(tuple(events))
        self._error = None
        self._log.info("Loaded trace: %d events, %d case(s)", len(events), len(self._case_ids))
        return self.view()

    def clear_trace(self) -> ControllerView:
        self.player.cancel()
        self._install_trace(None)
        return self.view()

    def _install_trace(self, events: Optional[Tuple[TraceEvent, ...]]) -> None:
        self._full_trace = events
        self._case_ids = tuple(distinct_case_ids(events)) if events else ()
        self._set_case(ALL_CASES)

    def _set_case(self, case_id: str) -> None:
        self._selected_case = case_id
        self._log = get_logger(__name__, case_id=case_id)
        filtered = filter_trace(self._full_trace, case_id) if self._full_trace is not None else None
        self.engine.load_trace(filtered, self._case_ids, case_id)

    def select_case(self, case_id: str) -> ControllerView:
        """Filter the active trace by case ("all" for every case) and reset."""
        self.player.cancel()
        self._set_case(case_id)
        self._error = None
        self._log.info("Selected case; %d event(s) to replay", self.engine.trace_length)
        return self.view()

    # --- Replay ---

    def step_forward(self) -> ControllerView:
        self.player.pause()
        with self._surface_errors():
            self.engine.advance()
        self._error = None
        return self.view()

    def step_backward(self) -> ControllerView:
        self.player.pause()
        with self._surface_errors():
            self.engine.retreat()
        self._error = None
        return self.view()

    def play(self) -> ControllerView:
        if self.mode != MODE_VISUALIZE:
            return self.view()
        self.player.play()
        return self.view()

    def pause(self) -> ControllerView:
        self.player.pause()
        return self.view()

    def toggle_play(self) -> ControllerView:
        return self.pause() if self.engine.playing else self.play()

    def set_interval(self, interval_ms: int) -> ControllerView:
        with self._surface_errors():
            self.player.set_interval(interval_ms)
        return self.view()

    def set_speed(self, name: str) -> ControllerView:
        with self._surface_errors():
            interval = speed_interval(name)
        return self.set_interval(interval)

    def reset(self) -> ControllerView:
        self.player.cancel()
        self.engine.reset()
        self._error = None
        return self.view()

    def set_mode(self, mode: str) -> ControllerView:
        """Switch between "visualize" and "edit"; stops and resets the replay."""
        if mode not in MODES:
            raise ValueError(f"Unknown mode {mode!r} (choose from {', '.join(MODES)})")
        self.mode = mode
        return self.reset()

    def clear_error(self) -> ControllerView:
        self._error = None
        self.engine.clear_error()
        return self.view()

    # --- Edits ---

    def add_place(self, label: Optional[str] = None, position: Position = (0.0, 0.0),
                  initial_tokens: int = 0) -> Place:
        with self._surface_errors():
            place = self.editor.add_place(label, position, initial_tokens)
        self._net_changed()
        return place

    def add_transition(self, label: Optional[str] = None, position: Position = (0.0, 0.0)) -> Transition:
        with self._surface_errors():
            transition = self.editor.add_transition(label, position)
        self._net_changed()
        return transition

    def add_arc(self, source_id: str, target_id: str) -> Arc:
        with self._surface_errors():
            arc = self.editor.add_arc(source_id, target_id)
        self._net_changed()
        return arc

    def delete_node(self, node_id: str) -> List[Arc]:
        with self._surface_errors():
            removed = self.editor.delete_node(node_id)
        self._net_changed()
        return removed

    def delete_arc(self, arc_id: str) -> Arc:
        with self._surface_errors():
            arc = self.editor.delete_arc(arc_id)
        self._net_changed()
        return arc

    def move_node(self, node_id: str, x: float, y: float) -> Node:
        with self._surface_errors():
            node = self.editor.move_node(node_id, x, y)
        self._net_changed()
        return node

    def update_node(self, node_id: str, label: Optional[str] = None,
                    initial_tokens: Optional[int] = None) -> Node:
        with self._surface_errors():
            node = self.editor.update_node(node_id, label=label, initial_tokens=initial_tokens)
        self._net_changed()
        return node

    # --- View ---

    def view(self) -> ControllerView:
        snapshot = self.engine.snapshot()
        return ControllerView(
            tokens=snapshot.tokens.to_dict(),
            active_transition_id=snapshot.active_transition_id if self.mode == MODE_VISUALIZE else None,
            trace=self.engine.trace or (),
            current_step=snapshot.current_step,
            trace_length=snapshot.trace_length,
            trace_loaded=self._full_trace is not None,
            case_ids=self._case_ids,
            selected_case=self._selected_case,
            playing=snapshot.playing,
            interval_ms=self.player.interval_ms,
            mode=self.mode,
            error=self._error,
        )
