# flavor_vm.py
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from flavorpicker.config_service import load_config
from flavorpicker.flavor_models import Flavor, FlavorList, LoadError, LoadOutcome
from flavorpicker.flavor_service import FlavorService
from flavorpicker.flavor_store import FlavorListStore

logger = logging.getLogger(__name__)


def _call_inline(fn: Callable[[], None]) -> None:
    fn()


class PickFlavorViewModel:
    """
    UI-agnostic logic for the pick-flavor screen (the ViewModel in MVVM).

    Responsibilities:
      - Load configuration and build the FlavorService
      - Run the fetch -> decode -> replace -> notify load, one at a time
      - Own the flavor list (FlavorListStore) and the current selection
      - Emit events for the View to render

    The View should set these callbacks (all optional):
      - on_loading_started: Callable[[], None]
      - on_loading_ended:   Callable[[], None]
      - on_list_updated:    Callable[[FlavorList], None]
      - on_flavor_selected: Callable[[Flavor], None]
      - on_load_failed:     Callable[[LoadError], None]
      - on_status:          Callable[[str, bool], None]   # (message, is_error)
      - on_completed:       Callable[[LoadOutcome], None]

    Load results are applied through `dispatch`, which the View sets to run the
    callable on its own thread (Tk: root.after). A result whose generation is no
    longer current, or that arrives after close(), is dropped.
    """

    # ---------- lifecycle ----------
    def __init__(
        self,
        base_dir: str,
        service: Optional[FlavorService] = None,
        dispatch: Optional[Callable[[Callable[[], None]], None]] = None,
    ):
        self.base_dir = base_dir
        self.config = load_config(base_dir)

        # public events (the View may assign these)
        self.on_loading_started: Optional[Callable[[], None]] = None
        self.on_loading_ended: Optional[Callable[[], None]] = None
        self.on_list_updated: Optional[Callable[[FlavorList], None]] = None
        self.on_flavor_selected: Optional[Callable[[Flavor], None]] = None
        self.on_load_failed: Optional[Callable[[LoadError], None]] = None
        self.on_status: Optional[Callable[[str, bool], None]] = None
        self.on_completed: Optional[Callable[[LoadOutcome], None]] = None

        self.store = FlavorListStore()
        self.dispatch = dispatch or _call_inline
        self.svc = service or self._make_service()

        self._lock = threading.Lock()
        self._generation = 0
        self._loading = False
        self._closed = False
        self._selected: Optional[Flavor] = None
        self._selected_index: Optional[int] = None
        self._worker: Optional[threading.Thread] = None

    def close(self) -> None:
        """Screen teardown: any result still in flight is dropped when it lands."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._generation += 1
            self._loading = False
        self.svc.close()
        logger.debug("Flavor view model closed")

    # ---------- helpers ----------
    def _emit_status(self, msg: str, is_error: bool = False) -> None:
        logger.log(logging.ERROR if is_error else logging.INFO, msg)
        if self.on_status:
            self.on_status(msg, is_error)

    def _make_service(self) -> FlavorService:
        """Create a FlavorService instance based on current config."""
        return FlavorService(
            url=self.config.get("flavors_url"),
            timeout=float(self.config.get("request_timeout")),
            response_format=self.config.get("response_format", "auto"),
        )

    def _is_current(self, generation: int) -> bool:
        with self._lock:
            return not self._closed and generation == self._generation

    # ---------- queries ----------
    @property
    def is_loading(self) -> bool:
        with self._lock:
            return self._loading

    @property
    def flavors(self) -> FlavorList:
        return self.store.flavors

    @property
    def selected(self) -> Optional[Flavor]:
        return self._selected

    @property
    def selected_index(self) -> Optional[int]:
        """Row of the current selection; duplicate flavors can share a value but not a row."""
        return self._selected_index

    def count(self) -> int:
        return len(self.store)

    def flavor_at(self, index: int) -> Flavor:
        flavors = self.store.flavors
        if not 0 <= index < len(flavors):
            raise IndexError(f"No flavor at index {index} (have {len(flavors)}).")
        return flavors[index]

    # ---------- commands ----------
    def select(self, index: int) -> Flavor:
        """User picked the flavor at `index`."""
        flavor = self.flavor_at(index)
        self._select(flavor, index)
        return flavor

    def _select(self, flavor: Flavor, index: int) -> None:
        self._selected = flavor
        self._selected_index = index
        if self.on_flavor_selected:
            self.on_flavor_selected(flavor)

    def _begin_load(self) -> Optional[int]:
        """Claim the single in-flight slot; None if closed or already loading."""
        with self._lock:
            if self._closed or self._loading:
                return None
            self._generation += 1
            self._loading = True
            generation = self._generation
        if self.on_loading_started:
            self.on_loading_started()
        self._emit_status("Loading...")
        return generation

    def load_async(self) -> bool:
        """Kick off the flavor load in a background thread. False if one is already running."""
        generation = self._begin_load()
        if generation is None:
            logger.debug("load_async ignored: already loading or closed")
            return False
        self._worker = threading.Thread(target=self._load_worker, args=(generation,), daemon=True)
        self._worker.start()
        return True

    def load(self) -> LoadOutcome:
        """Run the load on the calling thread and return its outcome."""
        generation = self._begin_load()
        if generation is None:
            return LoadOutcome.failed(LoadError("A flavor load is already running or the screen is closed."))
        return self._load_worker(generation)

    def _load_worker(self, generation: int) -> LoadOutcome:
        """Fetch and decode; runs off the UI thread. Applying happens via dispatch."""
        try:
            flavors = self.svc.fetch_flavors()
            outcome = LoadOutcome(True, flavors)
        except LoadError as e:
            outcome = LoadOutcome.failed(e)
        except Exception as e:
            logger.exception("Unexpected error while loading flavors")
            outcome = LoadOutcome.failed(LoadError(str(e)))

        if not self._is_current(generation):
            logger.debug("Screen closed during flavor load; result not dispatched")
            return outcome
        try:
            self.dispatch(lambda: self._apply_outcome(generation, outcome))
        except Exception:
            # The UI loop may already be gone when close() races the dispatch
            if self._is_current(generation):
                raise
            logger.debug("Dispatch failed after close; dropping flavor load result", exc_info=True)
        return outcome

    def _apply_outcome(self, generation: int, outcome: LoadOutcome) -> None:
        if not self._is_current(generation):
            logger.debug("Dropping stale flavor load result (generation %d)", generation)
            return

        with self._lock:
            self._loading = False
        if self.on_loading_ended:
            self.on_loading_ended()

        if outcome.success:
            flavors = self.store.replace(outcome.flavors)
            if self.on_list_updated:
                self.on_list_updated(flavors)
            self._emit_status(f"Loaded {len(flavors)} flavors.", False)
            first = self.store.first()
            if first is not None:
                self._select(first, 0)
            else:
                self._selected = None
                self._selected_index = None
        else:
            self._emit_status(f"Could not load flavors: {outcome.error}", True)
            if self.on_load_failed:
                self.on_load_failed(outcome.error)

        if self.on_completed:
            self.on_completed(outcome)
