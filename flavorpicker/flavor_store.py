# flavor_store.py
import threading
from typing import Iterable, Optional

from flavorpicker.flavor_models import Flavor, FlavorList


class FlavorListStore:
    """
    Current ordered list of flavors for the screen.

    The list is only ever replaced as a whole, so readers always see either the
    previous snapshot or the new one. The view model is the only writer.
    """

    def __init__(self) -> None:
        self._flavors: FlavorList = ()
        self._lock = threading.Lock()

    @property
    def flavors(self) -> FlavorList:
        with self._lock:
            return self._flavors

    def replace(self, flavors: Iterable[Flavor]) -> FlavorList:
        snapshot = tuple(flavors)
        with self._lock:
            self._flavors = snapshot
        return snapshot

    def first(self) -> Optional[Flavor]:
        flavors = self.flavors
        return flavors[0] if flavors else None

    def __len__(self) -> int:
        return len(self.flavors)

    def __getitem__(self, index: int) -> Flavor:
        return self.flavors[index]
