import logging
from typing import Any, Dict, List, Optional

from launchpad_app.schemas import ScenarioParameters
from launchpad_app.services.parameter_store import ParameterStore
from launchpad_app.services.simulation import simulate


logger = logging.getLogger(__name__)


class SimulationSession:
    """
    Keeps the series for a store's current parameters.

    Reading the series regenerates it from scratch whenever the parameters
    differ from the snapshot it was last built from; otherwise the previous
    series is returned as is.
    """

    def __init__(self, store: Optional[ParameterStore] = None):
        self.store = store if store is not None else ParameterStore()
        self.recomputations = 0
        self._snapshot: Optional[ScenarioParameters] = None
        self._series: Optional[List[Dict]] = None

    def update(self, partial: Dict[str, Any]) -> ScenarioParameters:
        return self.store.set(partial)

    def series(self) -> List[Dict]:
        snapshot = self.store.get()
        if self._series is None or snapshot != self._snapshot:
            self._series = simulate(snapshot)
            self._snapshot = snapshot
            self.recomputations += 1
            logger.debug("series regenerated (%d so far)", self.recomputations)
        return self._series

    @property
    def parameters(self) -> ScenarioParameters:
        return self.store.get()
