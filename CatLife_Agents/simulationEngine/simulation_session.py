# simulation_session.py
# Keeps at most one presented result per profile when runs overlap.
import random
import logging
import threading
from typing import Dict, Optional, Tuple

#custom imports
from CatLife_Agents.states.catState import CatProfile, CareRoutine
from CatLife_Agents.states.simulationState import EnhancedSimulationResult
from CatLife_Agents.simulationEngine.simulation import END_AGE_MONTHS, run_simulation
from CatLife_Agents.simulationEngine.simulation_enhancer import (
    NotesFetcher, enhance_simulation_locally, upgrade_with_milestone_notes,
)

logger = logging.getLogger(__name__)


class SimulationRunGuard:
    """Per-profile generation counter.

    `begin()` hands out a token and makes every older token stale; results
    published with a stale token are dropped.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._generation: Dict[str, int] = {}
        self._results: Dict[str, Tuple[int, EnhancedSimulationResult]] = {}

    def begin(self, key: str) -> int:
        with self._lock:
            token = self._generation.get(key, 0) + 1
            self._generation[key] = token
            return token

    def is_current(self, key: str, token: int) -> bool:
        with self._lock:
            return self._generation.get(key) == token

    def publish(self, key: str, token: int, result: EnhancedSimulationResult) -> bool:
        with self._lock:
            if self._generation.get(key) != token:
                logger.debug("dropping superseded result for %s (token %s)", key, token)
                return False
            self._results[key] = (token, result)
            return True

    def latest(self, key: str) -> Optional[EnhancedSimulationResult]:
        with self._lock:
            entry = self._results.get(key)
            return entry[1] if entry else None


async def run_and_enhance(
    guard: SimulationRunGuard,
    key: str,
    profile: CatProfile,
    routine: CareRoutine,
    *,
    rng: Optional[random.Random] = None,
    fetcher: Optional[NotesFetcher] = None,
) -> Optional[EnhancedSimulationResult]:
    """Publish the local result immediately, then try to upgrade it.

    Returns whatever is presented for `key` once this run finishes; a newer
    run that started meanwhile wins. Raises SimulationInputError for a cat
    older than END_AGE_MONTHS.
    """
    token = guard.begin(key)
    base = run_simulation(profile, routine, profile.total_age_months(), END_AGE_MONTHS, rng=rng)
    local = enhance_simulation_locally(base, profile, routine)
    guard.publish(key, token, local)

    upgraded = await upgrade_with_milestone_notes(local, profile, routine, fetcher=fetcher)
    if upgraded != local:
        guard.publish(key, token, upgraded)
    return guard.latest(key)
