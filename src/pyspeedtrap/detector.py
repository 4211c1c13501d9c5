"""Speed trap proximity detector.

:class:`ProximityDetector` is the single owner of the published
:class:`DetectorState`. Every location sample goes through
:meth:`ProximityDetector.evaluate` (or its async twin), which

1. drops the sample if a scan is already running (no queueing),
2. drops the sample if the vehicle moved less than ``rescan_distance_m``
   since the last evaluated position (unless infinite proximity is on),
3. scores every trap within ``search_radius_m`` and keeps the best one,
4. replaces the published state wholesale.

Nothing raises out of the public operations: load failures and internal
errors resolve to the "no trap" state.
"""

from __future__ import annotations

import asyncio
import heapq
import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from pyspeedtrap._constants import DEFAULT_NEAREST_COUNT
from pyspeedtrap.config import DetectorConfig
from pyspeedtrap.exceptions import SpeedTrapConfigError
from pyspeedtrap.geo import haversine_distance
from pyspeedtrap.models._base import GeoPoint
from pyspeedtrap.models.context import DrivingContext
from pyspeedtrap.models.result import DetectorState, MatchResult, NearbyTrap, ScanOutcome
from pyspeedtrap.models.trap import TrapRecord
from pyspeedtrap.scoring import MatchScorer, is_better
from pyspeedtrap.store import TrapStore

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _ScanSettings:
    """Settings captured when a scan starts; later setter calls do not affect it."""

    alert_distance_m: float
    infinite_proximity: bool
    search_radius_m: float


class ProximityDetector:
    """Select the single most relevant speed trap for the current position.

    Usage::

        detector = ProximityDetector(config=DetectorConfig.from_env())
        detector.evaluate(DrivingContext.from_sample(25.04, 121.51, heading_deg=0, speed_mps=20))
        if detector.state.is_speeding:
            ...

    Parameters
    ----------
    store : TrapStore or None
        Trap source. Defaults to the bundled datasets (with any path
        overrides from *config*).
    config : DetectorConfig or None
        Initial settings.
    scorer : MatchScorer or None
        Candidate scorer. Defaults to one built from ``config.weights``.
    on_update : callable or None
        Called with the new :class:`DetectorState` after every publish.
    """

    def __init__(
        self,
        store: TrapStore | None = None,
        config: DetectorConfig | None = None,
        *,
        scorer: MatchScorer | None = None,
        on_update: Callable[[DetectorState], None] | None = None,
    ) -> None:
        self._config = config or DetectorConfig()
        self._store = store if store is not None else TrapStore.from_config(self._config)
        self._scorer = scorer or MatchScorer(self._config.weights)
        self._on_update = on_update
        self._alert_distance_m = self._config.alert_distance_m
        self._infinite_proximity = self._config.infinite_proximity
        self._state = DetectorState.empty()
        self._last_evaluated: GeoPoint | None = None
        self._scan_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Settings and published state
    # ------------------------------------------------------------------

    @property
    def state(self) -> DetectorState:
        return self._state

    @property
    def store(self) -> TrapStore:
        return self._store

    @property
    def is_scanning(self) -> bool:
        return self._scan_lock.locked()

    @property
    def last_evaluated_position(self) -> GeoPoint | None:
        return self._last_evaluated

    @property
    def alert_distance_m(self) -> float:
        return self._alert_distance_m

    @alert_distance_m.setter
    def alert_distance_m(self, value: float) -> None:
        if value < 0:
            raise SpeedTrapConfigError(f"alert_distance_m must be non-negative, got {value}")
        self._alert_distance_m = float(value)

    @property
    def infinite_proximity(self) -> bool:
        return self._infinite_proximity

    @infinite_proximity.setter
    def infinite_proximity(self, value: bool) -> None:
        self._infinite_proximity = bool(value)

    def reset(self) -> None:
        """Forget the last evaluated position and publish the empty state."""
        self._last_evaluated = None
        self._publish(DetectorState.empty())

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, context: DrivingContext) -> ScanOutcome:
        """Scan for the most relevant trap and publish the result."""
        if not self._scan_lock.acquire(blocking=False):
            return ScanOutcome.SKIPPED_BUSY
        try:
            settings = self._begin_scan(context)
            if settings is None:
                return ScanOutcome.THROTTLED
            try:
                records = self._store.load_all()
                best = self._select(context, records, settings)
            except Exception:
                _logger.warning("Speed trap scan failed", exc_info=True)
                self._publish(DetectorState.empty())
                return ScanOutcome.FAILED
            self._publish(self._build_state(context, best, settings))
            return ScanOutcome.SCANNED
        finally:
            self._scan_lock.release()

    async def async_evaluate(self, context: DrivingContext) -> ScanOutcome:
        """:meth:`evaluate` with the scoring pass run in the default executor.

        The busy guard is held across the whole scan, so samples arriving
        meanwhile (sync or async) are dropped with ``SKIPPED_BUSY``. If the
        awaiting task is cancelled the result is never published.
        """
        if not self._scan_lock.acquire(blocking=False):
            return ScanOutcome.SKIPPED_BUSY
        try:
            settings = self._begin_scan(context)
            if settings is None:
                return ScanOutcome.THROTTLED
            try:
                records = await self._store.async_load_all()
                loop = asyncio.get_running_loop()
                best = await loop.run_in_executor(None, self._select, context, records, settings)
            except Exception:
                _logger.warning("Speed trap scan failed", exc_info=True)
                self._publish(DetectorState.empty())
                return ScanOutcome.FAILED
            self._publish(self._build_state(context, best, settings))
            return ScanOutcome.SCANNED
        finally:
            self._scan_lock.release()

    def _begin_scan(self, context: DrivingContext) -> _ScanSettings | None:
        """Apply the movement throttle; ``None`` means skip. Caller holds the guard."""
        if not self._infinite_proximity and self._last_evaluated is not None:
            moved = haversine_distance(self._last_evaluated, context.position)
            if moved < self._config.rescan_distance_m:
                return None
        self._last_evaluated = context.position
        return _ScanSettings(
            alert_distance_m=self._alert_distance_m,
            infinite_proximity=self._infinite_proximity,
            search_radius_m=self._config.search_radius_m,
        )

    def _select(
        self,
        context: DrivingContext,
        records: Sequence[TrapRecord],
        settings: _ScanSettings,
    ) -> MatchResult | None:
        best: MatchResult | None = None
        for trap in records:
            distance = haversine_distance(context.position, trap.position)
            if not settings.infinite_proximity and distance > settings.search_radius_m:
                continue
            candidate = MatchResult(trap=trap, distance_m=distance, score=self._scorer.score(context, trap, distance))
            if is_better(candidate, best):
                best = candidate

        if best is None:
            _logger.debug("Checked %d speed traps, closest: N/A", len(records))
        else:
            _logger.debug(
                "Checked %d speed traps, closest: %dm (score %d, %s)",
                len(records),
                int(best.distance_m),
                best.score,
                self._scorer.breakdown(context, best.trap, best.distance_m),
            )
        return best

    @staticmethod
    def _build_state(
        context: DrivingContext,
        best: MatchResult | None,
        settings: _ScanSettings,
    ) -> DetectorState:
        if best is None:
            return DetectorState.empty()

        is_within_range = best.distance_m <= settings.alert_distance_m
        # A zero limit means unknown and never counts as speeding.
        if best.trap.has_speed_limit:
            speeding_amount = context.speed_kph - best.trap.speed_limit_kph
            is_speeding = (is_within_range or settings.infinite_proximity) and speeding_amount > 0
        else:
            speeding_amount = 0.0
            is_speeding = False

        return DetectorState(
            closest_trap=best,
            is_within_range=is_within_range,
            is_speeding=is_speeding,
            speeding_amount_kph=speeding_amount,
        )

    def _publish(self, state: DetectorState) -> None:
        self._state = state
        if self._on_update is None:
            return
        try:
            self._on_update(state)
        except Exception:
            _logger.warning("Detector on_update callback failed", exc_info=True)

    # ------------------------------------------------------------------
    # Nearest list
    # ------------------------------------------------------------------

    def rank_nearest(
        self,
        position: GeoPoint | DrivingContext,
        count: int = DEFAULT_NEAREST_COUNT,
    ) -> list[NearbyTrap]:
        """Return up to *count* traps ordered by plain distance.

        No scoring, no search radius and no effect on the published state
        or the movement throttle.
        """
        if count <= 0:
            return []
        origin = position.position if isinstance(position, DrivingContext) else position
        try:
            records = self._store.load_all()
            distances = [(haversine_distance(origin, trap.position), trap) for trap in records]
            nearest = heapq.nsmallest(count, distances, key=lambda pair: pair[0])
        except Exception:
            _logger.warning("Nearest speed trap lookup failed", exc_info=True)
            return []
        return [NearbyTrap(trap=trap, distance_m=distance) for distance, trap in nearest]

    async def async_rank_nearest(
        self,
        position: GeoPoint | DrivingContext,
        count: int = DEFAULT_NEAREST_COUNT,
    ) -> list[NearbyTrap]:
        """:meth:`rank_nearest` run in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.rank_nearest, position, count)
