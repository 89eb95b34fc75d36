"""Nearby-place selection with transition reporting."""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from typing import Callable, Iterable

from poi_proximity.geo import InvalidCoordinate, haversine_m, is_valid_coordinate
from poi_proximity.models import DEFAULT_THRESHOLD_M, Coordinate, Place

logger = logging.getLogger(__name__)


def _check_threshold(value: float, what: str) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{what} 必须是数字：{value!r}") from exc
    if not math.isfinite(v) or v < 0.0:
        raise ValueError(f"{what} 必须是非负有限数：{value!r}")
    return v


@dataclass(frozen=True, slots=True)
class ProximityConfig:
    """Parameters controlling proximity evaluation."""

    default_threshold_m: float = DEFAULT_THRESHOLD_M

    def __post_init__(self) -> None:
        _check_threshold(self.default_threshold_m, "default_threshold_m")


@dataclass(frozen=True, slots=True)
class ProximityState:
    """Snapshot of the engine's state."""

    active: Place | None = None
    last_position: Coordinate | None = None


@dataclass(frozen=True, slots=True)
class Transition:
    """A change of the active place. ``current is None`` means cleared."""

    previous: Place | None
    current: Place | None

    @property
    def cleared(self) -> bool:
        return self.current is None


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Outcome of one evaluate() call."""

    active: Place | None
    distance_m: float | None = None
    transition: Transition | None = None

    @property
    def changed(self) -> bool:
        return self.transition is not None


def _same_place(a: Place | None, b: Place | None) -> bool:
    if a is None or b is None:
        return a is b
    return a.name == b.name


class ProximityEngine:
    """Decide which place (if any) is nearby and report changes.

    The scan is first-match: places are checked in the order given and the
    first one within its effective threshold wins, even if a later one is
    closer. Places without a coordinate are skipped.

    Transitions are returned inside the EvaluationResult. If ``on_transition``
    is given it is also called with the same record, only when the active
    place changes. Concurrent callers see callbacks in the order their state
    swaps happened. The callback may call back into the engine.
    """

    def __init__(
        self,
        config: ProximityConfig | None = None,
        on_transition: Callable[[Transition], None] | None = None,
    ) -> None:
        self._cfg = config or ProximityConfig()
        self._on_transition = on_transition
        self._state = ProximityState()
        self._lock = threading.Lock()
        # Held from the state swap until the callback returns, so callbacks
        # arrive in the same order as the swaps they report.
        self._notify_lock = threading.RLock()

    @property
    def config(self) -> ProximityConfig:
        return self._cfg

    @property
    def state(self) -> ProximityState:
        with self._lock:
            return self._state

    @property
    def active(self) -> Place | None:
        return self.state.active

    def reset(self) -> None:
        """Return to the inactive state without emitting a transition."""

        with self._lock:
            self._state = ProximityState()

    def evaluate(
        self,
        position: Coordinate,
        places: Iterable[Place],
        threshold: float | None = None,
    ) -> EvaluationResult:
        """Evaluate one tick.

        Args:
            position: Current observer position.
            places: Candidate places in priority order.
            threshold: Default radius for places without their own override.
                None uses the configured default.

        Returns:
            EvaluationResult with the active place and the transition, if any.

        Raises:
            InvalidCoordinate: If position is not a valid coordinate.
            ValueError: If threshold is negative or not finite.
        """

        if not isinstance(position, Coordinate) or not is_valid_coordinate(position.latitude, position.longitude):
            raise InvalidCoordinate(f"无效的观察者位置：{position!r}")
        default_m = (
            self._cfg.default_threshold_m if threshold is None else _check_threshold(threshold, "threshold")
        )

        found: Place | None = None
        found_d: float | None = None
        for place in places:
            coord = place.coordinate
            if coord is None:
                continue
            if not isinstance(coord, Coordinate) or not is_valid_coordinate(coord.latitude, coord.longitude):
                logger.debug("跳过坐标格式错误的地点 %r：%r", place.name, coord)
                continue
            d = haversine_m(position.latitude, position.longitude, coord.latitude, coord.longitude)
            limit = default_m if place.radius_m is None else place.radius_m
            if d <= limit:
                found = place
                found_d = d
                break

        transition: Transition | None = None
        with self._notify_lock:
            with self._lock:
                previous = self._state.active
                self._state = ProximityState(active=found, last_position=position)

            if not _same_place(previous, found):
                transition = Transition(previous=previous, current=found)
                if found is None:
                    logger.info("离开 %r", previous.name if previous else None)
                else:
                    logger.info("进入 %r 附近（%.1fm）", found.name, found_d)
                if self._on_transition is not None:
                    self._on_transition(transition)

        return EvaluationResult(active=found, distance_m=found_d, transition=transition)
