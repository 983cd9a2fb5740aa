# roadtrip_planner/api/overlay.py
"""Uncommitted user edits layered over a generated itinerary.

The overlay is the single place that decides which attractions a day shows:
original attractions minus the removed indexes, followed by the custom
attractions the user added and has not removed again. Views read
``effective_attractions`` / ``effective_days`` instead of filtering on their
own. Nothing touches the canonical itinerary until ``commit``.

Edits never fail: unknown days and out-of-range indexes are ignored.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from roadtrip_planner.api.models import Attraction, CustomAttraction, Day, Itinerary

logger = logging.getLogger(__name__)


class ItineraryOverlay:
    def __init__(self, itinerary: Itinerary):
        self.itinerary = itinerary
        self.removed_attraction_indexes: Dict[int, Set[int]] = {}
        self.custom_attractions: Dict[int, List[CustomAttraction]] = {}

    def _day(self, day_number: int) -> Optional[Day]:
        if 1 <= day_number <= len(self.itinerary.days):
            return self.itinerary.days[day_number - 1]
        return None

    @property
    def has_edits(self) -> bool:
        return any(self.removed_attraction_indexes.values()) or any(self.custom_attractions.values())

    # ------------------------------------------------------------------ #
    # Edits
    # ------------------------------------------------------------------ #
    def remove_attraction(self, day_number: int, index: int, is_custom: bool = False) -> None:
        """Hide one attraction.

        ``index`` points into the day's original attraction list, or into its
        custom list when ``is_custom`` is set. Removing twice is a no-op.
        """
        if is_custom:
            customs = self.custom_attractions.get(day_number, [])
            if 0 <= index < len(customs):
                customs[index].is_removed = True
            return

        day = self._day(day_number)
        if day is None or not 0 <= index < len(day.attractions):
            logger.debug(f"Ignoring removal of attraction {index} on day {day_number}")
            return
        self.removed_attraction_indexes.setdefault(day_number, set()).add(index)

    def add_custom_attraction(
        self, day_number: int, attraction: Union[CustomAttraction, Attraction, Mapping[str, Any]]
    ) -> Optional[CustomAttraction]:
        if self._day(day_number) is None:
            logger.debug(f"Ignoring custom attraction for unknown day {day_number}")
            return None

        if isinstance(attraction, CustomAttraction):
            custom = attraction.model_copy(update={"is_removed": False})
        elif isinstance(attraction, Attraction):
            custom = CustomAttraction(
                name=attraction.name,
                description=attraction.description,
                coordinates=attraction.coordinates,
            )
        else:
            data = {k: v for k, v in attraction.items() if k not in ("isRemoved", "is_removed")}
            custom = CustomAttraction.model_validate(data)

        self.custom_attractions.setdefault(day_number, []).append(custom)
        return custom

    def clear(self) -> None:
        self.removed_attraction_indexes.clear()
        self.custom_attractions.clear()

    # ------------------------------------------------------------------ #
    # Derived views
    # ------------------------------------------------------------------ #
    def effective_attractions(self, day_number: int) -> List[Attraction]:
        day = self._day(day_number)
        if day is None:
            return []
        removed = self.removed_attraction_indexes.get(day_number, set())
        kept = [a for i, a in enumerate(day.attractions) if i not in removed]
        added = [c.to_attraction() for c in self.custom_attractions.get(day_number, []) if not c.is_removed]
        return kept + added

    def effective_days(self) -> List[Day]:
        return [
            day.model_copy(update={"attractions": self.effective_attractions(day.day_number)})
            for day in self.itinerary.days
        ]

    def total_attractions(self) -> int:
        """Attraction count to display; the stored total while nothing is edited."""
        if not self.has_edits:
            return self.itinerary.total_attractions
        return sum(len(self.effective_attractions(day.day_number)) for day in self.itinerary.days)

    # ------------------------------------------------------------------ #
    # Commit
    # ------------------------------------------------------------------ #
    def commit(self) -> Itinerary:
        """Fold the edits into a new canonical itinerary and clear the overlay."""
        if not self.has_edits:
            return self.itinerary.model_copy(deep=True)

        committed = self.itinerary.model_copy(deep=True)
        for day in committed.days:
            day.attractions = [a.model_copy(deep=True) for a in self.effective_attractions(day.day_number)]
        committed.total_attractions = sum(len(day.attractions) for day in committed.days)

        self.itinerary = committed
        self.clear()
        return committed

    @classmethod
    def from_payload(cls, itinerary: Itinerary, payload: Mapping[str, Any]) -> "ItineraryOverlay":
        """Rebuild an overlay from the browser's JSON.

        Expected shape::

            {"removedAttractions": {"1": [2]},
             "customAttractions": {"1": [{"name": ..., "isRemoved": false}]}}
        """
        overlay = cls(itinerary)
        for day_key, indexes in (payload.get("removedAttractions") or {}).items():
            for index in indexes or []:
                overlay.remove_attraction(int(day_key), int(index), is_custom=False)

        for day_key, customs in (payload.get("customAttractions") or {}).items():
            day_number = int(day_key)
            for entry in customs or []:
                added = overlay.add_custom_attraction(day_number, entry)
                if added is not None and entry.get("isRemoved", entry.get("is_removed", False)):
                    added.is_removed = True
        return overlay


__all__ = ["ItineraryOverlay"]
