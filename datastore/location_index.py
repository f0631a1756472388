from __future__ import annotations

from typing import Dict, Iterator, List

from models.records import SensorKey


class LocationIndex:
    """Groups sensor keys by their declared location.

    Within a location the most recently added sensor comes first; locations
    keep the order in which they were first seen.
    """

    def __init__(self) -> None:
        self._groups: Dict[str, List[SensorKey]] = {}

    def add(self, location: str, key: SensorKey) -> None:
        group = self._groups.setdefault(location, [])
        group.insert(0, key)

    def locations(self) -> List[str]:
        return list(self._groups)

    def sensors_in(self, location: str) -> List[SensorKey]:
        return list(self._groups.get(location, ()))

    def __iter__(self) -> Iterator[str]:
        return iter(self._groups)

    def __contains__(self, location: object) -> bool:
        return location in self._groups

    def __len__(self) -> int:
        return len(self._groups)
