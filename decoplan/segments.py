"""
Dive profile segments.

A segment is a linear change of depth over time breathing one gas. A continuous
sequence of segments forms the dive profile: each segment starts at the depth
where the previous one ended. Segments planned by the user carry the index of
the tank they breathe from; calculated segments (ascent, stops) have none.
"""

from dataclasses import dataclass, replace
from typing import Iterator, List, Optional

from .gases import Gas


@dataclass
class Segment:
    """Time/depth/gas interval. Depths in meters, duration in seconds."""

    start_depth: float
    end_depth: float
    gas: Gas
    duration: float
    tank: Optional[int] = None

    @property
    def speed(self) -> float:
        """Meters per second, positive while descending."""
        if self.duration == 0:
            return 0.0
        return (self.end_depth - self.start_depth) / self.duration

    @property
    def average_depth(self) -> float:
        return (self.start_depth + self.end_depth) / 2

    @property
    def max_depth(self) -> float:
        return max(self.start_depth, self.end_depth)

    @property
    def min_depth(self) -> float:
        return min(self.start_depth, self.end_depth)

    @property
    def is_flat(self) -> bool:
        return self.start_depth == self.end_depth

    @property
    def user_defined(self) -> bool:
        return self.tank is not None

    def depth_at(self, elapsed: float) -> float:
        """Depth after the elapsed seconds since the segment start."""
        return self.start_depth + self.speed * elapsed

    def copy(self) -> "Segment":
        return replace(self)


class Segments:
    """Ordered continuous collection of segments."""

    def __init__(self, items: Optional[List[Segment]] = None):
        self._items: List[Segment] = list(items) if items else []

    @classmethod
    def from_collection(cls, segments: List[Segment]) -> "Segments":
        return cls([segment.copy() for segment in segments])

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index):
        return self._items[index]

    @property
    def items(self) -> List[Segment]:
        return list(self._items)

    def any(self) -> bool:
        return len(self._items) > 0

    def last(self) -> Segment:
        return self._items[-1]

    def add(
        self,
        start_depth: float,
        end_depth: float,
        gas: Gas,
        duration: float,
        tank: Optional[int] = None,
    ) -> Segment:
        segment = Segment(start_depth, end_depth, gas, duration, tank)
        self._items.append(segment)
        return segment

    def add_flat(self, gas: Gas, duration: float, tank: Optional[int] = None) -> Segment:
        """Stay at the depth of the last segment."""
        depth = self.last().end_depth if self.any() else 0.0
        return self.add(depth, depth, gas, duration, tank)

    def copy(self) -> "Segments":
        return Segments.from_collection(self._items)

    @property
    def duration(self) -> float:
        return sum(segment.duration for segment in self._items)

    @property
    def max_depth(self) -> float:
        return max((segment.max_depth for segment in self._items), default=0.0)

    @property
    def average_depth(self) -> float:
        """Time weighted average depth of the whole profile."""
        total = self.duration
        if total == 0:
            return 0.0
        weighted = sum(s.average_depth * s.duration for s in self._items)
        return weighted / total

    def deepest_part(self) -> List[Segment]:
        """Segments up to the end of the last one reaching the maximum depth."""
        max_depth = self.max_depth
        last_index = 0
        for index, segment in enumerate(self._items):
            if segment.end_depth == max_depth:
                last_index = index
        return self._items[:last_index + 1]

    def merge_flat(self, from_index: int = 0) -> List[Segment]:
        """
        Joins neighbouring flat segments at the same depth with the same gas
        and tank. Segments before from_index are kept as they are.
        """
        merged = self._items[:from_index]
        for segment in self._items[from_index:]:
            previous = merged[-1] if len(merged) > from_index else None
            if (previous is not None and previous.is_flat and segment.is_flat
                    and previous.end_depth == segment.start_depth
                    and previous.tank == segment.tank
                    and previous.gas.composition_equals(segment.gas)):
                previous.duration += segment.duration
            else:
                merged.append(segment)

        self._items = merged
        return list(merged)
