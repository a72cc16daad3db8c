"""
Binary (half interval) search of the boundary of a monotone condition.

Used to find the maximum bottom time without scanning every second. The probe
is side effecting: do_work has to rebuild all state the condition reads.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Tuple

logger = logging.getLogger(__name__)


@dataclass
class SearchContext:
    initial_value: float
    max_value: float
    step: float
    do_work: Callable[[float], None]
    meets_condition: Callable[[], bool]


class BinaryIntervalSearch:
    """
    Finds the highest value for which the condition still holds.

    The condition has to be true for all values below some threshold and
    false above it.
    """

    def search(self, context: SearchContext) -> float:
        if context.max_value < context.initial_value:
            raise ValueError("Max value can't be smaller than initial value")

        if context.step > context.max_value - context.initial_value:
            raise ValueError("Step can't be larger than range")

        left, right = self._find_initial_limit(context)
        return self._search_inside_interval(context, left, right)

    def _search_inside_interval(self, context: SearchContext, left: float, right: float) -> float:
        while right - left > 1:
            middle = round(left + (right - left) / 2)
            context.do_work(middle)

            if context.meets_condition():
                left = middle
            else:
                right = middle

        logger.debug(f"Search finished at {left}")
        return left

    def _find_initial_limit(self, context: SearchContext) -> Tuple[float, float]:
        """Guess the right limit by adding steps until the condition fails."""
        current = context.initial_value
        context.do_work(current)

        while context.meets_condition() and current <= context.max_value:
            current += context.step
            context.do_work(current)

        left = max(current - context.step, context.initial_value)
        right = min(current, context.max_value)

        # stepped over the maximum while the condition still held
        if current > context.max_value:
            context.do_work(context.max_value)
            if context.meets_condition():
                left = context.max_value

        logger.debug(f"Initial search interval [{left}, {right}]")
        return left, right
