"""
Slot Generation

Enumerates candidate start times inside a resolved window.
"""

from typing import List

from app.scheduling.domain import Open, WindowResult


def generate_slots(
    window: WindowResult,
    interval_minutes: int,
    service_duration_minutes: int,
) -> List[int]:
    """
    Generate candidate start times for a window.

    Args:
        window: Open(start, end) or Closed
        interval_minutes: step between consecutive candidates
        service_duration_minutes: duration the booked service needs

    Returns:
        list[int]: start times in minutes since midnight, ascending. A start
        is only emitted when the whole service fits before the window closes.
    """
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be positive")
    if service_duration_minutes <= 0:
        raise ValueError("service_duration_minutes must be positive")

    if not isinstance(window, Open):
        return []

    slots = []
    current = window.start

    while current + service_duration_minutes <= window.end:
        slots.append(current)
        current += interval_minutes

    return slots
