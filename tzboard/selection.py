# tzboard/selection.py
"""Pointer -> scale position mapping and hour-range selection.

The state machine is presentation plumbing: it only tracks positions. Any
row's TimeScaleConfig turns the selected positions into instants, and since
all rows share base_time the range is the same instant span on every row.
"""
from __future__ import annotations

import datetime as dt
import enum
import math
from typing import Optional, Tuple

from .model import HOURS_PER_DAY, TimeRange, TimeScaleConfig
from .scale import hour_at_position

_LAST = HOURS_PER_DAY - 1


def _clamp(position: int) -> int:
    return max(0, min(_LAST, int(position)))


def position_from_pointer(x: float, width: float, padding: float = 0.0) -> int:
    """Cell index under a pointer `x` pixels from the scale's left edge."""
    usable = float(width) - 2.0 * float(padding)
    if usable <= 0 or not math.isfinite(usable) or not math.isfinite(float(x)):
        return 0
    return _clamp(math.floor((float(x) - float(padding)) / usable * HOURS_PER_DAY))


def time_range(config: TimeScaleConfig, start_position: int, end_position: int) -> TimeRange:
    """Range covering cells start..end inclusive; end_time/end_hour are exclusive."""
    s, e = sorted((_clamp(start_position), _clamp(end_position)))
    return TimeRange(
        start_time=config.instant_at(s),
        end_time=config.instant_at(e) + dt.timedelta(hours=1),
        start_hour=hour_at_position(s, config.start_hour),
        end_hour=hour_at_position(e + 1, config.start_hour),
        start_position=s,
        end_position=e,
    )


class PointerState(enum.Enum):
    IDLE = "idle"
    HOVERING = "hovering"
    SELECTING = "selecting"
    DRAGGING_BORDER = "dragging-border"


class Border(enum.Enum):
    LEFT = "left"
    RIGHT = "right"


class SelectionMachine:
    """idle -> hovering -> selecting / dragging-border -> hovering."""

    def __init__(self) -> None:
        self.state = PointerState.IDLE
        self.hover_position: Optional[int] = None
        self.selection: Optional[Tuple[int, int]] = None
        self._anchor: Optional[int] = None
        self._border: Optional[Border] = None

    def _settle(self) -> None:
        self.state = PointerState.HOVERING if self.hover_position is not None else PointerState.IDLE
        self._anchor = None
        self._border = None

    def move(self, position: int) -> None:
        pos = _clamp(position)
        self.hover_position = pos

        if self.state is PointerState.SELECTING and self._anchor is not None:
            self.selection = tuple(sorted((self._anchor, pos)))  # type: ignore[assignment]
            return

        if self.state is PointerState.DRAGGING_BORDER and self.selection is not None:
            start, end = self.selection
            if self._border is Border.LEFT:
                if pos > end:
                    self._border = Border.RIGHT
                    self.selection = (end, pos)
                else:
                    self.selection = (pos, end)
            else:
                if pos < start:
                    self._border = Border.LEFT
                    self.selection = (pos, start)
                else:
                    self.selection = (start, pos)
            return

        self.state = PointerState.HOVERING

    def leave(self) -> None:
        # Ends any gesture in progress; the selected span survives.
        self.hover_position = None
        self._settle()

    def press(self, position: int) -> None:
        pos = _clamp(position)
        self.state = PointerState.SELECTING
        self.hover_position = pos
        self._anchor = pos
        self._border = None
        self.selection = (pos, pos)

    def press_border(self, side: Border) -> None:
        if self.selection is None:
            return
        self.state = PointerState.DRAGGING_BORDER
        self._border = Border(side)
        self._anchor = None

    def release(self) -> None:
        if self.state in (PointerState.SELECTING, PointerState.DRAGGING_BORDER):
            self._settle()

    def clear(self) -> None:
        self.selection = None
        self._settle()

    def range_for(self, config: TimeScaleConfig) -> Optional[TimeRange]:
        if self.selection is None:
            return None
        return time_range(config, *self.selection)
