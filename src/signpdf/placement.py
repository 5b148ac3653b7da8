"""Placement policies and stamp rectangle math."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Size of a page created without an explicit size (US Letter, in points)
DEFAULT_PAGE_SIZE = (612.0, 792.0)

DEFAULT_SCALE = 0.5

# Horizontal nudge applied to the stamp on an appended page
_APPEND_X_OFFSET = 75.0
# Vertical gap above the stamp's own height for fixed-offset placement
_FIXED_Y_GAP = 10.0


class PlacementPolicy(str, Enum):
    """Which pages receive the stamp, and where."""

    APPEND_BLANK_PAGE = "append-blank-page"
    STAMP_ALL_PAGES = "stamp-all-pages"
    CENTER_ALL_PAGES = "center-all-pages"

    @classmethod
    def parse(cls, value: str) -> PlacementPolicy:
        """Resolve a policy from its value, accepting ``_`` for ``-``."""
        normalized = value.strip().lower().replace("_", "-")
        try:
            return cls(normalized)
        except ValueError as e:
            choices = ", ".join(p.value for p in cls)
            raise ValueError(
                f"Unknown placement policy {value!r} (expected one of: {choices})"
            ) from e

    @property
    def appends_page(self) -> bool:
        return self is PlacementPolicy.APPEND_BLANK_PAGE


@dataclass(frozen=True)
class StampRect:
    """Target rectangle in page user space (origin bottom-left)."""

    x: float
    y: float
    width: float
    height: float


def scaled_dimensions(
    width: int | float,
    height: int | float,
    scale: float = DEFAULT_SCALE,
) -> tuple[float, float]:
    """Scale native pixel dimensions uniformly.

    Raises:
        ValueError: If the scale is not positive.
    """
    if scale <= 0:
        raise ValueError(f"Scale must be positive, got {scale}")
    return width * scale, height * scale


def append_page_rect(
    page_width: float,
    page_height: float,
    stamp_width: float,
    stamp_height: float,
) -> StampRect:
    """Rectangle for a stamp on a freshly appended page."""
    return StampRect(
        x=page_width / 2 - stamp_width / 2 + _APPEND_X_OFFSET,
        y=page_height / 2 - stamp_height,
        width=stamp_width,
        height=stamp_height,
    )


def fixed_offset_rect(stamp_width: float, stamp_height: float) -> StampRect:
    """Rectangle derived only from the stamp size, the same on every page."""
    return StampRect(
        x=stamp_width,
        y=stamp_height + _FIXED_Y_GAP,
        width=stamp_width,
        height=stamp_height,
    )


def centered_rect(
    page_width: float,
    page_height: float,
    stamp_width: float,
    stamp_height: float,
) -> StampRect:
    """Rectangle centered on the page."""
    return StampRect(
        x=page_width / 2 - stamp_width / 2,
        y=page_height / 2 - stamp_height / 2,
        width=stamp_width,
        height=stamp_height,
    )


def compute_rect(
    policy: PlacementPolicy,
    page_width: float,
    page_height: float,
    stamp_width: float,
    stamp_height: float,
) -> StampRect:
    """Compute the stamp rectangle for one target page under *policy*."""
    if policy is PlacementPolicy.APPEND_BLANK_PAGE:
        return append_page_rect(page_width, page_height, stamp_width, stamp_height)
    if policy is PlacementPolicy.STAMP_ALL_PAGES:
        # Page size is deliberately ignored here
        return fixed_offset_rect(stamp_width, stamp_height)
    return centered_rect(page_width, page_height, stamp_width, stamp_height)
