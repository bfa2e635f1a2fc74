"""
Chart geometry for the donut (category share) and grouped bar (income vs
expense per month) charts.

Both functions only describe shapes. Donut slices are given as fractions
of the full turn plus radii on a unit circle; turning a fraction into an
angle (fraction * 2*pi from a fixed reference direction) is left to the
renderer. Bar rectangles use x growing left to right from the first group
and y growing upward from the value baseline, so any backend can map them
onto its own coordinate system.
"""

from dataclasses import dataclass
from numbers import Real
from typing import Optional, Sequence

from budget_core.log import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class DonutConfig:
    inner_radius: float = 0.5
    outer_radius: float = 0.8
    empty_color: str = "#e5e7eb"

    def __post_init__(self):
        if not 0 < self.inner_radius < self.outer_radius <= 1:
            raise ValueError(
                f"donut radii must satisfy 0 < inner < outer <= 1, "
                f"got inner={self.inner_radius} outer={self.outer_radius}"
            )


@dataclass(frozen=True)
class BarConfig:
    bar_width: float = 35.0
    bar_gap: float = 10.0     # between the two bars of a group
    group_gap: float = 10.0   # between neighbouring groups
    plot_height: float = 150.0

    def __post_init__(self):
        for name in ("bar_width", "bar_gap", "group_gap", "plot_height"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")

    @property
    def group_width(self) -> float:
        return self.bar_width * 2 + self.bar_gap

    @property
    def stride(self) -> float:
        return self.group_width + self.group_gap


@dataclass(frozen=True)
class DonutItem:
    label: str
    value: Real
    color: str


@dataclass(frozen=True)
class DonutSlice:
    label: str
    color: str
    start_fraction: float
    end_fraction: float
    inner_radius: float
    outer_radius: float
    is_large_arc: bool
    empty: bool = False  # the placeholder ring drawn when there is nothing to show

    @property
    def fraction(self) -> float:
        return self.end_fraction - self.start_fraction


@dataclass(frozen=True)
class BarItem:
    label: str
    a: Real  # e.g. income
    b: Real  # e.g. expense


@dataclass(frozen=True)
class BarRect:
    x: float
    y: float
    width: float
    height: float
    value: float


@dataclass(frozen=True)
class BarGroup:
    label: str
    x: float
    width: float
    a: BarRect
    b: BarRect

    @property
    def center(self) -> float:
        return self.x + self.width / 2


@dataclass(frozen=True)
class AxisTick:
    value: float
    y: float


@dataclass(frozen=True)
class BarLayout:
    groups: tuple[BarGroup, ...]
    ticks: tuple[AxisTick, ...]
    max_value: float
    width: float
    plot_height: float


def donut_slices(
    items: Sequence[DonutItem], config: Optional[DonutConfig] = None
) -> tuple[DonutSlice, ...]:
    """Turn (label, value, color) items into annulus slices, in the given order.

    Returns a single empty ring when the values add up to zero.
    """
    config = config or DonutConfig()
    values = [float(item.value) for item in items]
    if any(v < 0 for v in values):
        raise ValueError("donut values must be non-negative")

    total = sum(values)
    if total == 0:
        log.debug("donut_empty", items=len(values))
        return (DonutSlice(
            label="",
            color=config.empty_color,
            start_fraction=0.0,
            end_fraction=1.0,
            inner_radius=config.inner_radius,
            outer_radius=config.outer_radius,
            is_large_arc=True,
            empty=True,
        ),)

    slices = []
    running = 0.0
    start = 0.0
    for item, value in zip(items, values):
        running += value
        # the last slice closes the ring exactly at 1.0
        end = running / total
        slices.append(DonutSlice(
            label=item.label,
            color=item.color,
            start_fraction=start,
            end_fraction=end,
            inner_radius=config.inner_radius,
            outer_radius=config.outer_radius,
            is_large_arc=value / total > 0.5,
        ))
        start = end
    return tuple(slices)


def axis_ticks(max_value: float, plot_height: float) -> tuple[AxisTick, ...]:
    if max_value <= 0:
        return tuple(AxisTick(value=0.0, y=0.0) for _ in range(5))
    return tuple(
        AxisTick(value=max_value * i / 4, y=plot_height * i / 4)
        for i in range(5)
    )


def bar_layout(items: Sequence[BarItem], config: Optional[BarConfig] = None) -> BarLayout:
    """Lay out paired bars per period on one shared scale.

    Bar height is value / max * plot_height. With an all-zero (or empty)
    dataset every height and tick position is 0.
    """
    config = config or BarConfig()
    pairs = [(float(item.a), float(item.b)) for item in items]
    if any(v < 0 for pair in pairs for v in pair):
        raise ValueError("bar values must be non-negative")

    max_value = max((v for pair in pairs for v in pair), default=0.0)

    def height(value: float) -> float:
        if max_value == 0:
            return 0.0
        return value / max_value * config.plot_height

    groups = []
    for i, (item, (a, b)) in enumerate(zip(items, pairs)):
        x = i * config.stride
        groups.append(BarGroup(
            label=item.label,
            x=x,
            width=config.group_width,
            a=BarRect(x=x, y=0.0, width=config.bar_width, height=height(a), value=a),
            b=BarRect(
                x=x + config.bar_width + config.bar_gap,
                y=0.0,
                width=config.bar_width,
                height=height(b),
                value=b,
            ),
        ))

    width = len(groups) * config.stride - (config.group_gap if groups else 0.0)
    return BarLayout(
        groups=tuple(groups),
        ticks=axis_ticks(max_value, config.plot_height),
        max_value=max_value,
        width=width,
        plot_height=config.plot_height,
    )
