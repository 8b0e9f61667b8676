from __future__ import annotations

from abc import ABC, abstractmethod
import logging
import math
from typing import Any, Hashable, Iterable, Sequence

import numpy as np

from trellis_plot.broadcaster import Broadcaster
from trellis_plot.domainer import Domainer
from trellis_plot.scales import generate_nice_ticks, nice_domain
from trellis_plot.tick_generators import TickGenerator, default_tick_generator
from trellis_ui.config import DEFAULT_CONFIG, EngineConfig

LOGGER = logging.getLogger(__name__)

ExtentKey = tuple[str, str]

PALETTE: tuple[str, ...] = (
    "#5279c7",  # indigo
    "#fd373e",  # coral red
    "#63c261",  # fern
    "#fad419",  # bright sun
    "#2c2b6f",  # jacarta
    "#ff7939",  # burning orange
    "#db2e65",  # cerise red
    "#99ce50",  # conifer
    "#962565",  # royal heath
    "#06cccc",  # robin's egg blue
)


class Scale(ABC):
    """Maps a domain onto a range.

    Plots report per-attribute extents with `update_extent`; while autodomain
    is on, every report recomputes the domain. `set_domain` pins the domain and
    turns autodomain off until `auto_domain()` is called. Every domain change
    is broadcast to `broadcaster` listeners.
    """

    def __init__(self, *, config: EngineConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG
        self._domain: tuple[Any, ...] = ()
        self._range: tuple[Any, ...] = (0.0, 1.0)
        self._auto_domain_enabled = True
        self._extents: dict[ExtentKey, list[Any]] = {}
        self.broadcaster = Broadcaster(self)

    @staticmethod
    def coerce(value: Any) -> Any:
        return value

    def domain(self) -> tuple[Any, ...]:
        return self._domain

    def set_domain(self, values: Iterable[Any]) -> "Scale":
        domain = self._check_domain(values)
        if domain is None:
            return self
        self._auto_domain_enabled = False
        self._set_domain(domain)
        return self

    @property
    def auto_domain_enabled(self) -> bool:
        return self._auto_domain_enabled

    def auto_domain(self) -> "Scale":
        self._auto_domain_enabled = True
        self._set_domain(self._compute_auto_domain())
        return self

    def range(self) -> tuple[Any, ...]:
        return self._range

    def set_range(self, values: Iterable[Any]) -> "Scale":
        self._range = tuple(values)
        return self

    @abstractmethod
    def scale(self, value: Any) -> Any:
        raise NotImplementedError

    def update_extent(self, provider_key: str, attr: str, extent: Sequence[Any]) -> "Scale":
        self._extents[(provider_key, attr)] = list(extent)
        self._auto_domain_if_enabled()
        return self

    def remove_extent(self, provider_key: str, attr: str) -> "Scale":
        if self._extents.pop((provider_key, attr), None) is not None:
            self._auto_domain_if_enabled()
        return self

    def extents(self) -> list[list[Any]]:
        return [list(extent) for extent in self._extents.values()]

    def _auto_domain_if_enabled(self) -> None:
        if self._auto_domain_enabled:
            self._set_domain(self._compute_auto_domain())

    @abstractmethod
    def _compute_auto_domain(self) -> tuple[Any, ...]:
        raise NotImplementedError

    def _check_domain(self, values: Iterable[Any]) -> tuple[Any, ...] | None:
        return tuple(values)

    def _set_domain(self, domain: tuple[Any, ...]) -> None:
        self._domain = domain
        self.broadcaster.broadcast()


class LinearScale(Scale):
    """Continuous numeric scale with a pluggable domainer and tick generator."""

    def __init__(self, *, config: EngineConfig | None = None) -> None:
        super().__init__(config=config)
        self._domain = self.default_extent()
        self._domainer = Domainer(config=self._config)
        self._tick_generator: TickGenerator = default_tick_generator
        self._num_ticks = self._config.num_ticks
        self._clamp = False

    @staticmethod
    def coerce(value: Any) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return math.nan

    def default_extent(self) -> tuple[float, float]:
        return (0.0, 1.0)

    def domain(self) -> tuple[float, float]:
        return self._domain  # type: ignore[return-value]

    def set_range(self, values: Iterable[Any]) -> "LinearScale":
        r = tuple(float(v) for v in values)
        if len(r) != 2:
            raise ValueError("range must have exactly two values")
        self._range = r
        return self

    def scale(self, value: Any) -> float:
        d0, d1 = self._domain
        r0, r1 = self._range
        v = self.coerce(value)
        if d1 == d0:
            return (r0 + r1) / 2.0
        t = (v - d0) / (d1 - d0)
        if self._clamp:
            t = min(1.0, max(0.0, t))
        return r0 + t * (r1 - r0)

    def scale_many(self, values: Iterable[Any]) -> np.ndarray:
        arr = np.asarray([self.coerce(v) for v in values], dtype=np.float64)
        d0, d1 = self._domain
        r0, r1 = self._range
        if d1 == d0:
            return np.full(arr.shape, (r0 + r1) / 2.0, dtype=np.float64)
        t = (arr - d0) / (d1 - d0)
        if self._clamp:
            np.clip(t, 0.0, 1.0, out=t)
        return r0 + t * (r1 - r0)

    def invert(self, value: float) -> float:
        d0, d1 = self._domain
        r0, r1 = self._range
        if r1 == r0:
            return float(d0)
        t = (float(value) - r0) / (r1 - r0)
        return d0 + t * (d1 - d0)

    def clamp(self) -> bool:
        return self._clamp

    def set_clamp(self, flag: bool) -> "LinearScale":
        self._clamp = bool(flag)
        return self

    def num_ticks(self) -> int:
        return self._num_ticks

    def set_num_ticks(self, count: int) -> "LinearScale":
        if count <= 0:
            raise ValueError("num_ticks must be > 0")
        self._num_ticks = int(count)
        return self

    def ticks(self) -> list[float]:
        return list(self._tick_generator(self))

    def default_ticks(self) -> np.ndarray:
        d0, d1 = self._domain
        return generate_nice_ticks(d0, d1, self._num_ticks)

    def nice_domain(self, domain: Sequence[float], count: int | None = None) -> tuple[float, float]:
        return nice_domain(domain[0], domain[1], count or self._config.nice_count)

    def domainer(self) -> Domainer:
        return self._domainer

    def set_domainer(self, domainer: Domainer) -> "LinearScale":
        self._domainer = domainer
        self._auto_domain_if_enabled()
        return self

    def tick_generator(self) -> TickGenerator:
        return self._tick_generator

    def set_tick_generator(self, generator: TickGenerator) -> "LinearScale":
        self._tick_generator = generator
        return self

    def copy(self) -> "LinearScale":
        """Same mapping and policies, without extents or listeners."""

        other = LinearScale(config=self._config)
        other._domain = self._domain
        other._range = self._range
        other._auto_domain_enabled = self._auto_domain_enabled
        other._domainer = self._domainer
        other._tick_generator = self._tick_generator
        other._num_ticks = self._num_ticks
        other._clamp = self._clamp
        return other

    def _compute_auto_domain(self) -> tuple[float, float]:
        return self._domainer.compute_domain(self.extents(), self)

    def _check_domain(self, values: Iterable[Any]) -> tuple[float, float] | None:
        domain = tuple(float(v) for v in values)
        if len(domain) != 2:
            raise ValueError("quantitative domain must have exactly two values")
        if not all(math.isfinite(v) for v in domain):
            LOGGER.warning("ignoring non-finite domain %s; keeping %s", domain, self._domain)
            return None
        return domain


class CategoryScale(Scale):
    """Ordinal scale laying categories out as evenly spaced bands.

    `scale()` returns the centre of a category's band; unknown categories map
    to NaN.
    """

    def __init__(
        self,
        *,
        inner_padding: float = 0.3,
        outer_padding: float = 0.5,
        config: EngineConfig | None = None,
    ) -> None:
        super().__init__(config=config)
        self._range = (0.0, 1.0)
        self._inner_padding = _check_padding(inner_padding, "inner_padding")
        self._outer_padding = _check_padding(outer_padding, "outer_padding")

    @staticmethod
    def coerce(value: Any) -> str:
        return str(value)

    def set_range(self, values: Iterable[Any]) -> "CategoryScale":
        r = tuple(float(v) for v in values)
        if len(r) != 2:
            raise ValueError("range must have exactly two values")
        self._range = r
        return self

    def inner_padding(self) -> float:
        return self._inner_padding

    def set_inner_padding(self, value: float) -> "CategoryScale":
        self._inner_padding = _check_padding(value, "inner_padding")
        return self

    def outer_padding(self) -> float:
        return self._outer_padding

    def set_outer_padding(self, value: float) -> "CategoryScale":
        self._outer_padding = _check_padding(value, "outer_padding")
        return self

    def step_width(self) -> float:
        """Distance between the starts of neighbouring bands."""

        r0, r1 = self._range
        span = abs(r1 - r0)
        denominator = len(self._domain) - self._inner_padding + 2 * self._outer_padding
        if denominator <= 0:
            return 0.0
        return span / denominator

    def range_band(self) -> float:
        return self.step_width() * (1.0 - self._inner_padding)

    def band_start(self, value: Any) -> float:
        key = self.coerce(value)
        if key not in self._domain:
            return math.nan
        index = self._domain.index(key)
        r0, r1 = self._range
        step = self.step_width()
        if r1 >= r0:
            return r0 + step * (self._outer_padding + index)
        # A reversed range lays the bands out from the far end.
        position = len(self._domain) - 1 - index
        return r1 + step * (self._outer_padding + position)

    def scale(self, value: Any) -> float:
        return self.band_start(value) + self.range_band() / 2.0

    def _compute_auto_domain(self) -> tuple[Hashable, ...]:
        return _union_extents(self._extents.values())

    def _check_domain(self, values: Iterable[Any]) -> tuple[Hashable, ...]:
        return _union_extents([[self.coerce(v) for v in values]])


class ColorScale(Scale):
    """Categories to RGBA hex colors, cycling through the palette.

    Like an ordinal scale, an unseen category is appended to the domain the
    first time it is scaled.
    """

    def __init__(self, palette: Sequence[str] | None = None, *, config: EngineConfig | None = None) -> None:
        super().__init__(config=config)
        colors = tuple(palette) if palette is not None else PALETTE
        if not colors:
            raise ValueError("palette must contain at least one color")
        self._range = colors

    def set_range(self, values: Iterable[Any]) -> "ColorScale":
        colors = tuple(values)
        if not colors:
            raise ValueError("palette must contain at least one color")
        self._range = colors
        return self

    def scale(self, value: Any) -> str:
        if value not in self._domain:
            self._domain = self._domain + (value,)
        return self._range[self._domain.index(value) % len(self._range)]

    def _compute_auto_domain(self) -> tuple[Hashable, ...]:
        return _union_extents(self._extents.values())


def _union_extents(extents: Iterable[Sequence[Any]]) -> tuple[Any, ...]:
    seen: list[Any] = []
    for extent in extents:
        for value in extent:
            if value not in seen:
                seen.append(value)
    return tuple(seen)


def _check_padding(value: float, name: str) -> float:
    if value < 0 or (name == "inner_padding" and value >= 1.0):
        raise ValueError(f"{name} out of range: {value}")
    return float(value)
