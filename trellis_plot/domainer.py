from __future__ import annotations

from typing import TYPE_CHECKING, Hashable, Sequence

from trellis_ui.config import DEFAULT_CONFIG, EngineConfig

if TYPE_CHECKING:
    from trellis_plot.scale import LinearScale


class Domainer:
    """Turns the extents reported to a quantitative scale into its domain.

    The steps run in a fixed order: merge the extents, pad the merged interval
    (a zero-width interval gets the fixed `identical_domain_padding` instead),
    stretch it over zero and any included values, then round outward when
    niceing is on. Holds no data; the same domainer can serve several scales.
    """

    def __init__(self, *, config: EngineConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG
        self._pad_proportion = self._config.pad_proportion
        self._include_zero = False
        self._nice = False
        self._nice_count: int | None = None
        self._padding_exceptions: dict[Hashable, float] = {}
        self._included_values: dict[Hashable, float] = {}

    def compute_domain(self, extents: Sequence[Sequence[float]], scale: "LinearScale") -> tuple[float, float]:
        usable = [(float(e[0]), float(e[1])) for e in extents if len(e) == 2]
        if usable:
            lo = min(e[0] for e in usable)
            hi = max(e[1] for e in usable)
        else:
            lo, hi = scale.default_extent()
        lo, hi = self._pad_domain(lo, hi)
        lo, hi = self._include_domain(lo, hi)
        return self._nice_domain(lo, hi, scale)

    # -- builders ------------------------------------------------------------

    def pad(self, proportion: float | None = None) -> "Domainer":
        """Pad by `proportion` of the span, half on each side; no argument restores the default."""

        value = self._config.pad_proportion if proportion is None else float(proportion)
        if value < 0:
            raise ValueError("pad proportion must be >= 0")
        self._pad_proportion = value
        return self

    @property
    def pad_proportion(self) -> float:
        return self._pad_proportion

    def add_padding_exception(self, value: float, key: Hashable | None = None) -> "Domainer":
        self._padding_exceptions[value if key is None else key] = float(value)
        return self

    def remove_padding_exception(self, key: Hashable) -> "Domainer":
        self._padding_exceptions.pop(key, None)
        return self

    def add_included_value(self, value: float, key: Hashable | None = None) -> "Domainer":
        self._included_values[value if key is None else key] = float(value)
        return self

    def remove_included_value(self, key: Hashable) -> "Domainer":
        self._included_values.pop(key, None)
        return self

    def include_zero(self, flag: bool = True) -> "Domainer":
        self._include_zero = bool(flag)
        return self

    def nice(self, count: int | None = None) -> "Domainer":
        if count is not None and count <= 0:
            raise ValueError("nice count must be > 0")
        self._nice = True
        self._nice_count = count
        return self

    def no_nice(self) -> "Domainer":
        self._nice = False
        self._nice_count = None
        return self

    # -- steps ---------------------------------------------------------------

    def _pad_domain(self, lo: float, hi: float) -> tuple[float, float]:
        if lo == hi:
            delta = self._config.identical_domain_padding
            return (lo - delta, hi + delta)
        exceptions = set(self._padding_exceptions.values())
        half = (hi - lo) * self._pad_proportion / 2.0
        new_lo = lo if lo in exceptions else lo - half
        new_hi = hi if hi in exceptions else hi + half
        return (new_lo, new_hi)

    def _include_domain(self, lo: float, hi: float) -> tuple[float, float]:
        included = list(self._included_values.values())
        if self._include_zero:
            included.append(0.0)
        for value in included:
            lo = min(lo, value)
            hi = max(hi, value)
        return (lo, hi)

    def _nice_domain(self, lo: float, hi: float, scale: "LinearScale") -> tuple[float, float]:
        if not self._nice:
            return (lo, hi)
        return scale.nice_domain((lo, hi), self._nice_count)
