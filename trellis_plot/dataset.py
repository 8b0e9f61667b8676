from __future__ import annotations

import math
from numbers import Real
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

import numpy as np

from trellis_plot.broadcaster import Broadcaster


Projector = Callable[[Any, int, Any, Mapping[str, Any]], Any]

_NO_PLOT_METADATA: Mapping[str, Any] = MappingProxyType({})


class Dataset:
    """Ordered records plus free-form metadata, shared by reference between plots.

    Every mutation notifies `broadcaster` listeners and drops cached extents.
    """

    def __init__(self, data: Iterable[Any] | None = None, metadata: Mapping[str, Any] | None = None) -> None:
        self._data: list[Any] = list(data) if data is not None else []
        self._metadata: dict[str, Any] = dict(metadata) if metadata is not None else {}
        self.broadcaster = Broadcaster(self)
        self._extent_cache: dict[tuple[Any, Any, int], list[Any]] = {}

    def __len__(self) -> int:
        return len(self._data)

    def data(self) -> list[Any]:
        return list(self._data)

    def set_data(self, data: Iterable[Any]) -> "Dataset":
        self._data = list(data)
        self._changed()
        return self

    def append(self, datum: Any) -> "Dataset":
        self._data.append(datum)
        self._changed()
        return self

    def metadata(self) -> dict[str, Any]:
        return self._metadata

    def set_metadata(self, metadata: Mapping[str, Any]) -> "Dataset":
        self._metadata = dict(metadata)
        self._changed()
        return self

    def extent(
        self,
        accessor: Projector,
        coerce: Callable[[Any], Any],
        plot_metadata: Mapping[str, Any] | None = None,
    ) -> list[Any]:
        """`[min, max]` of numeric values, distinct values in first-seen order otherwise.

        Non-finite numbers are skipped; an empty dataset yields `[]`.
        """

        meta = plot_metadata if plot_metadata is not None else _NO_PLOT_METADATA
        # Accessors see the plot metadata, so the same accessor can disagree across entries.
        cache_key = (accessor, coerce, id(meta))
        cached = self._extent_cache.get(cache_key)
        if cached is not None:
            return list(cached)
        values = [coerce(accessor(datum, index, self._metadata, meta)) for index, datum in enumerate(self._data)]
        extent = _compute_extent(values)
        self._extent_cache[cache_key] = extent
        return list(extent)

    def forget_extents(
        self,
        *,
        accessor: Projector | None = None,
        plot_metadata: Mapping[str, Any] | None = None,
    ) -> "Dataset":
        """Drop cached extents computed with `accessor` or for `plot_metadata`."""

        meta_id = None if plot_metadata is None else id(plot_metadata)
        for key in list(self._extent_cache):
            if (accessor is not None and key[0] is accessor) or (meta_id is not None and key[2] == meta_id):
                del self._extent_cache[key]
        return self

    def cached_extent_count(self) -> int:
        return len(self._extent_cache)

    def _changed(self) -> None:
        self._extent_cache.clear()
        self.broadcaster.broadcast()


def _compute_extent(values: list[Any]) -> list[Any]:
    if not values:
        return []
    if all(isinstance(v, Real) and not isinstance(v, bool) for v in values):
        arr = np.asarray(values, dtype=np.float64)
        finite = arr[np.isfinite(arr)]
        if finite.size == 0:
            return []
        return [float(np.min(finite)), float(np.max(finite))]
    seen: list[Any] = []
    for value in values:
        if value is None or (isinstance(value, float) and math.isnan(value)):
            continue
        if value not in seen:
            seen.append(value)
    return seen
