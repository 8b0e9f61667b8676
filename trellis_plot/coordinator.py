from __future__ import annotations

from typing import Any, Iterable

from trellis_plot.scale import Scale


class ScaleDomainCoordinator:
    """Keeps the domains of linked scales identical.

    The coordinator owns the canonical domain. A domain change on any linked
    scale becomes the canonical domain and is pushed to every other scale
    before the triggering call returns.
    """

    def __init__(self, scales: Iterable[Scale]) -> None:
        self._scales = list(scales)
        if not self._scales:
            raise ValueError("ScaleDomainCoordinator needs at least one scale")
        self._rescale_in_progress = False
        self._domain: tuple[Any, ...] = tuple(self._scales[0].domain())
        for scale in self._scales:
            scale.broadcaster.register(self._rescale, key=self)
        self._rescale(self._scales[0])

    def domain(self) -> tuple[Any, ...]:
        return self._domain

    def scales(self) -> list[Scale]:
        return list(self._scales)

    def unlink(self) -> None:
        for scale in self._scales:
            scale.broadcaster.deregister(self)

    def _rescale(self, source: Scale) -> None:
        # The pushes below broadcast from the other scales and land back here.
        if self._rescale_in_progress:
            return
        self._rescale_in_progress = True
        try:
            self._domain = tuple(source.domain())
            for scale in self._scales:
                if scale is not source:
                    scale.set_domain(self._domain)
        finally:
            self._rescale_in_progress = False
