from trellis_plot.animators import Animator, BaseAnimator, NullAnimator
from trellis_plot.broadcaster import Broadcaster
from trellis_plot.coordinator import ScaleDomainCoordinator
from trellis_plot.dataset import Dataset
from trellis_plot.domain_transforms import magnify, translate
from trellis_plot.domainer import Domainer
from trellis_plot.drawer import Drawer, DrawStep, RenderedMark, SymbolDrawer
from trellis_plot.errors import PlotDataError
from trellis_plot.interactions import HoverInteraction
from trellis_plot.plot import NO_MATCH, ClosestMark, Plot, PlotDatasetEntry, PlotStrategy, Projection, accessorize
from trellis_plot.raster import RasterSurface
from trellis_plot.scale import PALETTE, CategoryScale, ColorScale, LinearScale, Scale
from trellis_plot.scatter import PointMarkStrategy, scatter_plot
from trellis_plot.tick_generators import TickGenerator, integer_tick_generator, interval_tick_generator

__all__ = [
    "Animator",
    "BaseAnimator",
    "Broadcaster",
    "CategoryScale",
    "ClosestMark",
    "ColorScale",
    "Dataset",
    "DrawStep",
    "Drawer",
    "Domainer",
    "HoverInteraction",
    "LinearScale",
    "NO_MATCH",
    "NullAnimator",
    "PALETTE",
    "Plot",
    "PlotDataError",
    "PlotDatasetEntry",
    "PlotStrategy",
    "PointMarkStrategy",
    "Projection",
    "RasterSurface",
    "RenderedMark",
    "Scale",
    "ScaleDomainCoordinator",
    "SymbolDrawer",
    "TickGenerator",
    "accessorize",
    "integer_tick_generator",
    "interval_tick_generator",
    "magnify",
    "scatter_plot",
    "translate",
]
