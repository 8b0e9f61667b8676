class PlotDataError(ValueError):
    """Raised when plot input cannot be projected, drawn or hit-tested."""
