from .component import Table, TableLayout

__all__ = ["Table", "TableLayout"]
