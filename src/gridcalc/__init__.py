"""gridcalc -- sparse sheet evaluator with fixed-width text rendering.

Public API::

    from gridcalc import load_sheet, Evaluator, render_grid

    sheet = load_sheet(text)
    grid = Evaluator().compute(sheet)
    print(render_grid(grid).to_text(), end="")
"""

__version__ = "0.1.0"

from gridcalc.evaluator import CellResult, Evaluator, RenderedGrid
from gridcalc.ingest import load_sheet, load_sheet_file
from gridcalc.render import Renderer, render_grid
from gridcalc.sheet import Sheet

__all__ = [
    "CellResult",
    "Evaluator",
    "RenderedGrid",
    "Renderer",
    "Sheet",
    "__version__",
    "load_sheet",
    "load_sheet_file",
    "render_grid",
]
