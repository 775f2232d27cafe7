from typing import Iterable, Optional
import numpy as np
from .model import Coord, HEIGHT, Unit, WIDTH

class GridBoundsError(ValueError):
    """Raised when a coordinate or grid array does not fit the combat grid."""

def in_bounds(coord: Coord) -> bool:
    """True if coord lies on the WIDTH x HEIGHT grid."""
    return 0 <= coord[0] < WIDTH and 0 <= coord[1] < HEIGHT

def check_coord(coord: Coord) -> Coord:
    """Return coord unchanged or raise GridBoundsError."""
    if not in_bounds(coord):
        raise GridBoundsError(f"cell {coord} is outside the {WIDTH}x{HEIGHT} grid")
    return coord

def empty_occupancy() -> np.ndarray:
    return np.zeros((WIDTH, HEIGHT), dtype=bool)

def build_occupancy(units: Iterable[Optional[Unit]],
                    exclude_a: Optional[Unit] = None,
                    exclude_b: Optional[Unit] = None) -> np.ndarray:
    """Mark every cell held by a live unit, except the two excluded units.

    Exclusion is by identity, so an attacker and its target never block
    their own path query even if another unit shares their stats.
    """
    occupied = empty_occupancy()
    for unit in units:
        if unit is None or not unit.alive:
            continue
        if unit is exclude_a or unit is exclude_b:
            continue
        # Negative indices would silently wrap in numpy
        x, y = check_coord(unit.pos)
        occupied[x, y] = True
    return occupied

def occupancy_from_cells(cells: Iterable[Coord]) -> np.ndarray:
    """Build an occupancy grid from raw blocked cells."""
    occupied = empty_occupancy()
    for cell in cells:
        x, y = check_coord((int(cell[0]), int(cell[1])))
        occupied[x, y] = True
    return occupied
