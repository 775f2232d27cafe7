from itertools import groupby
from typing import Iterable, List, Optional, Sequence
from .model import Unit

def _front_most(row: Iterable[Unit], attack_from_left: bool) -> Optional[Unit]:
    best: Optional[Unit] = None
    for unit in row:
        if not unit.alive:
            continue
        if best is None:
            best = unit
        elif attack_from_left and unit.y > best.y:
            best = unit
        elif not attack_from_left and unit.y < best.y:
            best = unit
    return best

def suitable_targets(rows: Sequence[Iterable[Unit]], attack_from_left: bool) -> List[Unit]:
    """Pick the front-most alive unit of every row.

    Attacking from the left takes the unit with the largest y in the row,
    attacking from the right the smallest. Rows with nobody alive are
    skipped, so the result can be shorter than ``rows``.
    """
    targets: List[Unit] = []
    for row in rows:
        unit = _front_most(row, attack_from_left)
        if unit is not None:
            targets.append(unit)
    return targets

def rows_by_column(units: Iterable[Unit]) -> List[List[Unit]]:
    """Group units into rows sharing an x coordinate, ordered by x."""
    ordered = sorted(units, key=lambda u: u.x)
    return [list(row) for _, row in groupby(ordered, key=lambda u: u.x)]
