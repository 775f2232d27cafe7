import logging
from typing import Iterable, List, Optional
from .model import Army, Coord, PRESET_HEIGHT, PRESET_WIDTH, Unit, WIDTH
from .rng import DRNG

logger = logging.getLogger(__name__)

MAX_UNITS_PER_TYPE = 11

def efficiency(unit: Unit) -> float:
    """Attack plus health bought per point of cost."""
    return (unit.base_attack + unit.health) / unit.cost

def clone_unit(template: Unit, index: int, cell: Coord) -> Unit:
    return Unit(
        name=f"{template.unit_type} {index}",
        unit_type=template.unit_type,
        health=template.health,
        base_attack=template.base_attack,
        cost=template.cost,
        x=cell[0],
        y=cell[1],
        attack_type=template.attack_type,
        attack_bonuses=dict(template.attack_bonuses),
        defence_bonuses=dict(template.defence_bonuses),
    )

def generate_preset(templates: Iterable[Unit], max_points: int, seed: int = 42,
                    x_offset: int = 0, max_per_type: int = MAX_UNITS_PER_TYPE,
                    rng: Optional[DRNG] = None) -> Army:
    """Build an army under a points budget.

    Templates are bought greedily, most efficient first, up to
    ``max_per_type`` copies each. Every copy lands on a distinct random cell
    of the PRESET_WIDTH x PRESET_HEIGHT deployment field, shifted right by
    ``x_offset`` columns.
    """
    if max_points < 0:
        raise ValueError(f"max_points must be non-negative, got {max_points}")
    if not 0 <= x_offset <= WIDTH - PRESET_WIDTH:
        raise ValueError(f"x_offset {x_offset} puts the deployment field off the grid")
    templates = list(templates)
    for t in templates:
        if t.cost <= 0:
            raise ValueError(f"template {t.unit_type} has non-positive cost {t.cost}")

    rng = rng or DRNG(seed)
    free: List[Coord] = [(x + x_offset, y) for x in range(PRESET_WIDTH) for y in range(PRESET_HEIGHT)]
    units: List[Unit] = []
    points = 0

    for template in sorted(templates, key=efficiency, reverse=True):
        count = 0
        while count < max_per_type and points + template.cost <= max_points and free:
            cell = free.pop(rng.index(len(free)))
            unit = clone_unit(template, count, cell)
            units.append(unit)
            points += unit.cost
            count += 1
            logger.debug("%s placed at %s", unit.name, cell)

    logger.info("Preset army: %d units, %d/%d points", len(units), points, max_points)
    return Army(units=units, points=points)
