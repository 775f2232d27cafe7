from typing import List, Optional, Sequence, Tuple
from .model import Combatant, Unit
from .pathfinding import UnitTargetPathFinder
from .protocols import PathFinder, TargetSelector
from .targeting import rows_by_column, suitable_targets

class AttackProgram:
    """Default target choice for a combatant.

    Only the front-most enemy of each row is a candidate. A candidate with
    no path from the attacker is dropped for this round; among the rest the
    shortest path wins, then the larger attack bonus against the target's
    type, then candidate order.
    """

    def __init__(self, path_finder: Optional[PathFinder] = None,
                 selector: TargetSelector = suitable_targets):
        self.path_finder = path_finder or UnitTargetPathFinder()
        self.selector = selector

    def candidates(self, attacker: Combatant, roster: Sequence[Combatant]) -> List[Unit]:
        enemies = [c.unit for c in roster if c.side != attacker.side and c.unit.alive]
        return self.selector(rows_by_column(enemies), attacker.side == "PLAYER")

    def choose_target(self, attacker: Combatant, roster: Sequence[Combatant]) -> Optional[Unit]:
        unit = attacker.unit
        live_units = [c.unit for c in roster if c.unit.alive]

        best: Optional[Tuple[int, float, int]] = None
        chosen: Optional[Unit] = None
        for idx, target in enumerate(self.candidates(attacker, roster)):
            path = self.path_finder.get_target_path(unit, target, live_units)
            if not path:
                continue
            key = (len(path), -unit.attack_bonuses.get(target.unit_type, 1.0), idx)
            if best is None or key < best:
                best, chosen = key, target
        return chosen
