from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple

Side = Literal["PLAYER", "COMPUTER"]
Coord = Tuple[int, int]  # (x, y) grid cell

WIDTH = 27   # Combat grid width
HEIGHT = 21  # Combat grid height
PRESET_WIDTH = 3    # Deployment field used by preset generation
PRESET_HEIGHT = 21

class BattleStatus(Enum):
    """Lifecycle of a battle"""
    RUNNING = "running"
    PLAYER_WINS = "player_wins"
    COMPUTER_WINS = "computer_wins"
    DRAW = "draw"          # No unit left on either side
    ABORTED = "aborted"    # Cancelled between rounds
    STALEMATE = "stalemate"  # A whole round passed without any attack

@dataclass
class Unit:
    name: str
    unit_type: str
    health: int
    base_attack: int
    cost: int
    x: int
    y: int
    attack_type: str = "melee"
    alive: bool = True
    attack_bonuses: Dict[str, float] = field(default_factory=dict)
    defence_bonuses: Dict[str, float] = field(default_factory=dict)

    @property
    def pos(self) -> Coord:
        return (self.x, self.y)

    def take_damage(self, amount: int) -> None:
        """Subtract health and flip to dead once it drops to zero."""
        self.health -= amount
        if self.health <= 0:
            self.alive = False

@dataclass
class Army:
    units: List[Unit] = field(default_factory=list)
    points: int = 0

    def alive_units(self) -> List[Unit]:
        return [u for u in self.units if u.alive]

@dataclass
class Combatant:
    """A roster entry: one unit tagged with the side it fights for."""
    unit: Unit
    side: Side

@dataclass
class Event:
    kind: str
    round: int
    data: Dict

@dataclass
class BattleResult:
    status: BattleStatus
    rounds: int
    events: List[Event] = field(default_factory=list)
    survivors: List[Combatant] = field(default_factory=list)

    @property
    def winner(self) -> Optional[Side]:
        if self.status == BattleStatus.PLAYER_WINS:
            return "PLAYER"
        if self.status == BattleStatus.COMPUTER_WINS:
            return "COMPUTER"
        return None

# Unit templates used for preset generation and the demo battle
UNIT_TYPES: Dict[str, Unit] = {
    "Archer": Unit(
        name="Archer", unit_type="Archer", health=50, base_attack=25, cost=30,
        x=0, y=0, attack_type="ranged",
        attack_bonuses={"Pikeman": 1.5}, defence_bonuses={"Knight": 0.5},
    ),
    "Swordsman": Unit(
        name="Swordsman", unit_type="Swordsman", health=100, base_attack=20, cost=35,
        x=0, y=0, attack_type="melee",
        attack_bonuses={"Archer": 1.5}, defence_bonuses={"Pikeman": 1.2},
    ),
    "Pikeman": Unit(
        name="Pikeman", unit_type="Pikeman", health=90, base_attack=18, cost=30,
        x=0, y=0, attack_type="melee",
        attack_bonuses={"Knight": 2.0}, defence_bonuses={"Swordsman": 0.8},
    ),
    "Knight": Unit(
        name="Knight", unit_type="Knight", health=160, base_attack=35, cost=60,
        x=0, y=0, attack_type="melee",
        attack_bonuses={"Swordsman": 1.3}, defence_bonuses={"Archer": 1.5},
    ),
}
