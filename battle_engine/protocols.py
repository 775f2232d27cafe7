"""Contracts the battle engine depends on, so tests can swap in stubs."""
from typing import Iterable, List, Optional, Protocol, Sequence
from .model import Combatant, Coord, Unit

class PathFinder(Protocol):
    def get_target_path(self, attacker: Unit, target: Unit, units: Iterable[Unit]) -> List[Coord]:
        ...

class TargetSelector(Protocol):
    def __call__(self, rows: Sequence[Iterable[Unit]], attack_from_left: bool) -> List[Unit]:
        ...

class TargetProgram(Protocol):
    """Decides whom a combatant attacks this round (None = no attack)."""
    def choose_target(self, attacker: Combatant, roster: Sequence[Combatant]) -> Optional[Unit]:
        ...

class BattleLog(Protocol):
    """Receives every resolved attack, after damage has been applied."""
    def log_attack(self, attacker: Unit, target: Unit) -> None:
        ...
