import logging
from typing import List, Optional, Protocol
from .attack import AttackProgram
from .model import Army, BattleResult, BattleStatus, Combatant, Event, Side, Unit
from .protocols import BattleLog, TargetProgram

logger = logging.getLogger(__name__)

class CancelFlag(Protocol):
    """Anything with is_set(): threading.Event, asyncio.Event, ..."""
    def is_set(self) -> bool:
        ...

class BattleEngine:
    """Pure, deterministic round-based battle between two armies.

    All live units of both armies share one roster, ordered by descending
    base attack (player units first on ties). A round walks that roster once;
    units killed during the round neither act nor get targeted afterwards,
    and are purged when the round ends.
    """

    def __init__(self, player_army: Army, computer_army: Army,
                 program: Optional[TargetProgram] = None,
                 log: Optional[BattleLog] = None):
        roster = [Combatant(u, "PLAYER") for u in player_army.alive_units()]
        roster += [Combatant(u, "COMPUTER") for u in computer_army.alive_units()]
        self.roster: List[Combatant] = sorted(roster, key=lambda c: -c.unit.base_attack)
        self.program = program or AttackProgram()
        self.log = log
        self.round = 0
        self.status = BattleStatus.RUNNING
        self._update_status()

    def _side_alive(self, side: Side) -> bool:
        return any(c.side == side for c in self.roster)

    def _update_status(self) -> None:
        player_left = self._side_alive("PLAYER")
        computer_left = self._side_alive("COMPUTER")
        if player_left and computer_left:
            return
        if player_left:
            self.status = BattleStatus.PLAYER_WINS
        elif computer_left:
            self.status = BattleStatus.COMPUTER_WINS
        else:
            self.status = BattleStatus.DRAW

    def _attack(self, attacker: Unit, target: Unit) -> List[Event]:
        """Apply one attack and report it to the battle log."""
        damage = attacker.base_attack
        target.take_damage(damage)
        evts = [Event("Attack", self.round,
                      {"attacker": attacker.name, "target": target.name,
                       "damage": damage, "health": target.health, "alive": target.alive})]
        if not target.alive:
            evts.append(Event("Destroyed", self.round,
                              {"unit": target.name, "killer": attacker.name}))
        if self.log is not None:
            self.log.log_attack(attacker, target)
        return evts

    @property
    def finished(self) -> bool:
        return self.status != BattleStatus.RUNNING

    def step(self) -> List[Event]:
        """Play one full round and return its events."""
        if self.finished:
            return []
        self.round += 1
        evts: List[Event] = []
        attacks = 0

        for combatant in self.roster:
            if not combatant.unit.alive:
                continue
            target = self.program.choose_target(combatant, self.roster)
            if target is None or not target.alive:
                continue
            evts += self._attack(combatant.unit, target)
            attacks += 1

        self.roster = [c for c in self.roster if c.unit.alive]
        self._update_status()

        # Nothing changed, so every later round would be identical
        if attacks == 0 and not self.finished:
            self.status = BattleStatus.STALEMATE

        logger.debug("Round %d: %d attacks, %d units left, status %s",
                     self.round, attacks, len(self.roster), self.status.value)
        if self.finished:
            evts.append(Event("BattleEnded", self.round,
                              {"status": self.status.value, "rounds": self.round}))
        return evts

    def abort(self) -> List[Event]:
        """Stop a running battle between rounds."""
        if self.finished:
            return []
        self.status = BattleStatus.ABORTED
        logger.info("Battle aborted after %d rounds", self.round)
        return [Event("BattleAborted", self.round, {"rounds": self.round})]

    def simulate(self, cancel: Optional[CancelFlag] = None,
                 max_rounds: Optional[int] = None) -> BattleResult:
        """Run rounds until the battle ends.

        ``cancel`` is checked once before every round, so a round is either
        played completely or not at all. Reaching ``max_rounds`` aborts.
        """
        evts: List[Event] = []
        while not self.finished:
            if cancel is not None and cancel.is_set():
                evts += self.abort()
                break
            if max_rounds is not None and self.round >= max_rounds:
                evts += self.abort()
                break
            evts += self.step()
        return self.result(evts)

    def result(self, events: Optional[List[Event]] = None) -> BattleResult:
        return BattleResult(self.status, self.round, events or [], list(self.roster))

    def snapshot(self) -> List[Combatant]:
        """Return current roster."""
        return list(self.roster)

def simulate_battle(player_army: Army, computer_army: Army,
                    program: Optional[TargetProgram] = None,
                    log: Optional[BattleLog] = None,
                    cancel: Optional[CancelFlag] = None,
                    max_rounds: Optional[int] = None) -> BattleResult:
    return BattleEngine(player_army, computer_army, program, log).simulate(cancel, max_rounds)
