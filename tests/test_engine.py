"""Test round-based battle resolution."""
import threading
from battle_engine.attack import AttackProgram
from battle_engine.engine import BattleEngine, simulate_battle
from battle_engine.model import Army, BattleStatus, Combatant, Unit
from battle_engine.pathfinding import UnitTargetPathFinder


def make_unit(name, attack, health, x=0, y=0, unit_type="Swordsman"):
    return Unit(name=name, unit_type=unit_type, health=health, base_attack=attack, cost=10, x=x, y=y)


class FirstEnemy:
    """Targets the first live enemy in roster order and records who asked."""

    def __init__(self):
        self.asked = []

    def choose_target(self, attacker, roster):
        self.asked.append(attacker.unit.name)
        for c in roster:
            if c.side != attacker.side and c.unit.alive:
                return c.unit
        return None


class RecordingLog:
    def __init__(self, on_attack=None):
        self.entries = []
        self.on_attack = on_attack

    def log_attack(self, attacker, target):
        self.entries.append((attacker.name, target.name, target.health, target.alive))
        if self.on_attack:
            self.on_attack()


def test_duel_trace():
    """Attack 5 vs attack 3, both at 10 health: the stronger unit wins in round 2."""
    strong = make_unit("strong", 5, 10, x=0, y=10)
    weak = make_unit("weak", 3, 10, x=26, y=10)
    log = RecordingLog()
    eng = BattleEngine(Army([strong]), Army([weak]), log=log)

    eng.step()
    assert strong.health == 7
    assert weak.health == 5
    assert eng.status == BattleStatus.RUNNING

    result = eng.simulate()
    assert result.status == BattleStatus.PLAYER_WINS
    assert result.winner == "PLAYER"
    assert result.rounds == 2
    assert not weak.alive
    assert strong.health == 7
    assert log.entries == [
        ("strong", "weak", 5, True),
        ("weak", "strong", 7, True),
        ("strong", "weak", 0, False),
    ]


def test_turn_order_is_descending_attack_across_sides():
    p_low = make_unit("p_low", 1, 100)
    p_high = make_unit("p_high", 9, 100)
    c_mid = make_unit("c_mid", 5, 100)
    c_tie = make_unit("c_tie", 9, 100)
    program = FirstEnemy()
    eng = BattleEngine(Army([p_low, p_high]), Army([c_mid, c_tie]), program=program)

    assert [c.unit.name for c in eng.roster] == ["p_high", "c_tie", "c_mid", "p_low"]
    eng.step()
    assert program.asked == ["p_high", "c_tie", "c_mid", "p_low"]


def test_dead_units_excluded_from_initial_roster():
    corpse = make_unit("corpse", 50, 0)
    corpse.alive = False
    eng = BattleEngine(Army([corpse, make_unit("p", 1, 5)]), Army([make_unit("c", 1, 5)]))
    assert [c.unit.name for c in eng.roster] == ["p", "c"]


def test_snapshot_is_a_copy():
    eng = BattleEngine(Army([make_unit("p", 1, 5)]), Army([make_unit("c", 1, 5)]), program=FirstEnemy())
    roster = eng.snapshot()
    roster.clear()
    assert [c.unit.name for c in eng.snapshot()] == ["p", "c"]


def test_unit_killed_mid_round_does_not_act():
    hunter = make_unit("hunter", 10, 10)
    prey = make_unit("prey", 5, 5)
    tank = make_unit("tank", 1, 100)
    program = FirstEnemy()
    eng = BattleEngine(Army([hunter]), Army([prey, tank]), program=program)

    evts = eng.step()

    assert "prey" not in program.asked
    assert hunter.health == 9  # only the tank hit back
    assert [e.data["attacker"] for e in evts if e.kind == "Attack"] == ["hunter", "tank"]
    assert [c.unit.name for c in eng.roster] == ["hunter", "tank"]


def test_dead_target_is_not_hit_again():
    """A program returning an already dead unit gets no attack."""
    first = make_unit("first", 10, 10)
    second = make_unit("second", 8, 10)
    victim = make_unit("victim", 1, 5)
    reserve = make_unit("reserve", 0, 100)

    class Stubborn:
        def choose_target(self, attacker, roster):
            return victim if attacker.side == "PLAYER" else None

    eng = BattleEngine(Army([first, second]), Army([victim, reserve]), program=Stubborn())
    evts = eng.step()

    assert victim.health == -5
    assert len([e for e in evts if e.kind == "Attack"]) == 1
    assert [e.kind for e in evts if e.kind == "Destroyed"] == ["Destroyed"]


def test_battle_log_called_once_per_attack():
    log = RecordingLog()
    result = simulate_battle(Army([make_unit("p", 4, 20)]), Army([make_unit("c", 3, 20)]),
                             program=FirstEnemy(), log=log)
    attacks = [e for e in result.events if e.kind == "Attack"]
    assert len(log.entries) == len(attacks)
    assert result.events[-1].kind == "BattleEnded"


def test_cancel_checked_between_rounds():
    """Cancelling during a round lets that round finish, then aborts."""
    cancel = threading.Event()
    p = make_unit("p", 1, 100)
    c = make_unit("c", 1, 100)
    log = RecordingLog(on_attack=cancel.set)

    result = simulate_battle(Army([p]), Army([c]), program=FirstEnemy(), log=log, cancel=cancel)

    assert result.status == BattleStatus.ABORTED
    assert result.rounds == 1
    assert p.health == 99 and c.health == 99
    assert result.events[-1].kind == "BattleAborted"


def test_cancel_before_start_plays_nothing():
    cancel = threading.Event()
    cancel.set()
    p = make_unit("p", 1, 100)
    result = simulate_battle(Army([p]), Army([make_unit("c", 1, 100)]), program=FirstEnemy(), cancel=cancel)
    assert result.status == BattleStatus.ABORTED
    assert result.rounds == 0
    assert p.health == 100


def test_max_rounds_aborts():
    result = simulate_battle(Army([make_unit("p", 1, 100)]), Army([make_unit("c", 1, 100)]),
                             program=FirstEnemy(), max_rounds=3)
    assert result.status == BattleStatus.ABORTED
    assert result.rounds == 3


def test_round_without_attacks_is_stalemate():
    class Passive:
        def choose_target(self, attacker, roster):
            return None

    result = simulate_battle(Army([make_unit("p", 1, 10)]), Army([make_unit("c", 1, 10)]), program=Passive())
    assert result.status == BattleStatus.STALEMATE
    assert result.rounds == 1
    assert result.winner is None


def test_empty_armies_end_immediately():
    assert simulate_battle(Army(), Army()).status == BattleStatus.DRAW
    result = simulate_battle(Army(), Army([make_unit("c", 1, 10)]))
    assert result.status == BattleStatus.COMPUTER_WINS
    assert result.rounds == 0


def test_finished_engine_step_is_noop():
    eng = BattleEngine(Army([make_unit("p", 10, 10)]), Army([make_unit("c", 1, 1)]), program=FirstEnemy())
    eng.simulate()
    assert eng.finished
    assert eng.step() == []
    assert eng.abort() == []


def test_attack_program_skips_unreachable_rows():
    """A walled-in candidate is dropped in favour of a reachable one."""
    attacker = make_unit("attacker", 5, 10, x=5, y=10)
    boxed = make_unit("boxed", 1, 50, x=10, y=10)
    walls = [make_unit(f"wall{i}", 0, 50, x=x, y=y)
             for i, (x, y) in enumerate([(9, 10), (11, 10), (10, 9), (10, 11)])]
    open_target = make_unit("open", 1, 50, x=12, y=15)
    roster = [Combatant(attacker, "PLAYER")] + [Combatant(w, "PLAYER") for w in walls]
    roster += [Combatant(boxed, "COMPUTER"), Combatant(open_target, "COMPUTER")]

    program = AttackProgram(UnitTargetPathFinder(margin=5))
    assert program.choose_target(roster[0], roster) is open_target


def test_attack_program_prefers_shortest_path():
    attacker = make_unit("attacker", 5, 10, x=5, y=10)
    near = make_unit("near", 1, 50, x=8, y=10)
    far = make_unit("far", 1, 50, x=12, y=10)
    roster = [Combatant(attacker, "PLAYER"), Combatant(far, "COMPUTER"), Combatant(near, "COMPUTER")]
    assert AttackProgram().choose_target(roster[0], roster) is near


def test_attack_program_uses_bonus_on_equal_distance():
    attacker = make_unit("attacker", 5, 10, x=10, y=10)
    attacker.attack_bonuses = {"Knight": 2.0}
    knight = make_unit("knight", 1, 50, x=12, y=10, unit_type="Knight")
    archer = make_unit("archer", 1, 50, x=8, y=10, unit_type="Archer")
    roster = [Combatant(attacker, "PLAYER"), Combatant(archer, "COMPUTER"), Combatant(knight, "COMPUTER")]
    assert AttackProgram().choose_target(roster[0], roster) is knight


def test_attack_program_targets_front_of_each_row():
    """Computer units attack from the right, so the smallest y of a row is chosen."""
    attacker = make_unit("attacker", 5, 10, x=25, y=10)
    low = make_unit("low", 1, 50, x=2, y=4)
    high = make_unit("high", 1, 50, x=2, y=16)
    roster = [Combatant(attacker, "COMPUTER"), Combatant(low, "PLAYER"), Combatant(high, "PLAYER")]
    assert AttackProgram().candidates(roster[0], roster) == [low]
