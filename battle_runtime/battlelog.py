import logging
from typing import Optional
from battle_engine.model import Unit

class LoggingBattleLog:
    """Battle log sink writing one line per resolved attack."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("battle")
        self.attacks = 0

    def log_attack(self, attacker: Unit, target: Unit) -> None:
        self.attacks += 1
        state = "alive" if target.alive else "dead"
        self.logger.info("%s (%d,%d) hits %s (%d,%d): health %d, %s",
                         attacker.name, attacker.x, attacker.y,
                         target.name, target.x, target.y, target.health, state)
