"""Obstacle-aware shortest paths on the combat grid.

A* over 4-connected cells with unit step cost and a Manhattan heuristic.
Paths always start with the start cell and end with the goal, so a path of
n cells is n - 1 steps long; start == goal gives a one-cell path and an
unreachable goal gives an empty list.

Frontier ties are broken by lowest f, then lowest h (the node closer to the
goal), then insertion order. That rule decides which of several optimal
paths is returned.

With ``jump=True`` straight corridor runs are skipped: from a node the search
slides along a direction while both perpendicular cells are blocked and only
materialises the first cell where the run can branch (or the goal). Jump
edges carry their real length and are expanded back into single steps when
the path is rebuilt, so lengths and reachability match the plain search.
"""
import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple
import numpy as np
from .grid import GridBoundsError, build_occupancy, check_coord
from .model import Coord, HEIGHT, Unit, WIDTH

logger = logging.getLogger(__name__)

DIRECTIONS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
DEFAULT_MARGIN = 5
UNREACHED = np.iinfo(np.int32).max

def manhattan(a: Coord, b: Coord) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])

@dataclass(frozen=True)
class SearchWindow:
    """Inclusive rectangle of cells the search may visit."""
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    def __post_init__(self):
        if not (0 <= self.min_x <= self.max_x < WIDTH and 0 <= self.min_y <= self.max_y < HEIGHT):
            raise GridBoundsError(f"invalid search window {self}")

    @classmethod
    def full(cls) -> "SearchWindow":
        return cls(0, 0, WIDTH - 1, HEIGHT - 1)

    @classmethod
    def around(cls, start: Coord, goal: Coord, margin: int = DEFAULT_MARGIN) -> "SearchWindow":
        """Bounding box of start and goal padded by margin, clamped to the grid."""
        if margin < 0:
            raise ValueError(f"margin must be non-negative, got {margin}")
        check_coord(start)
        check_coord(goal)
        return cls(
            max(0, min(start[0], goal[0]) - margin),
            max(0, min(start[1], goal[1]) - margin),
            min(WIDTH - 1, max(start[0], goal[0]) + margin),
            min(HEIGHT - 1, max(start[1], goal[1]) + margin),
        )

    def contains(self, x: int, y: int) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

Passable = Callable[[int, int], bool]

def _step_successors(current: Coord, goal: Coord, passable: Passable) -> Iterable[Tuple[Coord, int]]:
    cx, cy = current
    for dx, dy in DIRECTIONS:
        nx, ny = cx + dx, cy + dy
        if passable(nx, ny):
            yield (nx, ny), 1

def _jump(x: int, y: int, dx: int, dy: int, goal: Coord, passable: Passable) -> Optional[Coord]:
    """Slide from (x, y) along (dx, dy) to the next cell where the run can branch."""
    while True:
        x += dx
        y += dy
        if not passable(x, y):
            # Dead-end corridor, nothing worth expanding
            return None
        if (x, y) == goal:
            return (x, y)
        if dx != 0:
            if passable(x, y - 1) or passable(x, y + 1):
                return (x, y)
        elif passable(x - 1, y) or passable(x + 1, y):
            return (x, y)

def _jump_successors(current: Coord, goal: Coord, passable: Passable) -> Iterable[Tuple[Coord, int]]:
    cx, cy = current
    for dx, dy in DIRECTIONS:
        node = _jump(cx, cy, dx, dy, goal, passable)
        if node is not None:
            yield node, manhattan(current, node)

def _reconstruct(came_from: np.ndarray, start: Coord, goal: Coord) -> List[Coord]:
    """Walk predecessors back to start, then expand each straight segment."""
    nodes = [goal]
    current = goal
    while current != start:
        px, py = came_from[current]
        current = (int(px), int(py))
        nodes.append(current)
    nodes.reverse()

    path: List[Coord] = [start]
    for (ax, ay), (bx, by) in zip(nodes, nodes[1:]):
        dx = (bx > ax) - (bx < ax)
        dy = (by > ay) - (by < ay)
        x, y = ax, ay
        while (x, y) != (bx, by):
            x += dx
            y += dy
            path.append((x, y))
    return path

def find_path(start: Coord, goal: Coord, occupancy: np.ndarray,
              window: Optional[SearchWindow] = None, *, jump: bool = False,
              max_expansions: Optional[int] = None) -> List[Coord]:
    """Shortest 4-directional path from start to goal, or [] if none exists.

    Args:
        start: Start cell, always treated as passable
        goal: Goal cell; an occupied goal is unreachable unless it is the start
        occupancy: Boolean (WIDTH, HEIGHT) array, True means blocked
        window: Cells the search may visit, defaults to the whole grid
        jump: Skip straight corridor runs instead of stepping through them
        max_expansions: Give up (return []) after expanding this many nodes

    Raises:
        GridBoundsError: start/goal off the grid or outside the window, or an
            occupancy array of the wrong shape
    """
    start = check_coord((int(start[0]), int(start[1])))
    goal = check_coord((int(goal[0]), int(goal[1])))
    if occupancy.shape != (WIDTH, HEIGHT):
        raise GridBoundsError(f"occupancy shape {occupancy.shape} != {(WIDTH, HEIGHT)}")
    if window is None:
        window = SearchWindow.full()
    if not window.contains(*start) or not window.contains(*goal):
        raise GridBoundsError(f"start {start} / goal {goal} outside search window {window}")

    if start == goal:
        return [start]
    if occupancy[goal]:
        return []

    def passable(x: int, y: int) -> bool:
        if not window.contains(x, y):
            return False
        return not occupancy[x, y] or (x, y) == start

    successors = _jump_successors if jump else _step_successors

    g_score = np.full((WIDTH, HEIGHT), UNREACHED, dtype=np.int32)
    came_from = np.full((WIDTH, HEIGHT, 2), -1, dtype=np.int32)
    closed = np.zeros((WIDTH, HEIGHT), dtype=bool)
    order = itertools.count()

    g_score[start] = 0
    h = manhattan(start, goal)
    frontier: List[Tuple[int, int, int, Coord]] = [(h, h, next(order), start)]
    expansions = 0

    while frontier:
        _, _, _, current = heapq.heappop(frontier)
        if closed[current]:
            continue  # stale entry
        if current == goal:
            return _reconstruct(came_from, start, goal)
        closed[current] = True

        expansions += 1
        if max_expansions and expansions > max_expansions:
            logger.debug("Path search %s -> %s gave up after %d expansions", start, goal, max_expansions)
            return []

        g_current = int(g_score[current])
        for neighbor, cost in successors(current, goal, passable):
            if closed[neighbor]:
                continue
            tentative = g_current + cost
            if tentative < g_score[neighbor]:
                g_score[neighbor] = tentative
                came_from[neighbor] = current
                h = manhattan(neighbor, goal)
                heapq.heappush(frontier, (tentative + h, h, next(order), neighbor))

    return []

class UnitTargetPathFinder:
    """Path from an attacking unit to its target through the other live units."""

    def __init__(self, margin: Optional[int] = DEFAULT_MARGIN, jump: bool = True,
                 max_expansions: Optional[int] = None):
        self.margin = margin
        self.jump = jump
        self.max_expansions = max_expansions

    def window_for(self, attacker: Unit, target: Unit) -> SearchWindow:
        if self.margin is None:
            return SearchWindow.full()
        return SearchWindow.around(attacker.pos, target.pos, self.margin)

    def get_target_path(self, attacker: Unit, target: Unit, units: Iterable[Unit]) -> List[Coord]:
        """Cells from attacker to target; [] means the attack has to wait."""
        occupancy = build_occupancy(units, attacker, target)
        return find_path(attacker.pos, target.pos, occupancy, self.window_for(attacker, target),
                         jump=self.jump, max_expansions=self.max_expansions)
