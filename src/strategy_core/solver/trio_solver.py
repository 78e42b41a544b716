"""
Trio solver - adjacency-pruned enumeration for the 7x7 arithmetic puzzle.

A solution is an ordered triple of linearly adjacent cells (a, b, c) with
a*b + c == target or a*b - c == target. Only the 240 ordered runs of three
consecutive cells (8 directions) can qualify, so the solver tests those
instead of all ordered cell triples.

Usage:
    grid, target = generate_puzzle(level=2, rng=np.random.default_rng(7))
    report = solve(grid, target)
    report.count, report.plus_count, report.difficulty_score
    hint = suggest_solution(report.solutions, Difficulty.EASY, rng)
"""

from __future__ import annotations

import logging
import math
from itertools import permutations
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from strategy_core.core.types import Coord, Difficulty

logger = logging.getLogger(__name__)

SIZE = 7
MAX_GENERATION_ATTEMPTS = 50

Triple = Tuple[Coord, Coord, Coord]

# All 8 step directions: each run is listed once per reading direction.
_STEPS = ((0, 1), (0, -1), (1, 0), (-1, 0), (1, 1), (-1, -1), (1, -1), (-1, 1))


def is_linear_adjacent(a: Coord, b: Coord, c: Coord) -> bool:
    """True if a, b, c are consecutive cells along one straight line."""
    d1 = (b[0] - a[0], b[1] - a[1])
    d2 = (c[0] - b[0], c[1] - b[1])
    return d1 == d2 and d1 != (0, 0) and abs(d1[0]) <= 1 and abs(d1[1]) <= 1


def _adjacent_triples(size: int) -> Tuple[Triple, ...]:
    triples = []
    for r in range(size):
        for c in range(size):
            for dr, dc in _STEPS:
                end = (r + 2 * dr, c + 2 * dc)
                if 0 <= end[0] < size and 0 <= end[1] < size:
                    triples.append(((r, c), (r + dr, c + dc), end))
    return tuple(triples)


ADJACENT_TRIPLES: Tuple[Triple, ...] = _adjacent_triples(SIZE)

# Flat indices of ADJACENT_TRIPLES, shape (240, 3).
_TRIPLE_INDEX = np.array(
    [[r * SIZE + c for r, c in t] for t in ADJACENT_TRIPLES], dtype=np.int32
)


class Solution(NamedTuple):
    cells: Triple
    values: Tuple[int, int, int]
    operator: str  # '+' or '-'
    target: int

    @property
    def expression(self) -> str:
        a, b, c = self.values
        return f"{a}×{b}{self.operator}{c}={self.target}"


class SolveReport(NamedTuple):
    solutions: List[Solution]
    plus_count: int
    minus_count: int

    @property
    def count(self) -> int:
        return len(self.solutions)

    @property
    def difficulty_score(self) -> float:
        """Scarcity score: 100 for a single (or no) solution, falling as 100/n."""
        return difficulty_score(self.count)


class TrioLevel(NamedTuple):
    name: str
    digit_counts: Tuple[int, ...]  # copies of digits 1..9 in the 49-cell pool
    target_range: Tuple[int, int]
    max_solutions: int


TRIO_LEVELS: Dict[int, TrioLevel] = {
    1: TrioLevel("kinderfreundlich", (8, 8, 6, 6, 5, 4, 3, 2, 1), (3, 15), 10),
    2: TrioLevel("vollspektrum", (5, 5, 5, 5, 9, 5, 5, 5, 5), (5, 25), 8),
    3: TrioLevel("strategisch", (3, 4, 5, 6, 7, 6, 6, 6, 6), (10, 40), 6),
    4: TrioLevel("analytisch", (2, 3, 4, 5, 5, 6, 7, 8, 9), (15, 60), 4),
}


def level_name(level: int) -> str:
    if level not in TRIO_LEVELS:
        raise ValueError(f"Unknown Trio level: {level}. Available: {', '.join(map(str, TRIO_LEVELS))}")
    return TRIO_LEVELS[level].name


def level_from_name(name: str) -> int:
    for level, settings in TRIO_LEVELS.items():
        if settings.name == name.lower():
            return level
    available = ", ".join(settings.name for settings in TRIO_LEVELS.values())
    raise ValueError(f"Unknown Trio level: {name}. Available: {available}")


def difficulty_score(count: int) -> float:
    if count <= 0:
        return 100.0
    return round(100.0 / count, 2)


# ---------------------------------------------------------------------------
# Solving
# ---------------------------------------------------------------------------

def evaluate_triple(values: Sequence[int], target: int) -> Optional[str]:
    """Operator that makes a*b (+|-) c hit target, or None."""
    a, b, c = (int(v) for v in values)
    if a * b + c == target:
        return "+"
    if a * b - c == target:
        return "-"
    return None


def check_triple(grid: np.ndarray, cells: Sequence[Coord], target: int) -> Optional[Solution]:
    """Solution for a claimed triple, or None for no match."""
    if len(cells) != 3:
        return None
    a, b, c = (tuple(cell) for cell in cells)
    rows, cols = grid.shape
    if not all(0 <= r < rows and 0 <= col < cols for r, col in (a, b, c)):
        return None
    if not is_linear_adjacent(a, b, c):
        return None
    values = (int(grid[a]), int(grid[b]), int(grid[c]))
    op = evaluate_triple(values, target)
    if op is None:
        return None
    return Solution((a, b, c), values, op, target)


def _triple_values(grid: np.ndarray) -> np.ndarray:
    return np.asarray(grid, dtype=np.int32).ravel()[_TRIPLE_INDEX]


def solve(grid: np.ndarray, target: int) -> SolveReport:
    """Every solution on the board, tested over adjacent runs only."""
    vals = _triple_values(grid)
    prod = vals[:, 0] * vals[:, 1]
    plus = prod + vals[:, 2] == target
    minus = (prod - vals[:, 2] == target) & ~plus

    solutions = []
    for i in np.flatnonzero(plus | minus):
        values = tuple(int(v) for v in vals[i])
        solutions.append(Solution(ADJACENT_TRIPLES[i], values, "+" if plus[i] else "-", target))
    return SolveReport(solutions, int(plus.sum()), int(minus.sum()))


def brute_force_solutions(grid: np.ndarray, target: int) -> List[Solution]:
    """
    Reference enumerator over all ordered triples of distinct cells.

    Slow (about 110k triples); kept to cross-check solve().
    """
    cells = [(r, c) for r in range(SIZE) for c in range(SIZE)]
    found = []
    for a, b, c in permutations(cells, 3):
        if not is_linear_adjacent(a, b, c):
            continue
        solution = check_triple(grid, (a, b, c), target)
        if solution is not None:
            found.append(solution)
    return found


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

def generate_digits(level: int, rng: np.random.Generator) -> np.ndarray:
    """Shuffle the level's digit pool onto a 7x7 grid; short pools pad with 1s."""
    settings = TRIO_LEVELS[level]
    pool = [digit for digit, n in enumerate(settings.digit_counts, start=1) for _ in range(n)]
    pool += [1] * (SIZE * SIZE - len(pool))
    return rng.permutation(np.array(pool[: SIZE * SIZE], dtype=np.int8)).reshape(SIZE, SIZE)


def target_counts(grid: np.ndarray) -> Dict[int, int]:
    """Reachable positive target -> number of solutions."""
    vals = _triple_values(grid)
    prod = vals[:, 0] * vals[:, 1]
    reachable = np.concatenate([prod + vals[:, 2], prod - vals[:, 2]])
    reachable = reachable[reachable > 0]
    counts = np.bincount(reachable)
    return {int(t): int(n) for t, n in enumerate(counts) if n}


def pick_target(grid: np.ndarray, level: int, rng: np.random.Generator) -> Optional[int]:
    """A target inside the level's range with 1..max_solutions solutions."""
    settings = TRIO_LEVELS[level]
    lo, hi = settings.target_range
    counts = target_counts(grid)
    candidates = [t for t, n in counts.items() if lo <= t <= hi and n <= settings.max_solutions]
    if not candidates:
        return None
    return int(rng.choice(sorted(candidates)))


def generate_puzzle(level: int, rng: np.random.Generator) -> Tuple[np.ndarray, int]:
    """
    Draw boards until one offers a suitably scarce target.

    After MAX_GENERATION_ATTEMPTS the rarest in-range target of the last
    board is used, or failing that the rarest reachable target.
    """
    if level not in TRIO_LEVELS:
        raise ValueError(f"Unknown Trio level: {level}. Available: {', '.join(map(str, TRIO_LEVELS))}")

    for attempt in range(1, MAX_GENERATION_ATTEMPTS + 1):
        grid = generate_digits(level, rng)
        target = pick_target(grid, level, rng)
        if target is not None:
            logger.debug("Trio level %d: target %d after %d attempt(s)", level, target, attempt)
            return grid, target

    lo, hi = TRIO_LEVELS[level].target_range
    counts = target_counts(grid)
    in_range = {t: n for t, n in counts.items() if lo <= t <= hi} or counts
    target = min(in_range, key=lambda t: (in_range[t], t))
    logger.debug("Trio level %d: fell back to target %d", level, target)
    return grid, target


# ---------------------------------------------------------------------------
# Hints
# ---------------------------------------------------------------------------

def score_solution(solution: Solution) -> float:
    """Higher means easier to spot: addition, small digits, tight cells."""
    score = 10.0 if solution.operator == "+" else 5.0
    score += max(0.0, 10.0 - sum(solution.values) / 3)
    a, b, c = solution.cells
    spread = (math.dist(a, b) + math.dist(b, c) + math.dist(a, c)) / 3
    score += max(0.0, 10.0 - spread)
    return score


def rank_solutions(solutions: Sequence[Solution]) -> List[Solution]:
    return sorted(solutions, key=score_solution, reverse=True)


def suggest_solution(
    solutions: Sequence[Solution],
    difficulty: Difficulty,
    rng: np.random.Generator,
) -> Optional[Solution]:
    """
    Pick a hint: easy draws from the top half of the ranking, medium from
    the top quarter, hard and expert take the best.
    """
    if not solutions:
        return None
    ranked = rank_solutions(solutions)
    if difficulty is Difficulty.EASY:
        pool = ranked[: max(1, len(ranked) // 2)]
    elif difficulty is Difficulty.MEDIUM:
        pool = ranked[: max(1, len(ranked) // 4)]
    else:
        return ranked[0]
    return pool[int(rng.integers(len(pool)))]
