"""
Solver module - exhaustive puzzle solving and generation.
"""

from strategy_core.solver.trio_solver import (
    ADJACENT_TRIPLES,
    TRIO_LEVELS,
    Solution,
    SolveReport,
    brute_force_solutions,
    check_triple,
    generate_puzzle,
    is_linear_adjacent,
    solve,
    suggest_solution,
)

__all__ = [
    "ADJACENT_TRIPLES",
    "TRIO_LEVELS",
    "Solution",
    "SolveReport",
    "brute_force_solutions",
    "check_triple",
    "generate_puzzle",
    "is_linear_adjacent",
    "solve",
    "suggest_solution",
]
