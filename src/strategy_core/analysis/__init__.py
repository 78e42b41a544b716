"""
Analysis module - threat and pattern detection.

threats  - line patterns for Connect4 and Gomoku
blockade - mobility tactics for the L-Game
"""

from strategy_core.analysis import blockade
from strategy_core.analysis.threats import ThreatAnalyzer, ThreatReport, connectivity, scan_runs

__all__ = [
    "ThreatAnalyzer",
    "ThreatReport",
    "blockade",
    "connectivity",
    "scan_runs",
]
