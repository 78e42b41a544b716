"""
Board module - bit-packed grid storage.
"""

from strategy_core.board.bitboard import BitPackedBoard

__all__ = ["BitPackedBoard"]
