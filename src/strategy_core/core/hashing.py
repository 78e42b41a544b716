"""
Board hashing utilities - keyed on packed words.
"""

import hashlib
from typing import Union

import numpy as np

from strategy_core.board.bitboard import BitPackedBoard


def hash_board(board: Union[BitPackedBoard, np.ndarray], player: int = 0) -> str:
    """
    Fast hash for board state.

    Packed boards hash their raw words directly; decoded grids hash their
    bytes. The optional player folds the side to move into the key.
    """
    if isinstance(board, BitPackedBoard):
        data = board.words.tobytes()
    elif board.dtype == np.object_:
        data = repr(board.tolist()).encode()
    else:
        data = np.ascontiguousarray(board).tobytes()

    digest = hashlib.sha256(data)
    if player:
        digest.update(bytes([int(player)]))
    return digest.hexdigest()[:16]
