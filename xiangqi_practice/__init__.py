"""
Xiangqi Practice

Chinese Chess rules engine and minimax opponent for human-vs-engine practice.
"""

from xiangqi_practice.board import Board
from xiangqi_practice.controller import ControllerState, GameController
from xiangqi_practice.game import GameRecord, GameSession
from xiangqi_practice.types import Color, GameResult, Move, MoveRecord, Piece, PieceType, Position

__all__ = [
    "Board",
    "Color",
    "ControllerState",
    "GameController",
    "GameRecord",
    "GameResult",
    "GameSession",
    "Move",
    "MoveRecord",
    "Piece",
    "PieceType",
    "Position",
]
