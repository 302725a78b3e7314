"""Recoverable game errors, turned into message-bearing views by the engine."""

from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.game.state import GameState


class GameError(Exception):
    """Base class for errors reported back to the player."""

    message = "Invalid action"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidBet(GameError):
    """Bet is not positive or exceeds the balance."""

    message = "Invalid bet amount"

    def __init__(self, amount: Decimal, balance: Decimal) -> None:
        super().__init__()
        self.amount = amount
        self.balance = balance


class IllegalTransition(GameError):
    """Action not allowed in the current state."""

    def __init__(self, action: str, state: "GameState") -> None:
        super().__init__(f"Invalid game state for {action.replace('_', ' ')} action")
        self.action = action
        self.state = state


class SessionExpired(GameError):
    """No stored session for the id."""

    message = "Session expired. Please start a new game."
