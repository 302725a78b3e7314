"""Game state enumeration and the round state machine."""

from enum import Enum

from transitions import Machine, MachineError

from core.game.errors import IllegalTransition


class GameState(Enum):
    """
    Round state machine states.

    Flow: BETTING → PLAYING → DEALER_TURN → GAME_OVER → BETTING
    A player bust goes straight from PLAYING to GAME_OVER.
    """

    BETTING = "betting"
    PLAYING = "playing"
    DEALER_TURN = "dealerTurn"
    GAME_OVER = "gameOver"

    def __str__(self) -> str:
        return self.value


class RoundPhase:
    """
    Model object driven by a ``transitions`` Machine.

    One is built per action from the stored state; triggering an action
    from a state that does not allow it raises ``IllegalTransition``.
    """

    STATES = [s.value for s in GameState]

    TRANSITIONS = [
        {"trigger": "place_bet", "source": "betting", "dest": "playing"},
        {"trigger": "hit", "source": "playing", "dest": "playing"},
        {"trigger": "bust", "source": "playing", "dest": "gameOver"},
        {"trigger": "stand", "source": "playing", "dest": "dealerTurn"},
        {"trigger": "settle", "source": "dealerTurn", "dest": "gameOver"},
        {"trigger": "new_round", "source": ["gameOver", "betting"], "dest": "betting"},
    ]

    def __init__(self, initial: GameState) -> None:
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial=initial.value,
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def state(self) -> GameState:
        """Get current state as enum."""
        return GameState(self._machine_state)  # type: ignore[attr-defined]

    def fire(self, action: str) -> GameState:
        """
        Run a trigger and return the new state.

        Raises:
            IllegalTransition: if ``action`` is not allowed from the current state
        """
        current = self.state
        try:
            self.trigger(action)  # type: ignore[attr-defined]
        except MachineError as exc:
            raise IllegalTransition(action, current) from exc
        return self.state


def advance(current: GameState, action: str) -> GameState:
    """State reached by running ``action`` from ``current``."""
    return RoundPhase(current).fire(action)

