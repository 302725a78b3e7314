"""Blackjack round engine: load, transition, persist, project."""

import asyncio
import weakref
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Callable, NamedTuple
from uuid import uuid4

from config import GameConfig, config
from core.fairness.seeds import ProvablyFairRecord, SeedSource, new_record
from core.fairness.verify import VerificationResult, dealt_order, verify_round
from core.game.errors import GameError, SessionExpired
from core.game.events import EventEmitter, EventType, GameEvent, log_event
from core.game.repository import SessionRepository
from core.game.rules import (
    apply_hit,
    new_session,
    play_dealer,
    recover_for_stand,
    reset_round,
    start_round,
)
from core.game.session import GameSession
from core.game.view import ClientView, expired_view, project
from core.hand import is_soft, score


@dataclass(frozen=True)
class ActionResult:
    """
    What an action produced.

    ``steps`` holds the intermediate dealer views of a stand, in order;
    ``error`` names the GameError subclass when the action was rejected.
    """

    view: ClientView
    steps: tuple[ClientView, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class _Transition(NamedTuple):
    session: GameSession
    view: ClientView
    steps: tuple[ClientView, ...] = ()
    events: tuple[tuple[EventType, dict[str, Any]], ...] = ()


def _default_id() -> str:
    return str(uuid4())


def _card_label(card) -> str:
    return "??" if card.hidden else str(card)


class BlackjackEngine:
    """
    Single-player blackjack engine over persisted session snapshots.

    Every action runs under a per-session lock: load the snapshot, compute
    the whole transition, save once, then emit events. Rejected actions
    come back as a view with a message; they are never raised.
    """

    def __init__(
        self,
        repository: SessionRepository,
        seeds: SeedSource | None = None,
        new_id: Callable[[], str] | None = None,
        settings: GameConfig | None = None,
        events: EventEmitter | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            repository: Session persistence
            seeds: Seed generation and hashing
            new_id: Identifier factory for sessions and games
            settings: Game settings (defaults to the global config)
            events: Event emitter (a new one if not provided)
        """
        self.repository = repository
        self.seeds = seeds or SeedSource()
        self.new_id = new_id or _default_id
        self.settings = settings or config.game
        self.events = events or EventEmitter()
        self.events.subscribe(log_event)
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def _lock(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    def _new_record(self) -> ProvablyFairRecord:
        return new_record(
            self.seeds,
            self.new_id,
            self.settings.server_seed_bytes,
            self.settings.client_seed_bytes,
        )

    def _expired(self) -> ClientView:
        return expired_view(self.settings.initial_balance, SessionExpired.message)

    async def _run(
        self,
        action: str,
        session_id: str,
        transition: Callable[[GameSession], _Transition],
    ) -> ActionResult:
        """Apply ``transition`` to the stored session under its lock."""
        async with self._lock(session_id):
            session = await self.repository.load(session_id)
            if session is None:
                self.events.emit_new(EventType.SESSION_EXPIRED, session_id=session_id, action=action)
                return ActionResult(view=self._expired(), error=SessionExpired.__name__)

            try:
                outcome = transition(session)
            except GameError as exc:
                self.events.emit_new(
                    EventType.INVALID_ACTION,
                    session_id=session_id,
                    action=action,
                    state=session.game_state.value,
                    reason=exc.message,
                )
                return ActionResult(
                    view=project(session, message=exc.message, new_id=self.new_id),
                    error=type(exc).__name__,
                )

            await self.repository.save(outcome.session)

        for event_type, data in outcome.events:
            self.events.emit_new(event_type, session_id=session_id, **data)
        self.events.emit_new(
            EventType.STATE_CHANGED,
            session_id=session_id,
            action=action,
            entry=session.game_state.value,
            exit=outcome.session.game_state.value,
            result=outcome.session.game_result.value if outcome.session.game_result else None,
        )
        return ActionResult(view=outcome.view, steps=outcome.steps)

    async def initialize(self, initial_balance: Decimal | int | None = None) -> ActionResult:
        """
        Start a new session in the betting state.

        Raises:
            ValueError: if the balance is negative
        """
        if initial_balance is None:
            balance = self.settings.initial_balance
        else:
            balance = Decimal(str(initial_balance))
        if balance < 0:
            raise ValueError("initial_balance cannot be negative")

        session = new_session(self.new_id(), balance, self._new_record())
        await self.repository.save(session)

        self.events.emit_new(
            EventType.SESSION_STARTED,
            session_id=session.id,
            balance=str(balance),
            hashed_server_seed=session.provably_fair.hashed_server_seed,
        )
        return ActionResult(view=project(session, new_id=self.new_id))

    async def get_state(self, session_id: str) -> ActionResult:
        """Current view without changing anything."""
        session = await self.repository.load(session_id)
        if session is None:
            return ActionResult(view=self._expired(), error=SessionExpired.__name__)
        return ActionResult(view=project(session, new_id=self.new_id))

    async def place_bet(self, session_id: str, amount: Decimal | int) -> ActionResult:
        """Place a bet and deal the opening cards."""

        def transition(session: GameSession) -> _Transition:
            updated = start_round(session, amount)
            events = [
                (EventType.BET_PLACED, {"amount": str(updated.bet), "balance": str(updated.balance)}),
                (EventType.DECK_SHUFFLED, {"game_id": updated.provably_fair.game_id}),
            ]
            for card in updated.dealer_cards:
                events.append((EventType.CARD_DEALT, {"hand": "dealer", "card": _card_label(card)}))
            for card in updated.player_cards:
                events.append((EventType.CARD_DEALT, {"hand": "player", "card": _card_label(card)}))
            events.append((EventType.ROUND_STARTED, {"player_score": score(updated.player_cards)}))
            return _Transition(
                updated,
                project(updated, initial_deal=True, new_id=self.new_id),
                events=tuple(events),
            )

        return await self._run("place_bet", session_id, transition)

    async def hit(self, session_id: str) -> ActionResult:
        """Deal the player another card; a bust ends the round."""

        def transition(session: GameSession) -> _Transition:
            updated = apply_hit(session)
            card = updated.player_cards[-1]
            events = [
                (EventType.CARD_DEALT, {"hand": "player", "card": str(card)}),
                (EventType.PLAYER_HIT, {"player_score": score(updated.player_cards)}),
            ]
            if updated.game_result is not None:
                events.append((EventType.PLAYER_BUSTS, {"player_score": score(updated.player_cards)}))
            return _Transition(
                updated,
                project(updated, mark_newest=True, new_id=self.new_id),
                events=tuple(events),
            )

        return await self._run("hit", session_id, transition)

    async def stand(self, session_id: str) -> ActionResult:
        """
        Stand: the dealer reveals, draws to 17 and the round settles.

        The result carries one view per dealer step (reveal, then each draw)
        followed by the settled view.
        """

        def transition(session: GameSession) -> _Transition:
            events: list[tuple[EventType, dict[str, Any]]] = []

            recovered = recover_for_stand(session)
            if recovered is not None:
                events.append((EventType.STATE_RECOVERED, {"from": session.game_state.value}))
                session = recovered

            events.append((EventType.PLAYER_STAND, {"player_score": score(session.player_cards)}))
            steps = play_dealer(session, self.settings.dealer_stands_on)

            views = []
            for step in steps[:-1]:
                dealer_score = score(step.session.dealer_cards)
                if step.revealed:
                    hole = step.session.dealer_cards[1] if len(step.session.dealer_cards) > 1 else None
                    events.append(
                        (EventType.DEALER_REVEALS, {"card": str(hole), "dealer_score": dealer_score})
                    )
                elif step.drawn is not None:
                    events.append(
                        (EventType.DEALER_HITS, {"card": str(step.drawn), "dealer_score": dealer_score})
                    )
                views.append(project(step.session, mark_newest=True, new_id=self.new_id))

            final = steps[-1].session
            dealer_score = score(final.dealer_cards)
            if dealer_score > 21:
                events.append((EventType.DEALER_BUSTS, {"dealer_score": dealer_score}))
            else:
                events.append(
                    (EventType.DEALER_STANDS, {"dealer_score": dealer_score, "soft": is_soft(final.dealer_cards)})
                )
            events.append(
                (
                    EventType.ROUND_SETTLED,
                    {
                        "result": final.game_result.value if final.game_result else None,
                        "bet": str(final.bet),
                        "balance": str(final.balance),
                    },
                )
            )
            return _Transition(
                final,
                project(final, new_id=self.new_id),
                steps=tuple(views),
                events=tuple(events),
            )

        return await self._run("stand", session_id, transition)

    async def new_round(self, session_id: str) -> ActionResult:
        """Clear the table and issue fresh seeds; the balance carries over."""

        def transition(session: GameSession) -> _Transition:
            updated = reset_round(session, self._new_record())
            # The last stake is echoed back so the client can offer a rebet
            view = replace(project(updated, new_id=self.new_id), bet=updated.last_bet)
            events = (
                (
                    EventType.ROUND_RESET,
                    {
                        "balance": str(updated.balance),
                        "hashed_server_seed": updated.provably_fair.hashed_server_seed,
                    },
                ),
            )
            return _Transition(updated, view, events=events)

        return await self._run("new_round", session_id, transition)

    async def verification(self, session_id: str) -> VerificationResult | None:
        """
        Recompute the current round from its seeds.

        Returns None until the round is completed and the seed revealed.
        """
        session = await self.repository.load(session_id)
        if session is None or not session.provably_fair.completed:
            return None
        record = session.provably_fair
        return verify_round(
            record.server_seed,
            record.hashed_server_seed,
            record.client_seed,
            record.nonce,
            dealt=dealt_order(session.player_cards, session.dealer_cards),
        )
