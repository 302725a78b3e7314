"""
Pure round transitions.

Each function takes a ``GameSession`` snapshot and returns the next one (or
a sequence of them for dealer play). Nothing here touches storage, events
or the clock, so a failure leaves the caller's stored snapshot untouched.
"""

from decimal import Decimal, InvalidOperation

from core.cards import Card, draw
from core.fairness.seeds import ProvablyFairRecord
from core.fairness.shuffle import provably_fair_deck
from core.game.errors import InvalidBet
from core.game.session import DealerStep, GameSession
from core.game.state import GameState, advance
from core.hand import Outcome, is_busted, payout, resolve, score

DEALER_STANDS_ON = 17

_NO_PAYOUT = (Outcome.DEALER_WIN, Outcome.BUST)


def new_session(session_id: str, balance: Decimal, record: ProvablyFairRecord) -> GameSession:
    """Fresh session waiting for a bet."""
    return GameSession(id=session_id, provably_fair=record, balance=balance)


def start_round(session: GameSession, amount: Decimal | int) -> GameSession:
    """
    Take the bet, build the round's deck and deal two cards each.

    Raises:
        IllegalTransition: outside the betting state
        InvalidBet: if the amount is not a finite positive number within the balance
    """
    state = advance(session.game_state, "place_bet")

    try:
        amount = Decimal(str(amount))
    except InvalidOperation as exc:
        raise InvalidBet(amount, session.balance) from exc
    if not amount.is_finite() or amount <= 0 or amount > session.balance:
        raise InvalidBet(amount, session.balance)

    record = session.provably_fair
    deck: tuple[Card, ...] = tuple(
        provably_fair_deck(record.server_seed, record.client_seed, record.nonce)
    )

    # Dealer up card, dealer hole card, then the player's two
    up_card, deck = draw(deck)
    hole_card, deck = draw(deck)
    first, deck = draw(deck)
    second, deck = draw(deck)

    return session.evolve(
        deck=deck,
        dealer_cards=(up_card.face_up(), hole_card.face_down()),
        player_cards=(first.face_up(), second.face_up()),
        bet=amount,
        balance=session.balance - amount,
        game_state=state,
        game_result=None,
    )


def apply_hit(session: GameSession) -> GameSession:
    """
    Deal the player one card.

    A bust ends the round at once: every dealer card is turned over, the
    dealer does not draw, and the seeds become revealable.
    """
    state = advance(session.game_state, "hit")

    card, deck = draw(session.deck)
    player_cards = session.player_cards + (card.face_up(),)

    if not is_busted(player_cards):
        return session.evolve(deck=deck, player_cards=player_cards, game_state=state)

    return session.evolve(
        deck=deck,
        player_cards=player_cards,
        dealer_cards=tuple(c.face_up() for c in session.dealer_cards),
        game_state=advance(state, "bust"),
        game_result=Outcome.BUST,
        provably_fair=session.provably_fair.complete(),
    )


def recover_for_stand(session: GameSession) -> GameSession | None:
    """
    Coerce a drifted session back to PLAYING for a stand.

    Returns the coerced snapshot, or None when no coercion applies.
    Duplicate or out-of-order requests can leave the stored state behind
    the hands; if both hands are dealt and unsettled the round is resumable.
    """
    if session.game_state == GameState.PLAYING or not session.has_live_hands:
        return None
    return session.evolve(game_state=GameState.PLAYING)


def play_dealer(session: GameSession, stands_on: int = DEALER_STANDS_ON) -> list[DealerStep]:
    """
    Reveal the hole card and draw until the dealer reaches ``stands_on``.

    Returns one step per observable change: the reveal, each draw, and the
    settled snapshot last. The dealer stands on every 17, soft or hard.
    """
    state = advance(session.game_state, "stand")

    current = session.evolve(
        dealer_cards=tuple(c.face_up() for c in session.dealer_cards),
        game_state=state,
    )
    steps = [DealerStep(current, revealed=True)]

    while score(current.dealer_cards) < stands_on:
        card, deck = draw(current.deck)
        current = current.evolve(deck=deck, dealer_cards=current.dealer_cards + (card.face_up(),))
        steps.append(DealerStep(current, drawn=card))

    steps.append(DealerStep(settle(current), final=True))
    return steps


def settle(session: GameSession) -> GameSession:
    """Resolve the hands, credit the payout and complete the seed record."""
    state = advance(session.game_state, "settle")
    result = resolve(session.player_cards, session.dealer_cards)

    balance = session.balance
    if result not in _NO_PAYOUT:
        balance += payout(session.bet, result)

    return session.evolve(
        game_state=state,
        game_result=result,
        balance=balance,
        provably_fair=session.provably_fair.complete(),
    )


def reset_round(session: GameSession, record: ProvablyFairRecord) -> GameSession:
    """
    Clear the table for the next bet with fresh seeds.

    The balance is kept; the finished stake is remembered as ``last_bet``.
    """
    state = advance(session.game_state, "new_round")
    return session.evolve(
        deck=(),
        dealer_cards=(),
        player_cards=(),
        bet=Decimal("0"),
        game_result=None,
        game_state=state,
        provably_fair=record,
        last_bet=session.bet or session.last_bet,
    )
