"""Tests for scoring, hand resolution and payouts."""

from decimal import Decimal

import pytest
from hypothesis import given

from conftest import cards, hand_strategy
from core.hand import (
    Outcome,
    is_blackjack,
    is_busted,
    is_soft,
    payout,
    resolve,
    score,
)


class TestScore:
    """Tests for the scoring engine."""

    def test_empty_hand(self):
        """Test empty hand scores zero."""
        assert score([]) == 0

    def test_blackjack(self):
        """Test ace plus king is 21."""
        assert score(cards("AS", "KH")) == 21

    def test_two_aces(self):
        """Test one ace stays 11 and one drops to 1."""
        assert score(cards("AS", "AH")) == 12

    def test_bust_total(self):
        """Test K-Q-2 busts at 22."""
        assert score(cards("KS", "QH", "2C")) == 22

    def test_face_cards(self):
        """Test J, Q, K count 10."""
        assert score(cards("JS", "QH", "KC")) == 30

    def test_soft_to_hard_transition(self):
        """Test ace switching from 11 to 1."""
        assert score(cards("AS")) == 11
        assert score(cards("AS", "5H")) == 16
        assert score(cards("AS", "5H", "8C")) == 14

    def test_four_aces(self):
        """Test four aces count 14."""
        assert score(cards("AS", "AH", "AD", "AC")) == 14

    def test_minimal_bust_with_aces(self):
        """Test a bust with aces reports the lowest total."""
        assert score(cards("AS", "KH", "QD", "5C")) == 26

    def test_hidden_flag_is_ignored(self):
        """Test that face-down cards still count server-side."""
        hand = cards("10S", "7H")
        assert score((hand[0], hand[1].face_down())) == 17

    def test_score_is_idempotent(self):
        """Test repeated scoring returns the same value."""
        hand = cards("AS", "6H", "AD")
        assert score(hand) == score(hand) == 18

    @given(hand_strategy(min_cards=0, max_cards=8))
    def test_score_bounds(self, hand):
        """Test that a total above 21 only happens with every ace at 1."""
        total = score(hand)
        hard_total = sum(1 if c.is_ace else c.value for c in hand)
        assert total >= hard_total
        assert (total - hard_total) % 10 == 0
        if total > 21:
            assert total == hard_total


class TestHandProperties:
    """Tests for soft, blackjack and bust helpers."""

    def test_soft_hand(self):
        """Test soft 17 is soft."""
        assert is_soft(cards("AS", "6H"))

    def test_hard_hand(self):
        """Test hands without usable aces are hard."""
        assert not is_soft(cards("10S", "6H"))
        assert not is_soft(cards("AS", "6H", "10C"))

    def test_blackjack_needs_two_cards(self):
        """Test that 21 with 3 cards is not blackjack."""
        assert is_blackjack(cards("AS", "QH"))
        assert not is_blackjack(cards("7S", "7H", "7C"))

    def test_busted(self):
        """Test bust detection."""
        assert is_busted(cards("10S", "6H", "KC"))
        assert not is_busted(cards("10S", "AH", "KC"))


class TestResolve:
    """Tests for outcome precedence."""

    def test_player_blackjack(self):
        """Test natural against a 20."""
        assert resolve(cards("AS", "KH"), cards("KS", "QD")) == Outcome.BLACKJACK

    def test_both_blackjack_push(self):
        """Test two naturals push."""
        assert resolve(cards("AS", "KH"), cards("AD", "QC")) == Outcome.PUSH

    def test_higher_total_wins(self):
        """Test 19 beats 18."""
        assert resolve(cards("10S", "9H"), cards("10D", "8C")) == Outcome.PLAYER_WIN

    def test_dealer_higher_wins(self):
        """Test 20 beats 19."""
        assert resolve(cards("10S", "9H"), cards("10D", "QC")) == Outcome.DEALER_WIN

    def test_equal_totals_push(self):
        """Test equal totals push."""
        assert resolve(cards("10S", "8H"), cards("9D", "9C")) == Outcome.PUSH

    def test_player_bust_beats_dealer_bust(self):
        """Test that a player bust loses even if the dealer busts too."""
        assert resolve(cards("KS", "QH", "2C"), cards("10D", "6C", "9H")) == Outcome.BUST

    def test_dealer_bust(self):
        """Test dealer bust against a standing hand."""
        assert resolve(cards("10S", "2H"), cards("10D", "6C", "9H")) == Outcome.DEALER_BUST

    def test_dealer_bust_checked_before_natural(self):
        """Test precedence: dealer bust is reported before a player natural."""
        assert resolve(cards("AS", "KH"), cards("10D", "6C", "9H")) == Outcome.DEALER_BUST

    def test_natural_beats_three_card_21(self):
        """Test that a natural wins over a dealer's multi-card 21."""
        assert resolve(cards("AS", "KH"), cards("7D", "7C", "7H")) == Outcome.BLACKJACK

    def test_three_card_21_against_dealer_natural_pushes(self):
        """Test that only a player natural gets the two-card check; 21 vs 21 pushes."""
        assert resolve(cards("7D", "7C", "7H"), cards("AS", "KH")) == Outcome.PUSH


class TestPayout:
    """Tests for the payout table."""

    @pytest.mark.parametrize(
        ("outcome", "expected"),
        [
            (Outcome.BLACKJACK, Decimal("250")),
            (Outcome.PUSH, Decimal("100")),
            (Outcome.PLAYER_WIN, Decimal("200")),
            (Outcome.DEALER_BUST, Decimal("200")),
            (Outcome.DEALER_WIN, Decimal("0")),
            (Outcome.BUST, Decimal("0")),
        ],
    )
    def test_payout_table(self, outcome, expected):
        """Test payouts for a 100 stake."""
        assert payout(100, outcome) == expected

    def test_fractional_blackjack_payout(self):
        """Test 3:2 on an odd stake keeps the half unit."""
        assert payout(Decimal("15"), Outcome.BLACKJACK) == Decimal("37.5")
