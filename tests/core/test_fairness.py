"""Tests for provably-fair seeds, shuffle and verification."""

import hashlib
import hmac
import itertools

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from conftest import CountingSeedSource, cards
from core.cards import DECK_SIZE, new_ordered_deck
from core.fairness import (
    ProvablyFairRecord,
    SeedSource,
    byte_stream,
    new_record,
    provably_fair_deck,
    shuffle_indices,
    verify_round,
)
from core.fairness.shuffle import random_below
from core.fairness.verify import dealt_order

SERVER_SEED = "a" * 64
CLIENT_SEED = "b" * 32


class TestByteStream:
    """Tests for the keyed byte stream."""

    def test_first_block_is_hmac(self):
        """Test the first 32 bytes are HMAC-SHA256(server, 'client:nonce:0')."""
        expected = hmac.new(b"server", b"client:0:0", hashlib.sha256).digest()
        stream = byte_stream("server", "client")
        assert bytes(itertools.islice(stream, 32)) == expected

    def test_second_block_uses_next_round(self):
        """Test the stream continues with round 1."""
        expected = hmac.new(b"server", b"client:3:1", hashlib.sha256).digest()
        stream = byte_stream("server", "client", nonce=3)
        assert bytes(itertools.islice(stream, 32, 64)) == expected


class TestRandomBelow:
    """Tests for unbiased index sampling."""

    def test_rejects_words_past_limit(self):
        """Test that the top word is discarded for a non power-of-two range."""
        # 2**32 % 3 == 1, so 0xFFFFFFFF falls in the biased tail
        stream = iter([0xFF, 0xFF, 0xFF, 0xFF, 0x00, 0x00, 0x00, 0x05])
        assert random_below(stream, 3) == 2

    def test_power_of_two_never_rejects(self):
        """Test that a range dividing 2**32 accepts every word."""
        stream = iter([0xFF, 0xFF, 0xFF, 0xFF])
        assert random_below(stream, 4) == 3

    def test_rejects_non_positive_range(self):
        """Test invalid ranges."""
        with pytest.raises(ValueError):
            random_below(iter([]), 0)

    @given(st.text(max_size=16), st.integers(min_value=1, max_value=52))
    def test_result_in_range(self, client_seed, upper):
        """Test results stay inside [0, upper)."""
        value = random_below(byte_stream(SERVER_SEED, client_seed), upper)
        assert 0 <= value < upper


class TestShuffle:
    """Tests for the provably-fair shuffle."""

    def test_deterministic(self):
        """Test identical seeds give an identical deck."""
        assert provably_fair_deck(SERVER_SEED, CLIENT_SEED) == provably_fair_deck(SERVER_SEED, CLIENT_SEED)

    def test_permutation_of_all_cards(self):
        """Test no duplication and no omission."""
        deck = provably_fair_deck(SERVER_SEED, CLIENT_SEED)
        assert len(deck) == DECK_SIZE
        assert set(deck) == set(new_ordered_deck())

    def test_client_seed_changes_order(self):
        """Test that the client seed influences the deck."""
        assert provably_fair_deck(SERVER_SEED, CLIENT_SEED) != provably_fair_deck(SERVER_SEED, "c" * 32)

    def test_nonce_changes_order(self):
        """Test that the nonce influences the deck."""
        assert provably_fair_deck(SERVER_SEED, CLIENT_SEED, 0) != provably_fair_deck(SERVER_SEED, CLIENT_SEED, 1)

    def test_deck_follows_indices(self):
        """Test the deck maps the index permutation onto the ordered deck."""
        ordered = new_ordered_deck()
        indices = shuffle_indices(SERVER_SEED, CLIENT_SEED)
        assert provably_fair_deck(SERVER_SEED, CLIENT_SEED) == [ordered[i] for i in indices]

    @settings(max_examples=50)
    @given(st.text(min_size=1, max_size=64), st.text(max_size=32))
    def test_any_seed_pair_is_permutation(self, server_seed, client_seed):
        """Test the output is always a permutation of range(52)."""
        assert sorted(shuffle_indices(server_seed, client_seed)) == list(range(DECK_SIZE))


class TestSeeds:
    """Tests for seed generation and the fairness record."""

    def test_generate_seed_length(self):
        """Test hex encoding doubles the byte length."""
        seeds = SeedSource()
        assert len(seeds.generate_seed(32)) == 64
        assert len(seeds.generate_seed(16)) == 32

    def test_generate_seed_unique(self):
        """Test two seeds differ."""
        seeds = SeedSource()
        assert seeds.generate_seed(32) != seeds.generate_seed(32)

    def test_hash_is_sha256(self):
        """Test the commitment hash."""
        assert SeedSource().hash_seed("abc") == hashlib.sha256(b"abc").hexdigest()

    def test_new_record_commits_to_server_seed(self, new_id):
        """Test the record carries the hash of its server seed."""
        record = new_record(SeedSource(), new_id)
        assert record.hashed_server_seed == hashlib.sha256(record.server_seed.encode()).hexdigest()
        assert record.nonce == 0
        assert not record.completed
        assert record.game_id == "id-1"

    def test_new_records_never_reuse_seeds(self, new_id):
        """Test that consecutive records get fresh seeds."""
        seeds = CountingSeedSource()
        first = new_record(seeds, new_id)
        second = new_record(seeds, new_id)
        assert first.server_seed != second.server_seed
        assert first.client_seed != second.client_seed

    def test_public_dict_withholds_server_seed(self, record):
        """Test the server seed is hidden until completion."""
        assert record.to_public_dict()["server_seed"] is None
        completed = record.complete()
        assert completed.to_public_dict()["server_seed"] == record.server_seed
        assert not record.completed

    def test_record_dict_roundtrip(self, record):
        """Test storage serialization."""
        assert ProvablyFairRecord.from_dict(record.to_dict()) == record


class TestVerification:
    """Tests for post-round verification."""

    def test_verifies_honest_deal(self):
        """Test recomputing a deal from its seeds."""
        server_seed = "5" * 64
        hashed = hashlib.sha256(server_seed.encode()).hexdigest()
        deck = provably_fair_deck(server_seed, CLIENT_SEED)
        dealt = list(reversed(deck))[:6]

        result = verify_round(server_seed, hashed, CLIENT_SEED, dealt=dealt)

        assert result.hash_matches
        assert result.deal_matches
        assert result.verified
        assert result.deck[:6] == dealt

    def test_detects_wrong_server_seed(self):
        """Test a seed that does not match the commitment."""
        hashed = hashlib.sha256(b"committed").hexdigest()
        result = verify_round("swapped", hashed, CLIENT_SEED)
        assert not result.hash_matches
        assert result.deal_matches is None
        assert not result.verified

    def test_detects_tampered_deal(self):
        """Test dealt cards that differ from the recomputed deck."""
        server_seed = "5" * 64
        hashed = hashlib.sha256(server_seed.encode()).hexdigest()
        draw_order = list(reversed(provably_fair_deck(server_seed, CLIENT_SEED)))
        tampered = [draw_order[1], draw_order[0], *draw_order[2:4]]

        result = verify_round(server_seed, hashed, CLIENT_SEED, dealt=tampered)

        assert result.hash_matches
        assert result.deal_matches is False
        assert not result.verified

    def test_hidden_flags_do_not_matter(self):
        """Test face-down cards compare by rank and suit."""
        server_seed = "5" * 64
        hashed = hashlib.sha256(server_seed.encode()).hexdigest()
        draw_order = list(reversed(provably_fair_deck(server_seed, CLIENT_SEED)))
        dealt = [draw_order[0], draw_order[1].face_down()]

        assert verify_round(server_seed, hashed, CLIENT_SEED, dealt=dealt).verified

    def test_dealt_order(self):
        """Test cards are listed in the order they left the deck."""
        player = cards("2S", "3S", "4S")
        dealer = cards("5H", "6H", "7H")
        assert dealt_order(player, dealer) == list(cards("5H", "6H", "2S", "3S", "4S", "7H"))
