"""
Unit tests for display identifier generation.
"""

import datetime
import random

import pytest

from optionality_os.engine import IdentifierGenerator

FIXED_NOW = datetime.datetime(2025, 2, 14, 9, 30, tzinfo=datetime.timezone.utc)


def pinned(seed=7, now=FIXED_NOW):
    return IdentifierGenerator(clock=lambda: now, rng=random.Random(seed))


class TestIdentifierGenerator:

    def test_email_contact(self):
        assert pinned().generate("jane", "jane.doe@example.com") == "J250214-1111"

    @pytest.mark.parametrize("contact,suffix", [
        ("+1 555 0123", "0123"),
        ("42", "1142"),
        ("a1b2", "1112"),
        ("  5550199  ", "0199"),
    ])
    def test_contact_suffix(self, contact, suffix):
        assert pinned().generate("Ana", contact) == f"A250214-{suffix}"

    def test_missing_name_uses_placeholder_initial(self):
        assert pinned().generate("", "0000").startswith("X250214-")
        assert pinned().generate(None, "0000").startswith("X250214-")

    def test_no_contact_is_random_but_seeded(self):
        first = pinned(seed=11).generate("Omar", None)
        second = pinned(seed=11).generate("Omar", "")

        assert first == second
        suffix = int(first.split("-")[1])
        assert 1000 <= suffix <= 9999

    def test_date_is_taken_in_utc(self):
        late_evening_utc = datetime.datetime(
            2025, 2, 14, 1, 0, tzinfo=datetime.timezone(datetime.timedelta(hours=5)))

        assert pinned(now=late_evening_utc).generate("Ana", "1234") == "A250213-1234"

    def test_format(self, identifiers):
        client_id = identifiers.generate("zoe", None)

        assert len(client_id) == 12
        assert client_id[0] == "Z"
        assert client_id[7] == "-"
        assert client_id[1:7].isdigit() and client_id[8:].isdigit()

    def test_engine_uses_injected_generator(self, decision_engine, high_optionality_answers):
        result = decision_engine.assess(high_optionality_answers)

        assert result.client_id == "J250214-1111"
        assert result.identity["email"] == "jane.doe@example.com"
        assert result.notes["idea_description"] == "Teach a weekend workshop"
