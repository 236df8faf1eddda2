from __future__ import annotations

import pytest

from frontend.formatting import money_label, percent_label


class TestPercentLabel:
    @pytest.mark.parametrize(
        ("stored", "expected"),
        [
            (1.5, "2%"),
            (0.8, "1%"),
            (115.9, "116%"),
            (None, "0%"),
            ("n/a", "0%"),
        ],
    )
    def test_shows_stored_value(self, stored, expected) -> None:
        assert percent_label(stored) == expected

    def test_small_goal_completion_is_not_scaled(self) -> None:
        assert percent_label(1.5, suffix=" da meta") == "2% da meta"


def test_money_label_uses_dot_grouping() -> None:
    assert money_label(1_234_567.4) == "R$ 1.234.567"
    assert money_label(None) == "R$ 0"
