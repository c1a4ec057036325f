"""
Tests for partial update column selection.
"""

import pytest

from finance_tracker.db.partial_update import build_update_data


def test_only_sent_known_columns_are_kept():
    updates = {"notes": "x", "tag_ids": ["t1"], "unknown": 1}

    assert build_update_data(updates, columns=("notes", "bank_account_id")) == {"notes": "x"}


def test_explicit_none_is_kept_for_nullable_columns():
    update_data = build_update_data(
        {"bank_account_id": None},
        columns=("amount", "bank_account_id"),
        required=("amount",),
    )

    assert update_data == {"bank_account_id": None}


def test_required_columns_cannot_be_cleared():
    with pytest.raises(ValueError, match="Cannot clear required field\\(s\\): name, type"):
        build_update_data(
            {"name": None, "type": None, "description": None},
            columns=("name", "type", "description"),
            required=("name", "type"),
        )


def test_nothing_sent():
    assert build_update_data({}, columns=("name",), required=("name",)) == {}
