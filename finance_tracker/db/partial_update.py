"""
Column selection for PATCH-style partial updates.

Routes pass request.model_dump(exclude_unset=True): a key that is present was
sent by the caller, so an explicit None clears a nullable column while an
omitted field is left alone.
"""

from typing import Any, Dict, Iterable


def build_update_data(
    updates: Dict[str, Any],
    columns: Iterable[str],
    required: Iterable[str] = (),
) -> Dict[str, Any]:
    """
    Pick the column values of a partial update.

    Args:
        updates: Fields the caller sent (None means "clear")
        columns: Columns this resource lets callers write
        required: NOT NULL columns that may be changed but never cleared

    Returns:
        Dict ready for .update(), possibly empty

    Raises:
        ValueError: If a required column is set to None
    """
    update_data = {column: updates[column] for column in columns if column in updates}

    cleared = [column for column in required if column in update_data and update_data[column] is None]
    if cleared:
        raise ValueError(f"Cannot clear required field(s): {', '.join(cleared)}")

    return update_data
