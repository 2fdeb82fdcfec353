"""
Fee Calculator

Pure functions over an event's fee schedule.
"""

from typing import Any, Iterable, Mapping, Union

Number = Union[int, float]


def compute_total_fee(
    selected_competition_ids: Iterable[str],
    competition_catalog: Iterable[Mapping[str, Any]],
) -> Number:
    """
    Sum the fee of every catalog competition whose id was selected.

    Ids missing from the catalog contribute 0; a competition selected twice
    is charged once.

    Args:
        selected_competition_ids: Competition IDs chosen on the form
        competition_catalog: Rows with at least ``id`` and ``fee``

    Returns:
        Total fee (0 for an empty selection)

    Example:
        >>> compute_total_fee(["c1", "c2"], [{"id": "c1", "fee": 0}, {"id": "c2", "fee": 100}])
        100
    """
    selected = set(selected_competition_ids)
    return sum(
        (competition.get("fee") or 0)
        for competition in competition_catalog
        if competition.get("id") in selected
    )


def is_payment_required(total_fee: Number) -> bool:
    return total_fee > 0
