from __future__ import annotations

import pytest

from admin_console.errors import SelectionError
from admin_console.models import HasLocationFilter, SelectionValue


def test_selection_value_rejects_gaps_in_the_chain() -> None:
    with pytest.raises(SelectionError):
        SelectionValue(district_id="d-1")
    with pytest.raises(SelectionError):
        SelectionValue(state_id="s-1", block_id="b-1")
    with pytest.raises(SelectionError):
        SelectionValue(state_id="s-1", district_id="d-1", village_id="v-1")


def test_selection_value_accepts_state_code_as_parent() -> None:
    value = SelectionValue(country_code="IN", state_code="MH", district_id="d-1")

    assert value.as_params() == {"countryCode": "IN", "stateCode": "MH", "districtId": "d-1"}
    assert not value.is_empty()


def test_selection_value_get_and_empty() -> None:
    value = SelectionValue()

    assert value.is_empty()
    assert value.get("state_id") is None
    with pytest.raises(KeyError):
        value.get("pincode")


def test_has_location_filter_maps_to_query_value() -> None:
    assert HasLocationFilter.ALL.as_query() is None
    assert HasLocationFilter.YES.as_query() is True
    assert HasLocationFilter.NO.as_query() is False
