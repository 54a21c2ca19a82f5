"""
Tests for staff visibility masks.
"""

import pytest

from apps.core.exceptions import ValidationError
from apps.core.visibility import VisibilityMask


class TestVisibilityMask:
    def test_hidden_month(self):
        mask = VisibilityMask.from_json([{"year": 2024, "month": 3}], [])

        assert mask.hides(2024, 3, 1)
        assert mask.hides(2024, 3, 31)
        assert not mask.hides(2024, 4, 1)
        assert not mask.hides(2023, 3, 15)

    def test_hidden_window_is_inclusive(self):
        mask = VisibilityMask.from_json(
            [], [{"year": 2024, "month": 4, "start_day": 1, "end_day": 15}]
        )

        assert mask.hides(2024, 4, 1)
        assert mask.hides(2024, 4, 15)
        assert not mask.hides(2024, 4, 16)
        assert not mask.hides(2024, 5, 10)

    def test_empty_mask(self):
        mask = VisibilityMask.from_json(None, None)
        assert mask.is_empty
        assert not mask.hides(2024, 3, 15)

    @pytest.mark.parametrize(
        "months",
        [
            [{"year": 2024, "month": 13}],
            [{"year": 2024}],
            [{"year": 2024, "month": "3"}],
            [{"year": True, "month": 3}],
        ],
    )
    def test_invalid_month_entry(self, months):
        with pytest.raises(ValidationError) as exc_info:
            VisibilityMask.from_json(months, [])
        assert exc_info.value.field == "hidden_months[0]"

    def test_window_end_before_start(self):
        windows = [
            {"year": 2024, "month": 4, "start_day": 1, "end_day": 2},
            {"year": 2024, "month": 4, "start_day": 10, "end_day": 5},
        ]
        with pytest.raises(ValidationError) as exc_info:
            VisibilityMask.from_json([], windows)
        assert exc_info.value.field == "hidden_windows[1]"

    def test_json_output_is_sorted(self):
        mask = VisibilityMask.from_json(
            [{"year": 2024, "month": 5}, {"year": 2023, "month": 12}], []
        )
        assert mask.months_as_json() == [
            {"year": 2023, "month": 12},
            {"year": 2024, "month": 5},
        ]


@pytest.mark.django_db
class TestStaffMask:
    def test_replace_is_full_replacement(self, staff):
        staff.replace_visibility_mask([{"year": 2024, "month": 3}], [])
        staff.replace_visibility_mask(
            [], [{"year": 2024, "month": 4, "start_day": 1, "end_day": 15}]
        )
        staff.refresh_from_db()

        assert staff.hidden_months == []
        assert not staff.visibility_mask.hides(2024, 3, 10)
        assert staff.visibility_mask.hides(2024, 4, 10)

    def test_invalid_mask_is_not_saved(self, staff):
        staff.replace_visibility_mask([{"year": 2024, "month": 3}], [])

        with pytest.raises(ValidationError):
            staff.replace_visibility_mask([{"year": 2024, "month": 0}], [])

        staff.refresh_from_db()
        assert staff.hidden_months == [{"year": 2024, "month": 3}]
