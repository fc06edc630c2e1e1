from datetime import datetime, timezone

import pytest

from salesanalytics.dates import DateRangeError, parse_date_range


def test_valid_range():
    start, end = parse_date_range({"start": "2024-01-01", "end": "2024-12-31"})
    assert start == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert end == datetime(2024, 12, 31, tzinfo=timezone.utc)


def test_start_before_end_is_not_required():
    start, end = parse_date_range({"start": "2024-12-31", "end": "2024-01-01"})
    assert start > end


@pytest.mark.parametrize("start", ["", "2024-1-01", "01-01-2024", "2024-02-30", "2024-13-01", "nonsense"])
def test_invalid_start(start):
    with pytest.raises(DateRangeError, match="invalid start date"):
        parse_date_range({"start": start, "end": "2024-12-31"})


@pytest.mark.parametrize("end", ["", "2024-12-1", "2024/12/31", "2024-12-32"])
def test_invalid_end(end):
    with pytest.raises(DateRangeError, match="invalid end date"):
        parse_date_range({"start": "2024-01-01", "end": end})


def test_missing_parameters_report_start_first():
    with pytest.raises(DateRangeError, match="invalid start date"):
        parse_date_range({})


def test_error_is_value_error():
    with pytest.raises(ValueError):
        parse_date_range({"start": "2024-01-01"})