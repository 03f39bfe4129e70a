from unittest.mock import MagicMock

import pytest
import requests

from onboarding.exceptions.exceptions import UpstreamFormatError
from onboarding.services.upload.sheet_fetcher import SheetFetcher, extract_rows, with_author_id

URL = "https://script.google.com/macros/s/abc/exec?sheet=Nov"


def fake_session(body=None, text="{}", error=None):
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
        return session
    response = MagicMock()
    response.text = text
    response.json.return_value = body
    session.get.return_value = response
    return session


def test_plain_list_and_data_wrapper():
    rows = [{"author_id": "A1"}]

    assert extract_rows(rows) == rows
    assert extract_rows({"success": True, "data": rows}) == rows


def test_sheet_map_is_grouped_per_candidate():
    body = {
        "data": {
            "DailyQuizReports": [{"author_id": "A1", "Topic": "Python", "Daily Quiz counts": 4}],
            "AttendanceReports": [{"Author ID": "A1", "Month": "NOV'25", "Total Working Days": 20}],
        }
    }

    rows = extract_rows(body)

    assert rows == [{
        "author_id": "A1",
        "learningReport": {"DailyQuizReports": {"Python": {"Daily Quiz counts": 4}}},
        "attendanceReport": {"Total Working Days": {"NOV'25": 20}},
    }]


def test_rows_without_author_id_keep_their_place():
    body = {
        "AttendanceReports": [
            {"author_id": "A1", "Month": "NOV'25", "Total Working Days": 20},
            {"Month": "NOV'25", "Total Working Days": 20},
            {"author_id": "A3", "Month": "NOV'25", "Total Working Days": 20},
        ]
    }

    rows = extract_rows(body)

    assert [row["author_id"] for row in rows] == ["A1", None, "A3"]
    assert rows[1]["sourceSheet"] == "AttendanceReports"
    assert rows[1]["sourceRow"] == 2


def test_unexpected_shapes_are_rejected():
    with pytest.raises(UpstreamFormatError):
        extract_rows("rows")
    with pytest.raises(UpstreamFormatError):
        extract_rows({"message": "nothing here"})


def test_author_id_is_added_to_query():
    url = with_author_id(URL + "&author_id=old", "A1")

    assert "author_id=A1" in url
    assert "author_id=old" not in url
    assert "sheet=Nov" in url


def test_fetch_filters_rows_for_one_candidate():
    session = fake_session(body={"data": [{"author_id": "A1"}, {"author_id": "A2"}]})

    rows = SheetFetcher(timeout=5, session=session).fetch(URL, author_id="A1")

    assert rows == [{"author_id": "A1"}]
    called_url = session.get.call_args[0][0]
    assert "author_id=A1" in called_url
    assert session.get.call_args[1]["timeout"] == 5


def test_html_response_is_an_upstream_error():
    session = fake_session(text="<!DOCTYPE html><html><body>Sign in</body></html>")

    with pytest.raises(UpstreamFormatError, match="returned HTML instead of JSON"):
        SheetFetcher(session=session).fetch(URL)


def test_network_failure_is_an_upstream_error():
    session = fake_session(error=requests.exceptions.ConnectionError("refused"))

    with pytest.raises(UpstreamFormatError, match="Failed to fetch data from Google Sheets"):
        SheetFetcher(session=session).fetch(URL)


def test_invalid_json_is_an_upstream_error():
    session = fake_session()
    session.get.return_value.json.side_effect = ValueError("no json")

    with pytest.raises(UpstreamFormatError):
        SheetFetcher(session=session).fetch(URL)
