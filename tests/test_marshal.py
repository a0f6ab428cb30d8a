import json

import pytest

from bitlinks.core.errors import ApiError, BitlyTimeout
from bitlinks.core.marshal import (
    RequestFields,
    ResponseFields,
    marshal,
    marshal_countries,
    marshal_referrers,
    merge_fields,
    parse_body,
)
from bitlinks.core.models import (
    Country,
    LinkClicks,
    Operation,
    OperationKind,
    RawOutcome,
    Referrer,
    ResultRecord,
)


def outcome_for(kind: OperationKind, target: str, body: object, status: int = 200) -> RawOutcome:
    raw = body if isinstance(body, (bytes, type(None))) else json.dumps(body).encode("utf-8")
    return RawOutcome(operation=Operation(kind, target), status=status, body=raw)


class TestParseBody:
    """Tests for tolerant JSON decoding."""

    def test_valid_object(self) -> None:
        """Test that a JSON object is returned as-is."""
        assert parse_body(b'{"link": "http://bit.ly/abc"}') == {"link": "http://bit.ly/abc"}

    @pytest.mark.parametrize(
        argnames="body",
        argvalues=[b"<html>Bad Gateway</html>", b"{not json", b"", None, b"[1, 2]", b'"text"'],
    )
    def test_unusable_body_becomes_unexpected_error(self, body: bytes | None) -> None:
        """Test that malformed or non-object bodies are replaced, not raised."""
        assert parse_body(body) == {"message": "unexpected error"}


class TestMergeFields:
    """Tests for the response-first ordered merge."""

    def test_response_overrides_request(self) -> None:
        """Test that server values win over request-derived values."""
        record = merge_fields(
            ResponseFields(link="http://bit.ly/abc", long_url="https://google.com/"),
            RequestFields(short_url="bit.ly/abc", long_url="https://google.com"),
        )

        assert record.short_url == "http://bit.ly/abc"
        assert record.long_url == "https://google.com/"

    def test_request_fills_gaps(self) -> None:
        """Test that request values are used when the server omits a field."""
        record = merge_fields(ResponseFields(), RequestFields(short_url="bit.ly/abc"))

        assert record == ResultRecord(short_url="bit.ly/abc")

    def test_empty_strings_are_dropped(self) -> None:
        """Test that empty strings never reach the record."""
        response = ResponseFields.from_payload({"link": "", "message": "", "code": ""})

        record = merge_fields(response, RequestFields(short_url="bit.ly/abc"))

        assert record.to_dict() == {"short_url": "bit.ly/abc"}
        assert record.error is None

    def test_zero_clicks_are_kept(self) -> None:
        """Test that a zero click count is a value, not an absence."""
        response = ResponseFields.from_payload({"total_clicks": 0})

        assert merge_fields(response, RequestFields()).to_dict() == {"user_clicks": 0}


class TestMarshal:
    """Tests for building records from raw outcomes."""

    def test_shorten_response(self) -> None:
        """Test the shorten scenario without user_clicks."""
        outcome = outcome_for(
            OperationKind.SHORTEN,
            "https://google.com",
            {"link": "http://bit.ly/39graKZ", "long_url": "https://google.com/", "id": "bit.ly/39graKZ"},
        )

        record = marshal(outcome)

        assert record.to_dict() == {
            "short_url": "http://bit.ly/39graKZ",
            "long_url": "https://google.com/",
        }
        assert "user_clicks" not in record.to_dict()

    def test_long_url_falls_back_to_operation(self) -> None:
        """Test that a missing long_url is taken from the originating operation."""
        outcome = outcome_for(
            OperationKind.SHORTEN, "https://google.com", {"link": "http://bit.ly/39graKZ"}
        )

        assert marshal(outcome).long_url == "https://google.com"

    def test_clicks_summary_response(self) -> None:
        """Test the clicks summary scenario with the identifier as short_url."""
        outcome = outcome_for(
            OperationKind.CLICKS_SUMMARY,
            "bit.ly/39graKZ",
            {"unit_reference": "2020-02-24T15:41:13+0000", "total_clicks": 1, "units": 30, "unit": ""},
        )

        assert marshal(outcome).to_dict() == {"short_url": "bit.ly/39graKZ", "user_clicks": 1}

    def test_clicks_summary_keeps_supplied_url_form(self) -> None:
        """Test that the short link fallback is the value the caller passed."""
        outcome = outcome_for(
            OperationKind.CLICKS_SUMMARY, "https://bit.ly/39graKZ", {"total_clicks": 1}
        )

        assert marshal(outcome).short_url == "https://bit.ly/39graKZ"

    def test_clicks_series(self) -> None:
        """Test that the click series is exposed as link_clicks."""
        outcome = outcome_for(
            OperationKind.CLICKS,
            "bit.ly/39graKZ",
            {
                "unit_reference": "2020-02-24T15:41:13+0000",
                "link_clicks": [{"date": "2020-02-26T00:00:00+0000", "clicks": 0}],
            },
        )

        record = marshal(outcome)

        assert record.short_url == "bit.ly/39graKZ"
        assert record.user_clicks is None
        assert record.link_clicks == (LinkClicks(date="2020-02-26T00:00:00+0000", clicks=0),)

    def test_empty_clicks_series_is_kept(self) -> None:
        """Test that an empty series stays an empty tuple, unlike a missing one."""
        outcome = outcome_for(
            OperationKind.CLICKS, "bit.ly/abc", {"link_clicks": [], "unit": "day"}
        )

        record = marshal(outcome)

        assert record.link_clicks == ()
        assert record.to_dict() == {"short_url": "bit.ly/abc", "link_clicks": ()}

    def test_info_response_carries_title(self) -> None:
        """Test that link details expose long_url and title."""
        outcome = outcome_for(
            OperationKind.INFO,
            "https://bit.ly/abc",
            {
                "link": "https://bit.ly/abc",
                "id": "bit.ly/abc",
                "long_url": "https://google.com/",
                "title": "Google",
                "archived": False,
            },
        )

        assert marshal(outcome).to_dict() == {
            "short_url": "https://bit.ly/abc",
            "long_url": "https://google.com/",
            "title": "Google",
        }

    def test_malformed_body(self) -> None:
        """Test that invalid JSON yields an error record without raising."""
        outcome = outcome_for(OperationKind.SHORTEN, "https://google.com", b"<html>oops")

        record = marshal(outcome)

        assert record.error == "unexpected error"
        assert record.long_url == "https://google.com"
        assert not record.ok

    def test_timeout_outcome(self) -> None:
        """Test that a timed-out outcome becomes an error record with code 504."""
        outcome = RawOutcome(
            operation=Operation(OperationKind.CLICKS_SUMMARY, "bit.ly/abc"), error=BitlyTimeout()
        )

        assert marshal(outcome).to_dict() == {
            "short_url": "bit.ly/abc",
            "error": "Bitly didn't respond in time",
            "code": "504",
        }

    def test_api_error_outcome(self) -> None:
        """Test that API errors keep the server message and code."""
        outcome = RawOutcome(
            operation=Operation(OperationKind.SHORTEN, "not a url"),
            status=400,
            body=b'{"message": "INVALID_ARG_LONG_URL"}',
            error=ApiError("INVALID_ARG_LONG_URL", code="400", status=400),
        )

        record = marshal(outcome)

        assert record.error == "INVALID_ARG_LONG_URL"
        assert record.code == "400"
        assert record.long_url == "not a url"


class TestMarshalReferrers:
    """Tests for the referrers breakdown."""

    def test_referrers_in_server_order(self) -> None:
        """Test that referrers are returned in the order the server sent them."""
        outcome = outcome_for(
            OperationKind.REFERRERS,
            "bit.ly/abc",
            {
                "referrers": [
                    {"value": "direct", "clicks": 12},
                    {"value": "t.co", "clicks": 3},
                    {"value": "", "clicks": 1},
                ],
                "unit": "day",
                "units": -1,
            },
        )

        assert marshal_referrers(outcome) == [
            Referrer(referrer="direct", clicks=12),
            Referrer(referrer="t.co", clicks=3),
        ]

    def test_malformed_referrers_body(self) -> None:
        """Test that a malformed body yields no referrers."""
        assert marshal_referrers(outcome_for(OperationKind.REFERRERS, "bit.ly/abc", b"??")) == []

    def test_metrics_key(self) -> None:
        """Test that the v4 "metrics" key is read."""
        outcome = outcome_for(
            OperationKind.REFERRERS,
            "bit.ly/abc",
            {"metrics": [{"value": "direct", "clicks": 2}], "facet": "referrers"},
        )

        assert marshal_referrers(outcome) == [Referrer(referrer="direct", clicks=2)]


class TestMarshalCountries:
    """Tests for the countries breakdown."""

    def test_countries_in_server_order(self) -> None:
        """Test that countries are returned in the order the server sent them."""
        outcome = outcome_for(
            OperationKind.COUNTRIES,
            "bit.ly/abc",
            {
                "metrics": [
                    {"value": "US", "clicks": "7"},
                    {"value": "DE", "clicks": 2},
                    {"clicks": 5},
                ],
                "facet": "countries",
                "unit": "day",
                "units": -1,
            },
        )

        assert marshal_countries(outcome) == [
            Country(country="US", clicks=7),
            Country(country="DE", clicks=2),
        ]

    def test_error_body_yields_no_countries(self) -> None:
        """Test that a body without metrics yields an empty list."""
        outcome = outcome_for(OperationKind.COUNTRIES, "bit.ly/abc", {"message": "FORBIDDEN"})

        assert marshal_countries(outcome) == []
