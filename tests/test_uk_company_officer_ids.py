"""Tests for the Companies House officer ID reconciler."""

import httpx
import pytest

from reconcile.errors import InvalidCredential, RateLimitExceeded
from reconcile.reconcilers import UKCompanyOfficerIdsReconciler
from tests.conftest import basic_username, make_entry, make_officer, mock_client


def make_reconciler(client, alerts, test_settings, **parameters) -> UKCompanyOfficerIdsReconciler:
    defaults = {"api_key": "key-a", "individual_name_field": "individualName"}
    defaults.update(parameters)
    return UKCompanyOfficerIdsReconciler(defaults, client, alert=alerts.append, settings=test_settings)


def paged_handler(total: int, seen: list):
    """Companies House search returning one officer per page."""

    def handler(request: httpx.Request):
        start_index = int(request.url.params.get("start_index", 0))
        seen.append((start_index, basic_username(request)))
        page = start_index // 100 + 1
        officer = make_officer(title=f"John Smith {page}", officer_id=f"id{page}")
        return httpx.Response(200, json={"total_results": total, "items": [officer]})

    return handler


class TestEndToEnd:
    """Tests running whole entries through the reconciler."""

    @pytest.mark.asyncio
    async def test_single_officer(self, alerts, test_settings):
        def handler(request: httpx.Request):
            assert request.url.path == "/search/officers"
            assert request.url.params["q"] == "John Smith"
            assert request.url.params["items_per_page"] == "100"
            assert basic_username(request) == "key-a"
            return httpx.Response(200, json={
                "total_results": 1,
                "items": [make_officer(date_of_birth={"year": 1980, "month": 5})],
            })

        async with mock_client(handler) as client:
            reconciler = make_reconciler(client, alerts, test_settings)
            rows = await reconciler.run(make_entry(line=3, individualName="John Smith"))

        assert rows == [{
            "officerID": "abc123",
            "officerName": "John Smith",
            "officerDateOfBirth": "1980-5",
            "officerAddress": "1 Road",
        }]
        assert alerts == []

    @pytest.mark.asyncio
    async def test_search_term_is_trimmed(self, alerts, test_settings):
        def handler(request: httpx.Request):
            assert request.url.params["q"] == "John Smith"
            return httpx.Response(200, json={"total_results": 0, "items": []})

        async with mock_client(handler) as client:
            reconciler = make_reconciler(client, alerts, test_settings)
            assert await reconciler.run(make_entry(individualName="  John Smith ")) == []

    @pytest.mark.asyncio
    async def test_missing_name_alerts_without_requesting(self, alerts, test_settings):
        def handler(request: httpx.Request):
            raise AssertionError("no request expected")

        async with mock_client(handler) as client:
            reconciler = make_reconciler(client, alerts, test_settings)
            rows = await reconciler.run(make_entry(line=4, individualName=""))

        assert rows == []
        assert len(alerts) == 1
        assert alerts[0].importance == "error"
        assert alerts[0].message == "No individual name found on line 4"

    @pytest.mark.asyncio
    async def test_output_rows_have_every_column(self, alerts, test_settings):
        def handler(request: httpx.Request):
            officer = {"title": "John Smith", "links": {"self": "/officers/xyz/appointments"}}
            return httpx.Response(200, json={"total_results": 1, "items": [officer]})

        async with mock_client(handler) as client:
            reconciler = make_reconciler(client, alerts, test_settings)
            rows = await reconciler.run(make_entry(individualName="John Smith"))

        assert rows == [{
            "officerID": "xyz",
            "officerName": "John Smith",
            "officerDateOfBirth": None,
            "officerAddress": None,
        }]


class TestPagination:
    """Tests for fetching further result pages."""

    @pytest.mark.asyncio
    async def test_fetches_remaining_pages_in_order(self, alerts, test_settings):
        seen: list = []
        async with mock_client(paged_handler(250, seen)) as client:
            reconciler = make_reconciler(client, alerts, test_settings, api_key="a,b,c")
            rows = await reconciler.run(make_entry(individualName="John Smith"))

        assert sorted(start for start, _ in seen) == [0, 100, 200]
        assert [row["officerID"] for row in rows] == ["id1", "id2", "id3"]
        assert sorted(username for _, username in seen) == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_stops_after_ten_pages(self, alerts, test_settings):
        seen: list = []
        async with mock_client(paged_handler(5000, seen)) as client:
            reconciler = make_reconciler(client, alerts, test_settings)
            rows = await reconciler.run(make_entry(individualName="John Smith"))

        assert sorted(start for start, _ in seen) == [page * 100 for page in range(10)]
        assert len(rows) == 10

    @pytest.mark.asyncio
    async def test_failed_page_is_skipped(self, alerts, test_settings):
        def handler(request: httpx.Request):
            start_index = int(request.url.params.get("start_index", 0))
            if start_index == 100:
                return httpx.Response(503)
            page = start_index // 100 + 1
            officer = make_officer(officer_id=f"id{page}")
            return httpx.Response(200, json={"total_results": 300, "items": [officer]})

        async with mock_client(handler) as client:
            reconciler = make_reconciler(client, alerts, test_settings)
            rows = await reconciler.run(make_entry(individualName="John Smith"))

        assert [row["officerID"] for row in rows] == ["id1", "id3"]
        assert [alert.message for alert in alerts] == [
            "Received code 503 for individual John Smith on page 2",
        ]


class TestFiltering:
    """Tests for the configurable match filters."""

    @pytest.mark.asyncio
    async def test_date_of_birth_filter(self, alerts, test_settings):
        officers = [
            make_officer(officer_id="match", date_of_birth={"year": 1980, "month": 5}),
            make_officer(officer_id="wrong", date_of_birth={"year": 1980, "month": 6}),
            make_officer(officer_id="unknown"),
        ]

        def handler(request: httpx.Request):
            return httpx.Response(200, json={"total_results": 3, "items": officers})

        async with mock_client(handler) as client:
            reconciler = make_reconciler(client, alerts, test_settings, date_of_birth_field="dob")
            rows = await reconciler.run(make_entry(individualName="John Smith", dob="1980-05-17"))

        assert [row["officerID"] for row in rows] == ["match", "unknown"]

    @pytest.mark.asyncio
    async def test_precise_and_non_middle_name_match(self, alerts, test_settings):
        officers = [
            make_officer(title="Dr. Jane O'Brien", officer_id="exact"),
            make_officer(title="Jane Marie O'Brien", officer_id="middle"),
            make_officer(title="Janet O'Brien", officer_id="other"),
        ]

        def handler(request: httpx.Request):
            return httpx.Response(200, json={"total_results": 3, "items": officers})

        async with mock_client(handler) as client:
            precise = make_reconciler(client, alerts, test_settings, precise_match="true")
            loose = make_reconciler(client, alerts, test_settings, non_middle_name_match=True)
            entry = make_entry(individualName="Jane O'Brien")
            precise_rows = await precise.run(entry)
            loose_rows = await loose.run(entry)

        assert [row["officerID"] for row in precise_rows] == ["exact"]
        assert [row["officerID"] for row in loose_rows] == ["exact", "middle"]


class TestFailures:
    """Tests for fatal failures."""

    @pytest.mark.asyncio
    async def test_rate_limit_propagates(self, alerts, test_settings):
        async with mock_client(lambda request: httpx.Response(429)) as client:
            reconciler = make_reconciler(client, alerts, test_settings)
            with pytest.raises(RateLimitExceeded):
                await reconciler.run(make_entry(individualName="John Smith"))

    @pytest.mark.asyncio
    async def test_invalid_key_propagates(self, alerts, test_settings):
        async with mock_client(lambda request: httpx.Response(401)) as client:
            reconciler = make_reconciler(client, alerts, test_settings, api_key="bad-key")
            with pytest.raises(InvalidCredential, match="bad-key"):
                await reconciler.run(make_entry(individualName="John Smith"))

    def test_api_key_required(self, alerts, test_settings):
        with pytest.raises(ValueError, match="API key"):
            make_reconciler(None, alerts, test_settings, api_key="")

    def test_api_key_from_settings(self, alerts, test_settings):
        test_settings.companies_house_api_key = "env-a, env-b"
        reconciler = make_reconciler(None, alerts, test_settings, api_key=[])
        assert len(reconciler.rotator) == 2
        assert reconciler.requestor.limit == 4
