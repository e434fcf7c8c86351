"""
Tests for the root-cause context endpoint.
"""

from datetime import datetime

import pytest
import pytz
from fastapi.testclient import TestClient
from freezegun import freeze_time

from rootcause.config.settings import Settings
from rootcause.main import create_app
from rootcause.rca.time_align import TimeAligner
from rootcause.services.record_source import InMemoryRecordSource


def ms(*args) -> int:
    return TimeAligner.to_millis(datetime(*args, tzinfo=pytz.utc))


METRIC = {
    "urn": "thirdeye:metric:42",
    "attributes": {"granularity": ["30_SECONDS"], "maxTime": [str(ms(2026, 1, 21, 10, 37, 42))]},
}

ANOMALY = {
    "urn": "thirdeye:event:anomaly:99",
    "start": ms(2026, 1, 21, 8, 0),
    "end": ms(2026, 1, 21, 9, 0),
    "attributes": {
        "metricGranularity": ["1_HOURS"],
        "metricId": ["7"],
        "functionId": ["13"],
        "dimensions": ["country"],
        "country": ["US", "UK"],
    },
}

SAVED = {
    "id": "s1",
    "name": "Saved",
    "owner": "bob",
    "permissions": "READ",
    "anomalyId": "99",
    "updated": 500,
    "contextUrns": ["thirdeye:metric:7"],
    "selectedUrns": ["thirdeye:metric:7"],
    "anomalyRangeStart": 1,
    "anomalyRangeEnd": 2,
    "analysisRangeStart": 0,
    "analysisRangeEnd": 3,
    "granularity": "15_MINUTES",
    "compareMode": "WoW",
}


@pytest.fixture
def client():
    source = InMemoryRecordSource(entities=[METRIC, ANOMALY])
    return TestClient(create_app(record_source=source, settings=Settings()))


class TestResolveContext:
    """Test GET /rootcause/context"""

    @freeze_time("2026-01-21 10:37:42", real_asyncio=True)
    def test_blank_investigation(self, client):
        response = client.get("/rootcause/context", headers={"X-User-Name": "alice"})

        assert response.status_code == 200
        data = response.json()
        assert data["setupMode"] == "context"
        assert data["context"]["granularity"] == "1_HOURS"
        assert data["context"]["compareMode"] == "WoW"
        assert data["context"]["anomalyRange"] == [ms(2026, 1, 21, 7, 0), ms(2026, 1, 21, 10, 0)]
        assert data["session"]["owner"] == "alice"
        assert data["session"]["modified"] is True
        assert data["errors"] == []
        assert data["redirect"] is None

    @freeze_time("2026-01-21 10:37:42", real_asyncio=True)
    def test_metric_investigation(self, client):
        response = client.get("/rootcause/context", params={"metricId": "42"})

        data = response.json()
        assert data["setupMode"] == "selected"
        assert data["metricId"] == "42"
        assert data["context"]["granularity"] == "5_MINUTES"
        assert data["context"]["anomalyRange"] == [ms(2026, 1, 21, 0, 35), ms(2026, 1, 21, 10, 35)]
        assert data["sizeMetricUrns"] == ["thirdeye:metric:42"]
        assert "frontend:metric:baseline:42" in data["session"]["selectedUrns"]

    @freeze_time("2026-01-21 10:37:42", real_asyncio=True)
    def test_anomaly_investigation(self, client):
        response = client.get("/rootcause/context", params={"anomalyId": "99"})

        data = response.json()
        assert data["context"]["urns"] == ["thirdeye:metric:7:country%3DUS:country%3DUK"]
        assert "frontend:anomalyfunction:13:country%3DUS:country%3DUK" in data["context"]["anomalyUrns"]
        assert data["session"]["name"] == "New Investigation of #99 (Wed, Jan 21 2026, 10:37 am UTC)"

    def test_anomaly_with_saved_session_redirects(self):
        source = InMemoryRecordSource(entities=[ANOMALY], sessions=[SAVED])
        client = TestClient(create_app(record_source=source, settings=Settings()))

        response = client.get("/rootcause/context", params={"anomalyId": "99"})

        data = response.json()
        assert data["redirect"] == {"sessionId": "s1", "anomalyId": None}
        assert data["sessionId"] == "s1"
        assert data["anomalyId"] is None
        assert data["setupMode"] == "none"
        assert data["session"]["modified"] is False
        assert data["context"]["granularity"] == "15_MINUTES"

    def test_missing_references_are_reported(self, client):
        response = client.get("/rootcause/context", params={"anomalyId": "1", "sessionId": "nope"})

        assert response.status_code == 200
        assert response.json()["errors"] == ["Could not find anomalyId 1", "Could not find sessionId nope"]

    def test_overrides(self, client):
        response = client.get(
            "/rootcause/context",
            params={"anomalyRangeStart": 10, "anomalyRangeEnd": 20, "granularity": "5_MINUTES", "compareMode": "DoD"}
        )

        context = response.json()["context"]
        assert context["anomalyRange"] == [10, 20]
        assert context["granularity"] == "5_MINUTES"
        assert context["compareMode"] == "DoD"

    def test_malformed_granularity_is_rejected(self, client):
        response = client.get("/rootcause/context", params={"granularity": "FIVE_MINUTES"})

        assert response.status_code == 400
        error = response.json()["detail"]["error"]
        assert error["code"] == "MALFORMED_GRANULARITY"
        assert error["details"] == {"field": "granularity"}

    def test_malformed_stored_granularity_is_internal_error(self):
        broken = dict(METRIC, attributes={"granularity": ["hourly"], "maxTime": ["0"]})
        app = create_app(record_source=InMemoryRecordSource(entities=[broken]), settings=Settings())
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/rootcause/context", params={"metricId": "42"})

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "INTERNAL_ERROR"
        assert error["details"]["type"] == "MalformedGranularityError"


class TestAppRoutes:
    """Test the auxiliary routes"""

    def test_debug_setting_reaches_app(self):
        assert create_app(settings=Settings(debug=True)).debug is True
        assert create_app(settings=Settings()).debug is False

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["context"] == "/rootcause/context"

    def test_metrics(self, client):
        client.get("/rootcause/context")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "rootcause_resolutions_total" in response.text
