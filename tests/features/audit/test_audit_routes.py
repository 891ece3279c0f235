from unittest.mock import AsyncMock, MagicMock

import pytest

from app.features.audit.services.audit_service import AuditService, get_audit_service
from app.features.audit.services.deep_analysis.heuristic import HeuristicDeepAnalyzer
from app.features.audit.services.extraction.extractor_service import ExtractionResult
from app.features.audit.services.storage.memory import InMemoryAuditStorage
from app.platform.exceptions import NavigationError

from audit_factories import FakeBrowserManager, make_clean_signals


@pytest.fixture
def extractor():
    extractor = MagicMock()
    extractor.collect = AsyncMock(
        return_value=ExtractionResult(screenshots=None, page_text="", **make_clean_signals())
    )
    return extractor


@pytest.fixture
def api(client, test_app, extractor):
    service = AuditService(
        storage=InMemoryAuditStorage(),
        browser_manager=FakeBrowserManager(),
        deep_analyzer=HeuristicDeepAnalyzer(),
        extractor=extractor,
    )
    test_app.dependency_overrides[get_audit_service] = lambda: service
    yield client
    test_app.dependency_overrides.pop(get_audit_service, None)


def create(api, url="https://claystudio.test/", **extra):
    return api.post("/api/v1/audits", json={"url": url, **extra})


class TestCreateAudit:
    def test_create(self, api, extractor):
        response = create(api, options={"includeScreenshots": False, "deepScan": True, "timeoutMs": 15000})

        assert response.status_code == 201
        payload = response.json()
        assert payload["status"] == "success"
        data = payload["data"]
        assert data["audit_id"]
        assert data["processing_time"] >= 0
        assert data["audit"]["overall_score"] == 100
        assert data["audit"]["llm_analysis"]["content_quality_assessment"]["overall_score"] == 100

        options = extractor.collect.await_args.args[2]
        assert options.include_screenshots is False
        assert options.timeout_ms == 15000

    def test_invalid_url(self, api, extractor):
        response = create(api, url="not a url")
        assert response.status_code == 400
        assert response.json()["status"] == "error"
        extractor.collect.assert_not_awaited()

    def test_navigation_error(self, api, extractor):
        extractor.collect.side_effect = NavigationError("https://down.test/", "net::ERR_CONNECTION_REFUSED")
        response = create(api, url="https://down.test/")
        assert response.status_code == 502
        assert response.json()["message"] == "Failed to load https://down.test/: net::ERR_CONNECTION_REFUSED"

    def test_missing_url_is_validation_error(self, api):
        response = api.post("/api/v1/audits", json={})
        assert response.status_code == 422
        assert response.json()["status"] == "error"


class TestReadAudits:
    def test_get_by_id(self, api):
        audit_id = create(api).json()["data"]["audit_id"]

        response = api.get(f"/api/v1/audits/{audit_id}")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == audit_id
        assert response.json()["data"]["categories"]["seo"]["score"] == 100

    def test_get_unknown(self, api):
        response = api.get("/api/v1/audits/missing")
        assert response.status_code == 404
        assert response.json()["message"] == "Audit not found: missing"

    def test_list_with_filters(self, api):
        create(api, url="https://claystudio.test/", userId="alice")
        create(api, url="https://other.test/", userId="bob")

        everything = api.get("/api/v1/audits").json()["data"]
        assert len(everything) == 2

        searched = api.get("/api/v1/audits", params={"q": "clay"}).json()["data"]
        assert [a["url"] for a in searched] == ["https://claystudio.test/"]

        by_user = api.get("/api/v1/audits", params={"user_id": "bob"}).json()["data"]
        assert [a["user_id"] for a in by_user] == ["bob"]

        assert api.get("/api/v1/audits", params={"min_score": 101}).status_code == 422


class TestDeleteAudit:
    def test_delete(self, api):
        audit_id = create(api).json()["data"]["audit_id"]

        response = api.delete(f"/api/v1/audits/{audit_id}")
        assert response.status_code == 200
        assert response.json()["data"] == {"deleted": True}

        assert api.delete(f"/api/v1/audits/{audit_id}").status_code == 404
