"""
Endpoint tests for the WhatsApp Group Link Scraper API.

The page fetcher dependency is replaced by an in-memory fake site, so no
request leaves the test process.

Usage:
    python -m pytest scripts/test_api.py
"""

import pytest
from fastapi.testclient import TestClient

from app.main import app, get_fetcher
from app.core import DEFAULT_BASE_URL
from conftest import FakeSite, listing_page, detail_page, home_page

BASE = "https://site.test"


class BrokenSite:
    async def fetch(self, url):
        raise RuntimeError("boom")


@pytest.fixture
def client(site):
    """Fixture to provide a test client wired to the fake site."""
    app.dependency_overrides[get_fetcher] = lambda: site
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def broken_client():
    app.dependency_overrides[get_fetcher] = lambda: BrokenSite()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.mark.integration
def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": "1.0.0"}


@pytest.mark.integration
def test_get_whatsapp_links(client, site):
    site.pages.update({
        f"{BASE}?page=1": listing_page("/g/1", "/g/2"),
        f"{BASE}/g/1": detail_page("https://chat.whatsapp.com/one"),
        f"{BASE}/g/2": detail_page("https://chat.whatsapp.com/two"),
    })

    response = client.get("/get_whatsapp_links", params={"base_url": BASE, "num_links": 5})

    assert response.status_code == 200
    assert response.json() == ["https://chat.whatsapp.com/one", "https://chat.whatsapp.com/two"]


@pytest.mark.integration
def test_get_whatsapp_links_defaults(client, site):
    site.pages[f"{DEFAULT_BASE_URL}?page=1"] = listing_page(*[f"/g/{n}" for n in range(7)])
    site.pages.update({
        f"{DEFAULT_BASE_URL}/g/{n}": detail_page(f"https://chat.whatsapp.com/{n}") for n in range(7)
    })

    response = client.get("/get_whatsapp_links")

    assert response.status_code == 200
    assert response.json() == [f"https://chat.whatsapp.com/{n}" for n in range(5)]

    # An empty base_url falls back to the default site
    response = client.get("/get_whatsapp_links", params={"base_url": "", "num_links": 1})
    assert response.status_code == 200
    assert response.json() == ["https://chat.whatsapp.com/0"]


@pytest.mark.integration
@pytest.mark.parametrize("num_links", ["0", "-3", "abc", "2.5"])
def test_get_whatsapp_links_invalid_parameters(client, site, num_links):
    response = client.get("/get_whatsapp_links", params={"base_url": BASE, "num_links": num_links})

    assert response.status_code == 400
    assert response.json() == {"error": "invalid parameters"}
    assert site.requested == []


@pytest.mark.integration
def test_get_whatsapp_links_not_found(client, site):
    site.pages[f"{BASE}?page=1"] = "<html><body><p>Nenhum grupo</p></body></html>"

    response = client.get("/get_whatsapp_links", params={"base_url": BASE})

    assert response.status_code == 404
    assert response.json() == {"error": "no links found"}


@pytest.mark.integration
def test_get_whatsapp_links_internal_error(broken_client):
    response = broken_client.get("/get_whatsapp_links", params={"base_url": BASE})

    assert response.status_code == 500
    assert response.json() == {"error": "internal server error", "detail": "boom"}


@pytest.mark.integration
def test_get_categories(client, site):
    site.pages[BASE] = home_page(("Amizade", "/c/amizade"), ("Games", "/c/games"))

    response = client.get("/get_categories", params={"base_url": BASE})

    assert response.status_code == 200
    assert response.json() == [
        {"name": "Amizade", "url": "/c/amizade"},
        {"name": "Games", "url": "/c/games"},
    ]


@pytest.mark.integration
def test_get_categories_without_navigation(client, site):
    site.pages[BASE] = "<html><body><h1>Grupos</h1></body></html>"

    response = client.get("/get_categories", params={"base_url": BASE})

    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.integration
def test_get_categories_unreachable_site(client, site):
    response = client.get("/get_categories")

    assert response.status_code == 200
    assert response.json() == []
    assert site.requested == [DEFAULT_BASE_URL]


@pytest.mark.integration
def test_get_categories_internal_error(broken_client):
    response = broken_client.get("/get_categories", params={"base_url": BASE})

    assert response.status_code == 500
    assert response.json() == {"error": "error fetching categories", "detail": "boom"}


@pytest.mark.integration
def test_docs_are_served(client):
    response = client.get("/openapi.json")

    assert response.status_code == 200
    paths = response.json()["paths"]
    assert "/get_whatsapp_links" in paths
    assert "/get_categories" in paths


@pytest.mark.integration
def test_get_whatsapp_links_blank_num_links_uses_default(client, site):
    site.pages[f"{BASE}?page=1"] = listing_page(*[f"/g/{n}" for n in range(7)])
    site.pages.update({
        f"{BASE}/g/{n}": detail_page(f"https://chat.whatsapp.com/{n}") for n in range(7)
    })

    response = client.get("/get_whatsapp_links", params={"base_url": BASE, "num_links": ""})

    assert response.status_code == 200
    assert len(response.json()) == 5


@pytest.mark.integration
def test_fetcher_setup_failure_returns_json_error():
    def failing_fetcher():
        raise RuntimeError("session failed")

    app.dependency_overrides[get_fetcher] = failing_fetcher
    try:
        with TestClient(app, raise_server_exceptions=False) as test_client:
            response = test_client.get("/get_categories", params={"base_url": BASE})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "internal server error", "detail": "session failed"}
