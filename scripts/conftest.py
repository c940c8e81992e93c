import sys
from pathlib import Path
sys.path.append(str(Path(__file__).parent.parent))

from typing import Dict, List, Optional
import pytest

from app.core.fetcher import FetchResult, FetchStatus


class FakeSite:
    """In-memory stand-in for PageFetcher: url -> html, anything unknown is a 404."""

    def __init__(self, pages: Optional[Dict[str, str]] = None):
        self.pages = dict(pages or {})
        self.failing = set()
        self.requested: List[str] = []

    async def fetch(self, url: str) -> FetchResult:
        self.requested.append(url)
        if url in self.failing or url not in self.pages:
            return FetchResult(url, FetchStatus.FAILURE, error="HTTP 404")
        html = self.pages[url]
        if not html.strip():
            return FetchResult(url, FetchStatus.EMPTY, html=html)
        return FetchResult(url, FetchStatus.SUCCESS, html=html)


def listing_page(*hrefs: str, vip: bool = False) -> str:
    card_class = "card group vip" if vip else "card group"
    cards = "".join(
        f'<div class="{card_class}"><div class="card-body"><h5>Group</h5>'
        f'<a href="{href}">Entrar</a></div></div>'
        for href in hrefs
    )
    return f"<html><body><div class='groups'>{cards}</div></body></html>"


def detail_page(data_url: str) -> str:
    return (
        '<html><body><div class="card"><div class="card-body">'
        '<p>Descrição do grupo</p>'
        f'<a class="btn btn-success btn-block" data-url="{data_url}" href="#">Entrar no grupo</a>'
        '</div></div></body></html>'
    )


def home_page(*categories) -> str:
    items = "".join(
        f'<div class="col-category"><a class="category" href="{url}">'
        f'<span class="category-name"> {name} </span></a></div>'
        for name, url in categories
    )
    return f'<html><body><div class="row row-categories">{items}</div></body></html>'


@pytest.fixture
def site():
    """Fixture to provide an empty fake site."""
    return FakeSite()
