from bs4 import BeautifulSoup
from bs4.element import Tag
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import urlparse
import logging
import re
import time

from .fetcher import FetchStatus

logger = logging.getLogger(__name__)

# Structural patterns of the listing site
GROUP_CARD_SELECTOR = 'div.card.group, div.card.group.vip'
CARD_BODY_SELECTOR = 'div.card-body'
CARD_LINK_SELECTOR = 'a[href]'
INVITE_BUTTON_SELECTOR = '.card-body a.btn.btn-success.btn-block[data-url]'
CATEGORY_SELECTOR = '.row-categories .col-category a.category'
CATEGORY_NAME_SELECTOR = '.category-name'

INVITE_DOMAIN = 'chat.whatsapp.com'


# Pagination strategies: (base_url, page_number) -> listing page URL

def path_pagination(base_url: str, page: int) -> str:
    return f"{base_url}/page/{page}"


def query_pagination(base_url: str, page: int) -> str:
    return f"{base_url}?page={page}"


def auto_pagination(base_url: str, page: int) -> str:
    """Path style when the base URL already paginates by path, query style otherwise.

    Only the gruposwhats.app conventions are known to work with this guess.
    """
    if '/page/' in base_url:
        return path_pagination(base_url, page)
    return query_pagination(base_url, page)


PAGINATION_STRATEGIES = {
    'auto': auto_pagination,
    'path': path_pagination,
    'query': query_pagination,
}


def get_pagination_strategy(name: str) -> Callable[[str, int], str]:
    try:
        return PAGINATION_STRATEGIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown pagination style {name!r}, expected one of {sorted(PAGINATION_STRATEGIES)}"
        ) from None


def resolve_detail_url(base_url: str, href: str) -> str:
    """Make a card href absolute.

    Hrefs carrying a scheme are returned unchanged; anything else is joined
    to the base URL with exactly one slash between them.
    """
    if urlparse(href).scheme:
        return href
    return f"{re.sub(r'/$', '', base_url)}/{re.sub(r'^/', '', href)}"


def _parse(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, 'html.parser')


def extract_group_cards(html: str) -> List[Tag]:
    """Return the group cards (regular and VIP) of a listing page in document order."""
    return _parse(html).select(GROUP_CARD_SELECTOR)


def extract_detail_href(card: Tag) -> Optional[str]:
    """First anchor with an href inside one of the card's own bodies."""
    for body in card.select(CARD_BODY_SELECTOR):
        link = body.select_one(CARD_LINK_SELECTOR)
        if link is not None and link.get('href'):
            return link['href']
    return None


def extract_invite_link(html: str) -> Optional[str]:
    """Read the invite URL behind the call-to-action button of a detail page."""
    button = _parse(html).select_one(INVITE_BUTTON_SELECTOR)
    if button is None:
        return None
    data_url = button.get('data-url', '')
    if INVITE_DOMAIN in data_url:
        return data_url
    return None


def extract_categories(html: str) -> List[Dict[str, str]]:
    soup = _parse(html)
    categories = []

    for anchor in soup.select(CATEGORY_SELECTOR):
        name = ''.join(el.get_text() for el in anchor.select(CATEGORY_NAME_SELECTOR)).strip()
        url = anchor.get('href', '')
        if name and url:
            categories.append({'name': name, 'url': url})

    return categories


class PageStatus(str, Enum):
    """What a listing page means for the pagination loop."""
    CARDS = "cards"
    EMPTY = "empty"
    FAILED = "failed"


class LinkCollector:
    """Collect WhatsApp invite links by walking listing pages and group detail pages.

    The loop stops when the target is reached or as soon as one of these holds:
    - a listing page fails to load or has no group cards
    - a listing page repeats the cards of the previous one
    - max_pages listing pages were visited
    - the deadline (seconds) elapsed
    """

    def __init__(
        self,
        fetcher,
        max_pages: int = 50,
        deadline: Optional[float] = 120,
        pagination: Callable[[str, int], str] = auto_pagination,
        clock: Callable[[], float] = time.monotonic
    ):
        self.fetcher = fetcher
        self.max_pages = max_pages
        self.deadline = deadline
        self.pagination = pagination
        self.clock = clock

    async def fetch_listing(self, url: str) -> Tuple[PageStatus, List[Tag]]:
        result = await self.fetcher.fetch(url)
        if result.status == FetchStatus.FAILURE:
            return PageStatus.FAILED, []
        if result.status == FetchStatus.EMPTY:
            return PageStatus.EMPTY, []

        cards = extract_group_cards(result.html)
        if not cards:
            return PageStatus.EMPTY, []
        return PageStatus.CARDS, cards

    async def visit_card(self, base_url: str, card: Tag) -> Optional[str]:
        """Follow one card to its detail page. Returns the invite link, or None to skip the card."""
        href = extract_detail_href(card)
        if not href:
            return None

        detail_url = resolve_detail_url(base_url, href)
        result = await self.fetcher.fetch(detail_url)
        if not result.ok:
            logger.info(f"Skipping card, detail page {detail_url} returned {result.status.value}")
            return None

        invite_link = extract_invite_link(result.html)
        if invite_link is None:
            logger.debug(f"No invite link on {detail_url}")
        return invite_link

    async def collect(self, base_url: str, target: int) -> List[str]:
        """Collect at most `target` invite links from `base_url`."""
        if target <= 0:
            raise ValueError(f"target must be a positive integer, got {target}")

        links: List[str] = []
        started = self.clock()
        previous_hrefs = None
        page = 1

        def out_of_time() -> bool:
            return self.deadline is not None and self.clock() - started >= self.deadline

        while len(links) < target:
            if page > self.max_pages:
                logger.info(f"Reached page limit ({self.max_pages}) for {base_url}")
                break
            if out_of_time():
                logger.warning(f"Deadline of {self.deadline}s reached while scraping {base_url}")
                break

            page_url = self.pagination(base_url, page)
            status, cards = await self.fetch_listing(page_url)
            logger.info(f"Page {page} ({page_url}): {status.value}, {len(cards)} cards")

            if status != PageStatus.CARDS:
                break

            hrefs = [extract_detail_href(card) for card in cards]
            if hrefs == previous_hrefs:
                logger.info(f"Page {page} repeats the previous page, stopping")
                break
            previous_hrefs = hrefs

            for card in cards:
                if len(links) >= target or out_of_time():
                    break
                invite_link = await self.visit_card(base_url, card)
                if invite_link is not None:
                    links.append(invite_link)

            page += 1

        logger.info(f"Collected {len(links)} of {target} links from {base_url}")
        return links[:target]


class CategoryLister:
    """List the categories shown in the home page navigation."""

    def __init__(self, fetcher):
        self.fetcher = fetcher

    async def list_categories(self, base_url: str) -> List[Dict[str, str]]:
        result = await self.fetcher.fetch(base_url)
        if not result.ok:
            logger.error(f"Error fetching categories from {base_url}: {result.error or result.status.value}")
            return []

        try:
            return extract_categories(result.html)
        except Exception as e:
            logger.error(f"Error parsing categories from {base_url}: {str(e)}")
            return []
