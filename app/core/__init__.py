"""
Core scraping package for WhatsApp group listing sites.

This package provides:
- An aiohttp page fetcher that reports every GET as a tagged outcome
- A paginated collector for group invite links
- A single-page category lister
"""

import os
from dotenv import load_dotenv

load_dotenv()

DEFAULT_BASE_URL = os.getenv("DEFAULT_BASE_URL", "https://gruposwhats.app")

# Default scraper configuration, overridable through the environment
SCRAPER_CONFIG = {
    'timeout': float(os.getenv('SCRAPER_TIMEOUT', '30')),  # Per-request timeout in seconds
    'max_pages': int(os.getenv('SCRAPER_MAX_PAGES', '50')),  # Listing pages visited per collection
    'deadline': float(os.getenv('SCRAPER_DEADLINE', '120')),  # Wall-clock budget of one collection
    'pagination_style': os.getenv('SCRAPER_PAGINATION_STYLE', 'auto'),  # auto, path or query
    'request_delay': float(os.getenv('SCRAPER_REQUEST_DELAY', '0')),  # Pause before each request
    'user_agent': os.getenv(
        'SCRAPER_USER_AGENT',
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
    ),
}

# Import core components
from .fetcher import PageFetcher, FetchResult, FetchStatus
from .scraper import LinkCollector, CategoryLister, get_pagination_strategy

__all__ = [
    'DEFAULT_BASE_URL',
    'SCRAPER_CONFIG',
    'PageFetcher',
    'FetchResult',
    'FetchStatus',
    'LinkCollector',
    'CategoryLister',
    'get_pagination_strategy',
]
