"""
WhatsApp Group Link Scraper API: Main Application Flow
=====================================================

1. Startup Sequence
------------------
a) Logging Initialization
   - Configure logging with LOG_LEVEL (INFO by default)

b) Lifespan
   - Validate the configured pagination style
   - Log scraper settings on start and a line on shutdown

2. Request Handling Flow
-----------------------
a) Invite links (/get_whatsapp_links)
   1. Validate base_url and num_links (400 before any outbound request)
   2. Open a page fetcher for the duration of the request
   3. Walk listing pages, follow each group card to its detail page
   4. Return the collected links (404 when there are none)

b) Categories (/get_categories)
   1. Fetch the home page once
   2. Return the (name, url) pairs of the category navigation

3. Error Handling
----------------
- Upstream fetch failures are absorbed by the scraper (partial or empty results)
- Parameter errors -> 400, no links -> 404, anything unexpected -> 500 with detail
- Every error body has the shape {"error": ..., "detail": ...}

The page fetcher is provided through FastAPI's dependency injection so tests
can replace it with an in-memory site.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, Query
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from typing import List, Optional
import logging
import os

from .api import models
from .api.errors import (
    APIError,
    InvalidParametersError,
    NoLinksFoundError,
    InternalServerError,
    CategoriesFetchError,
    api_error_handler,
    validation_error_handler,
    unhandled_error_handler,
)
from .core import (
    DEFAULT_BASE_URL,
    SCRAPER_CONFIG,
    PageFetcher,
    LinkCollector,
    CategoryLister,
    get_pagination_strategy,
)

VERSION = "1.0.0"

# Initialize logging
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_pagination_strategy(SCRAPER_CONFIG['pagination_style'])
    logger.info(
        f"Scraper API started (timeout={SCRAPER_CONFIG['timeout']}s, "
        f"max_pages={SCRAPER_CONFIG['max_pages']}, deadline={SCRAPER_CONFIG['deadline']}s, "
        f"pagination={SCRAPER_CONFIG['pagination_style']})"
    )
    yield
    logger.info("Scraper API stopped")


app = FastAPI(
    title="WhatsApp Group Link Scraper API",
    description="API for collecting WhatsApp group invite links and categories from group listing sites",
    version=VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()],
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.add_exception_handler(APIError, api_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)


# Dependency to get a page fetcher for the current request
async def get_fetcher():
    async with PageFetcher(
        timeout=SCRAPER_CONFIG['timeout'],
        request_delay=SCRAPER_CONFIG['request_delay'],
        user_agent=SCRAPER_CONFIG['user_agent']
    ) as fetcher:
        yield fetcher


def scrape_request(
    base_url: str = Query(DEFAULT_BASE_URL, description="Base URL of the site listing the groups"),
    num_links: Optional[str] = Query("5", description="Number of invite links to collect (positive integer)")
) -> models.ScrapeRequest:
    try:
        return models.ScrapeRequest(base_url=base_url, num_links=num_links)
    except ValidationError:
        raise InvalidParametersError()


def category_request(
    base_url: str = Query(DEFAULT_BASE_URL, description="Base URL of the site")
) -> models.CategoryRequest:
    try:
        return models.CategoryRequest(base_url=base_url)
    except ValidationError:
        raise InvalidParametersError()


@app.get("/health", response_model=models.HealthCheck)
def health_check():
    """Check if the API is running."""
    return {"status": "healthy", "version": VERSION}


@app.get(
    "/get_whatsapp_links",
    response_model=List[str],
    responses={
        400: {"model": models.ErrorResponse, "description": "Invalid parameters"},
        404: {"model": models.ErrorResponse, "description": "No links found"},
        500: {"model": models.ErrorResponse, "description": "Internal server error"},
    }
)
async def get_whatsapp_links(
    request: models.ScrapeRequest = Depends(scrape_request),
    fetcher: PageFetcher = Depends(get_fetcher)
):
    """
    Collect WhatsApp group invite links.

    - Walks the listing pages of base_url
    - Opens each group's detail page and reads its invite link
    - Returns at most num_links links
    """
    try:
        collector = LinkCollector(
            fetcher,
            max_pages=SCRAPER_CONFIG['max_pages'],
            deadline=SCRAPER_CONFIG['deadline'],
            pagination=get_pagination_strategy(SCRAPER_CONFIG['pagination_style'])
        )
        links = await collector.collect(request.base_url, request.num_links)
    except Exception as e:
        logger.error(f"Error collecting links from {request.base_url}: {str(e)}")
        raise InternalServerError(detail=str(e))

    if not links:
        raise NoLinksFoundError()
    return links


@app.get(
    "/get_categories",
    response_model=List[models.Category],
    responses={
        500: {"model": models.ErrorResponse, "description": "Error fetching categories"},
    }
)
async def get_categories(
    request: models.CategoryRequest = Depends(category_request),
    fetcher: PageFetcher = Depends(get_fetcher)
):
    """Return the group categories listed on the home page of base_url."""
    try:
        lister = CategoryLister(fetcher)
        categories = await lister.list_categories(request.base_url)
    except Exception as e:
        logger.error(f"Error fetching categories from {request.base_url}: {str(e)}")
        raise CategoriesFetchError(detail=str(e))

    logger.info(f"Found {len(categories)} categories on {request.base_url}")
    return categories


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_level=os.getenv("LOG_LEVEL", "info").lower()
    )
