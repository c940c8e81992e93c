from pydantic import BaseModel, Field, field_validator
from typing import Optional

from ..core import DEFAULT_BASE_URL


def _default_if_blank(value: Optional[str]) -> str:
    if value is None or not value.strip():
        return DEFAULT_BASE_URL
    return value.strip()


class CategoryRequest(BaseModel):
    base_url: str = Field(DEFAULT_BASE_URL, description="Base URL of the site listing the groups")

    @field_validator('base_url', mode='before')
    @classmethod
    def default_base_url(cls, value):
        return _default_if_blank(value)


class ScrapeRequest(CategoryRequest):
    num_links: int = Field(5, gt=0, description="Number of invite links to collect")

    @field_validator('num_links', mode='before')
    @classmethod
    def default_num_links(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return 5
        return value


class Category(BaseModel):
    name: str
    url: str


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None


class HealthCheck(BaseModel):
    status: str
    version: str
