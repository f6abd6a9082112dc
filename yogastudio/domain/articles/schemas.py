"""Article schemas - learning center content, ratings and views"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

ArticleStatus = Literal["draft", "published"]


def _not_blank(v: Optional[str], field: str) -> Optional[str]:
    if v is not None and not v.strip():
        raise ValueError(f"{field} is required")
    return v.strip() if v is not None else v


class ArticleCreate(BaseModel):
    title: str
    content: str
    preview_text: str
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    category: str = "general"
    tags: list[str] = []
    status: ArticleStatus = "draft"

    @field_validator("title", "content", "preview_text")
    @classmethod
    def validate_required(cls, v, info):
        return _not_blank(v, info.field_name.replace("_", " ").capitalize())

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v):
        return v.strip().lower() or "general"


class ArticleUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    preview_text: Optional[str] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    status: Optional[ArticleStatus] = None

    @field_validator("title", "content", "preview_text")
    @classmethod
    def validate_not_blank(cls, v, info):
        return _not_blank(v, info.field_name.replace("_", " ").capitalize())

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v):
        return v.strip().lower() if v else v


class ArticleResponse(BaseModel):
    id: str
    title: str
    content: str
    preview_text: str
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    category: str
    tags: list[str]
    status: str
    view_count: int
    author_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    published_at: Optional[datetime] = None
    average_rating: float = 0.0
    total_ratings: int = 0
    user_rating: Optional[int] = None


class ManagedArticleResponse(BaseModel):
    id: str
    title: str
    preview_text: str
    category: str
    tags: list[str]
    status: str
    view_count: int
    author_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    published_at: Optional[datetime] = None
    content: str
    image_url: Optional[str] = None
    video_url: Optional[str] = None

    class Config:
        from_attributes = True


class ViewRequest(BaseModel):
    fingerprint: str = Field(min_length=1, max_length=255)


class ViewResponse(BaseModel):
    article_id: str
    view_count: int


class RatingRequest(BaseModel):
    rating: int = Field(ge=1, le=5)
    fingerprint: str = Field(min_length=1, max_length=255)


class RatingStatsResponse(BaseModel):
    article_id: str
    average_rating: float
    total_ratings: int
    user_rating: Optional[int] = None


class ArticleStatsResponse(BaseModel):
    article_id: str
    views: int
    unique_viewers: int
    total_ratings: int
    average_rating: float
    rating_distribution: dict[str, int]
