"""
Request body schemas.

Every JSON body is validated here before any service is called; a
failure surfaces as a 400 through the ValidationError handler.
Fields accept the camelCase names the frontend sends.
"""
from typing import Any, Dict, List, Literal, Optional
from urllib.parse import urlparse

from flask import request
from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator


def load_body(schema):
    """Validate the current request's JSON body against a schema."""
    return schema.model_validate(request.get_json(silent=True) or {})


def _check_image_url(value):
    if value is None:
        return value
    parsed = urlparse(value)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise ValueError('Image must be a valid URL')
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


# ========================================
# ARTICLES
# ========================================

class ArticleCreate(CamelModel):
    title: str = Field(..., min_length=10, max_length=255)
    excerpt: str = Field(..., min_length=20)
    content: str = Field(..., min_length=100)
    image: str
    category_id: int = Field(..., alias='categoryId', gt=0)
    status: Literal['published', 'draft', 'archived'] = 'published'
    is_breaking: bool = Field(False, alias='isBreaking')
    tags: List[str] = Field(default_factory=list)

    @field_validator('image')
    @classmethod
    def image_is_url(cls, value):
        return _check_image_url(value)


class ArticleUpdate(CamelModel):
    """Partial update; only fields present in the body are applied."""
    title: Optional[str] = Field(None, min_length=10, max_length=255)
    excerpt: Optional[str] = Field(None, min_length=20)
    content: Optional[str] = Field(None, min_length=100)
    image: Optional[str] = None
    category_id: Optional[int] = Field(None, alias='categoryId', gt=0)
    status: Optional[Literal['published', 'draft', 'archived']] = None
    is_breaking: Optional[bool] = Field(None, alias='isBreaking')
    tags: Optional[List[str]] = None

    @field_validator('image')
    @classmethod
    def image_is_url(cls, value):
        return _check_image_url(value)


class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None


class LikeToggle(CamelModel):
    liked: bool


class BookmarkToggle(CamelModel):
    bookmarked: bool


# ========================================
# COMMENTS
# ========================================

class CommentCreate(CamelModel):
    content: str = Field(..., min_length=1, max_length=5000)
    parent_id: Optional[str] = Field(None, alias='parentId')

    @field_validator('parent_id', mode='before')
    @classmethod
    def parent_as_string(cls, value):
        # Relational ids arrive as numbers, document ids as strings
        return str(value) if value is not None else None


class CommentUpdate(CamelModel):
    content: str = Field(..., min_length=1, max_length=5000)


class ReportCreate(CamelModel):
    reason: Optional[str] = Field(None, max_length=1000)


# ========================================
# USERS
# ========================================

class ProfileUpdate(CamelModel):
    username: Optional[str] = Field(None, min_length=3, max_length=100, pattern=r'^[A-Za-z0-9_.-]+$')
    bio: Optional[str] = Field(None, max_length=1000)
    profile_image_url: Optional[str] = Field(None, alias='profileImageUrl')

    @field_validator('profile_image_url')
    @classmethod
    def image_is_url(cls, value):
        return _check_image_url(value)


class PreferencesUpdate(CamelModel):
    newsletter: bool = True
    comment_replies: bool = Field(True, alias='commentReplies')
    article_updates: bool = Field(True, alias='articleUpdates')


# ========================================
# ADMIN
# ========================================

class SettingsUpdate(RootModel[Dict[str, Any]]):
    pass
