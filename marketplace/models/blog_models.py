# marketplace/models/blog_models.py

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from marketplace.models.validators import is_valid_email


class PostStatus(str, Enum):
    published = "published"
    draft = "draft"


class BlogPost(BaseModel):
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    excerpt: str = ""
    content: str = ""
    author: str = ""
    image: Optional[str] = None
    category: str = ""
    status: PostStatus = PostStatus.published
    date: Optional[str] = None
    views: int = Field(0, ge=0)


class PostSaveModel(BaseModel):
    title: str
    content: str
    author: str
    excerpt: str = ""
    image: Optional[str] = None
    category: str = ""
    status: PostStatus = PostStatus.published

    @field_validator("title", "content", "author")
    @classmethod
    def _required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v


class CommentStatus(str, Enum):
    # comments are auto-approved; there is no pending state
    approved = "approved"
    spam = "spam"


class Reply(BaseModel):
    id: str
    name: str
    text: str
    date: Optional[str] = None
    isAdmin: bool = False


class Comment(BaseModel):
    id: str = Field(..., min_length=1)
    postId: str = Field(..., min_length=1)
    name: str
    email: str
    text: str
    date: Optional[str] = None
    status: CommentStatus = CommentStatus.approved
    replies: List[Reply] = Field(default_factory=list)


class CommentSubmitModel(BaseModel):
    name: str
    email: str
    text: str

    @field_validator("name", "text")
    @classmethod
    def _required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Please fill in all fields.")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Please fill in all fields.")
        if not is_valid_email(v):
            raise ValueError("Please enter a valid email address.")
        return v


class PostView(BaseModel):
    """One row per (post, viewer); its presence means the view was counted."""
    id: str
    postId: str
    viewerId: str
    viewedAt: Optional[str] = None
