from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from ..utils.tags import split_tags


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class LinkCreate(BaseModel):
    """Schema for saving a new link"""
    url: Optional[str] = Field(None, description="URL to save")
    title: Optional[str] = Field(None, description="Omit to extract it from the page")
    description: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator("title", "category", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class LinkUpdate(BaseModel):
    """Schema for updating a link; only the supplied fields change"""
    title: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    is_starred: Optional[bool] = Field(
        None, validation_alias=AliasChoices("isStarred", "is_starred")
    )

    @field_validator("category", mode="before")
    @classmethod
    def blank_category_to_none(cls, value):
        return _blank_to_none(value)

    class Config:
        # domain and favicon are derived from url
        extra = "forbid"


class LinkResponse(BaseModel):
    """Schema for link response"""
    id: int
    title: str
    url: str
    description: Optional[str] = None
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    domain: Optional[str] = None
    favicon: Optional[str] = None
    is_starred: bool = Field(False, alias="isStarred")
    date_added: datetime
    date_modified: datetime

    @field_validator("tags", mode="before")
    @classmethod
    def split_stored_tags(cls, value):
        if value is None or isinstance(value, str):
            return split_tags(value)
        return value

    class Config:
        from_attributes = True
        populate_by_name = True


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
