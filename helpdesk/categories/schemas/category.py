from pydantic import BaseModel, Field

from helpdesk.core.constants import CATEGORY_NAME_MAX_LENGTH
from helpdesk.core.datetime_utils import UTCDatetime


class CategoryCreate(BaseModel):
    name: str = Field(..., max_length=CATEGORY_NAME_MAX_LENGTH)
    description: str | None = None
    parent_id: int | None = None
    display_order: int = 0


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, max_length=CATEGORY_NAME_MAX_LENGTH)
    description: str | None = None
    parent_id: int | None = None
    is_active: bool | None = None
    display_order: int | None = None


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    parent_id: int | None = None
    is_active: bool
    display_order: int
    created_at: UTCDatetime
    updated_at: UTCDatetime

    class Config:
        from_attributes = True


class CategoryTreeNode(CategoryResponse):
    sub_categories: list[CategoryResponse] = []
    has_sub_categories: bool = False
