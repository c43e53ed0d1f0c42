"""Order and file records shared by every backend, the service layer and the API.

Attributes are snake_case; the JSON form (API bodies, orders.json, key-value
storage) uses camelCase aliases. Both spellings validate on input.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """camelCase dict without unset optionals, as persisted by the file and key-value backends."""
        return self.model_dump(by_alias=True, exclude_none=True)


class FileReference(_CamelModel):
    """Denormalized copy of an uploaded file's metadata held inside an order."""

    name: str
    size: int = Field(ge=0)
    type: str
    path: Optional[str] = None


class OrderDraft(_CamelModel):
    """An order as submitted by a client, before the store stamps it."""

    order_id: str = Field(min_length=1)
    full_name: str
    phone_number: str
    print_type: Optional[str] = None
    binding_color_type: Optional[str] = None
    copies: Optional[PositiveInt] = None
    paper_size: Optional[str] = None
    print_side: Optional[str] = None
    selected_pages: Optional[str] = None
    color_pages: Optional[str] = None
    bw_pages: Optional[str] = None
    special_instructions: Optional[str] = None
    files: List[FileReference] = Field(default_factory=list)
    order_date: str
    # pending | processing | completed | ... (not enforced)
    status: str = "pending"
    total_cost: Optional[float] = None


class Order(OrderDraft):
    id: str
    created_at: str
    updated_at: str


class StoredFile(_CamelModel):
    name: str
    size: int
    type: str
    path: str
    url: Optional[str] = None
