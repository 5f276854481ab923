# explore/schemas/explore.py
from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from tracelens.explore.core.config import settings

# A group value is always a scalar; dates travel as ISO strings or epoch millis.
ItemValue = Union[bool, int, float, str, None]
ExploreItem = Dict[str, ItemValue]


class ColumnInfo(BaseModel):
    """Describes one field of the explore items."""

    name: str
    is_num: bool = Field(default=False, alias="isNum")
    is_group: bool = Field(default=False, alias="isGroup")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class QueryPart(BaseModel):
    query: str
    error: str = ""
    disabled: bool = False

    model_config = ConfigDict(frozen=True, extra="ignore")


class ExploreResult(BaseModel):
    """Payload returned by the span groups endpoint."""

    groups: List[ExploreItem] = Field(default_factory=list)
    columns: List[ColumnInfo] = Field(default_factory=list)
    query_parts: List[QueryPart] = Field(default_factory=list, alias="queryParts")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TypeItem(BaseModel):
    type: str
    num_group: int = Field(default=0, ge=0, alias="numGroup")

    model_config = ConfigDict(populate_by_name=True)


class PagerConfig(BaseModel):
    per_page: PositiveInt = Field(
        default_factory=lambda: settings.per_page, alias="perPage"
    )
    page: PositiveInt = 1

    model_config = ConfigDict(populate_by_name=True)


class OrderConfig(BaseModel):
    column: Optional[str] = Field(
        default_factory=lambda: settings.span_count_per_min_key
    )
    desc: bool = Field(default_factory=lambda: settings.order_desc)


class ExploreConfig(BaseModel):
    """Initial pager and order state of an explorer."""

    pager: PagerConfig = Field(default_factory=PagerConfig)
    order: OrderConfig = Field(default_factory=OrderConfig)
