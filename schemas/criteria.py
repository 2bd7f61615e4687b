from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional, Union


class FilterPayload(BaseModel):
    """One entry of the `filter` / `post-filter` request parameter"""
    type: Literal["equals", "equalsAny", "contains", "range", "multi", "not"]
    field: Optional[str] = None
    value: Any = None
    parameters: Optional[Dict[str, Any]] = None
    operator: Literal["and", "or", "AND", "OR"] = "and"
    queries: List["FilterPayload"] = []


class SortPayload(BaseModel):
    field: str = Field(..., min_length=1)
    order: Literal["ASC", "DESC", "asc", "desc"] = "ASC"


class CriteriaPayload(BaseModel):
    page: Optional[int] = Field(None, ge=1)
    limit: Optional[int] = Field(None, ge=1)
    ids: Optional[List[str]] = None
    filter: List[FilterPayload] = []
    post_filter: List[FilterPayload] = Field([], alias="post-filter")
    sort: Union[str, List[SortPayload]] = []
    associations: Union[List[str], Dict[str, Any]] = {}
    total_count_mode: Optional[int] = Field(None, alias="total-count-mode", ge=0, le=2)

    class Config:
        populate_by_name = True
        extra = "ignore"


FilterPayload.model_rebuild()
