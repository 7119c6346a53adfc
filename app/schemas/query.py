from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from app.core.config import settings


class ComparisonOperator(str, Enum):
    equals = "equals"
    greaterThan = "greaterThan"
    smallerThan = "smallerThan"


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


FilterValue = Union[bool, int, float, str]


class FilterCriterion(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    condition: ComparisonOperator = ComparisonOperator.equals
    value: Optional[FilterValue] = None


class SortCriterion(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    order: SortDirection = SortDirection.ASC


class FieldSearchCriterion(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    value: str


class PageRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    continuation_token: str = ""
    page_limit: int = Field(default=settings.DEFAULT_PAGE_LIMIT, ge=1)


class PageResult(BaseModel):
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    has_more_results: bool = False
    continuation_token: str = ""


class CaseListQuery(BaseModel):
    customer_id: str = Field(alias="customerId")
    project_id: str = Field(alias="projectId")
    continuation_token: str = Field(default="", alias="continuationToken")
    page_limit: int = Field(default=settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT, alias="pageLimit")
    sort: List[SortCriterion] = Field(default_factory=list)
    filter: List[FilterCriterion] = Field(default_factory=list)
    search: List[str] = Field(default_factory=list)
    search_fields: List[FieldSearchCriterion] = Field(default_factory=list, alias="searchFields")
    properties: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class CaseListPage(BaseModel):
    result: List[Dict[str, Any]] = Field(default_factory=list)
    options: List[str] = Field(default_factory=list)
    has_more_results: bool = Field(default=False, alias="hasMoreResults")
    continuation_token: str = Field(default="", alias="continuationToken")

    model_config = ConfigDict(populate_by_name=True)
