"""Query criteria shared by every store API search.

A ``Criteria`` is a mutable, request scoped description of a search: filters,
sortings, pagination, eager loaded associations and the total count mode.
Repositories translate it into SQL; route handlers and event listeners extend
it in place.
"""
import json
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from core.exceptions import InvalidCriteriaError
from schemas.criteria import CriteriaPayload, FilterPayload


# ---------------- FILTERS ----------------
class Filter:
    def get_fields(self) -> List[str]:
        raise NotImplementedError

    def __eq__(self, other):
        return type(self) is type(other) and vars(self) == vars(other)

    def __repr__(self):
        args = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({args})"


class SingleFieldFilter(Filter):
    def __init__(self, field: str):
        self.field = field

    def get_fields(self) -> List[str]:
        return [self.field]

    def with_field(self, field: str) -> "SingleFieldFilter":
        """Copy of this filter addressing ``field`` instead"""
        clone = object.__new__(type(self))
        clone.__dict__.update(vars(self))
        clone.field = field
        return clone


class EqualsFilter(SingleFieldFilter):
    def __init__(self, field: str, value: Any):
        super().__init__(field)
        self.value = value


class EqualsAnyFilter(SingleFieldFilter):
    def __init__(self, field: str, values: Iterable[Any]):
        super().__init__(field)
        self.values = list(values)


class ContainsFilter(SingleFieldFilter):
    def __init__(self, field: str, value: str):
        super().__init__(field)
        self.value = value


class RangeFilter(SingleFieldFilter):
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"

    def __init__(self, field: str, parameters: Dict[str, Any]):
        super().__init__(field)
        unknown = set(parameters) - {self.GT, self.GTE, self.LT, self.LTE}
        if unknown or not parameters:
            raise InvalidCriteriaError(
                f"Range filter on '{field}' needs gt, gte, lt or lte parameters")
        self.parameters = dict(parameters)


class MultiFilter(Filter):
    CONNECTION_AND = "AND"
    CONNECTION_OR = "OR"

    def __init__(self, operator: str = CONNECTION_AND, queries: Iterable[Filter] = ()):
        operator = operator.upper()
        if operator not in (self.CONNECTION_AND, self.CONNECTION_OR):
            raise InvalidCriteriaError(f"Unsupported filter operator '{operator}'")
        self.operator = operator
        self.queries = list(queries)

    def add_query(self, query: Filter) -> "MultiFilter":
        self.queries.append(query)
        return self

    def get_fields(self) -> List[str]:
        return [field for query in self.queries for field in query.get_fields()]


class NotFilter(MultiFilter):
    """Negates the conjunction (or disjunction) of its queries"""


# ---------------- SORTING ----------------
class FieldSorting:
    ASCENDING = "ASC"
    DESCENDING = "DESC"

    def __init__(self, field: str, direction: str = ASCENDING):
        direction = direction.upper()
        if direction not in (self.ASCENDING, self.DESCENDING):
            raise InvalidCriteriaError(f"Unsupported sort direction '{direction}'")
        self.field = field
        self.direction = direction

    @property
    def descending(self) -> bool:
        return self.direction == self.DESCENDING

    def __eq__(self, other):
        return isinstance(other, FieldSorting) and (self.field, self.direction) == (other.field, other.direction)

    def __repr__(self):
        return f"FieldSorting({self.field!r}, {self.direction!r})"


# ---------------- CRITERIA ----------------
class Criteria:
    TOTAL_COUNT_MODE_NONE = 0
    TOTAL_COUNT_MODE_EXACT = 1
    TOTAL_COUNT_MODE_NEXT_PAGES = 2

    def __init__(self, ids: Optional[Iterable[str]] = None):
        self.ids: List[str] = list(ids) if ids else []
        self.filters: List[Filter] = []
        self.post_filters: List[Filter] = []
        self.sortings: List[FieldSorting] = []
        self.associations: Dict[str, "Criteria"] = {}
        self.limit: Optional[int] = None
        self.offset: Optional[int] = None
        self.total_count_mode: int = self.TOTAL_COUNT_MODE_NONE

    def add_filter(self, *filters: Filter) -> "Criteria":
        self.filters.extend(filters)
        return self

    def add_post_filter(self, *filters: Filter) -> "Criteria":
        self.post_filters.extend(filters)
        return self

    def add_sorting(self, *sortings: FieldSorting) -> "Criteria":
        self.sortings.extend(sortings)
        return self

    def reset_sorting(self) -> "Criteria":
        self.sortings = []
        return self

    def add_association(self, path: str) -> "Criteria":
        self.get_association(path)
        return self

    def get_association(self, path: str) -> "Criteria":
        """Nested criteria for ``path`` (dotted), created on first access"""
        criteria = self
        for name in path.split("."):
            criteria = criteria.associations.setdefault(name, Criteria())
        return criteria

    def has_association(self, name: str) -> bool:
        return name in self.associations

    def set_limit(self, limit: Optional[int]) -> "Criteria":
        self.limit = limit
        return self

    def set_offset(self, offset: Optional[int]) -> "Criteria":
        self.offset = offset
        return self

    def set_total_count_mode(self, mode: int) -> "Criteria":
        self.total_count_mode = mode
        return self

    def get_page(self) -> int:
        if not self.limit:
            return 1
        return (self.offset or 0) // self.limit + 1

    def all_filters(self) -> List[Filter]:
        return self.filters + self.post_filters

    def has_filter(self, filter_type: type) -> bool:
        def _walk(filters):
            for f in filters:
                if isinstance(f, filter_type):
                    return True
                if isinstance(f, MultiFilter) and _walk(f.queries):
                    return True
            return False

        return _walk(self.all_filters())

    def get_fields(self) -> List[str]:
        fields = [field for f in self.all_filters() for field in f.get_fields()]
        fields.extend(sorting.field for sorting in self.sortings)
        return fields


# ---------------- REQUEST PARSING ----------------
class RequestCriteriaBuilder:
    """Builds a ``Criteria`` from decoded request parameters.

    POST bodies arrive as JSON objects. GET query strings carry ``filter``,
    ``post-filter``, ``associations`` and ``sort`` as JSON strings; ``sort``
    additionally accepts the ``-createdAt,name`` shorthand and ``ids`` the
    pipe separated ``a|b`` form.
    """

    JSON_QUERY_PARAMETERS = ("filter", "post-filter", "associations")

    def __init__(self, max_limit: int, default_limit: Optional[int] = None):
        self.max_limit = max_limit
        self.default_limit = default_limit

    def from_query_params(self, params: Dict[str, str]) -> Criteria:
        data: Dict[str, Any] = dict(params)
        for key in self.JSON_QUERY_PARAMETERS:
            if key in data:
                data[key] = self._decode_json(key, data[key])
        if isinstance(data.get("sort"), str) and data["sort"].lstrip().startswith("["):
            data["sort"] = self._decode_json("sort", data["sort"])
        if isinstance(data.get("ids"), str):
            data["ids"] = self._decode_ids(data["ids"])
        return self.handle_request(data)

    def handle_request(self, data: Optional[Dict[str, Any]]) -> Criteria:
        try:
            payload = CriteriaPayload.model_validate(data or {})
        except ValidationError as e:
            raise InvalidCriteriaError(
                "Invalid criteria parameters",
                errors=e.errors(include_url=False, include_context=False),
            )

        criteria = Criteria(payload.ids)

        limit = payload.limit if payload.limit is not None else self.default_limit
        if limit is not None and limit > self.max_limit:
            raise InvalidCriteriaError(
                f"The limit must be lower than or equal to {self.max_limit}", limit=limit)
        criteria.set_limit(limit)
        if payload.page and limit:
            criteria.set_offset((payload.page - 1) * limit)

        criteria.add_filter(*(self._parse_filter(f) for f in payload.filter))
        criteria.add_post_filter(*(self._parse_filter(f) for f in payload.post_filter))
        criteria.add_sorting(*self._parse_sorting(payload.sort))
        self._parse_associations(criteria, payload.associations)

        if payload.total_count_mode is not None:
            criteria.set_total_count_mode(payload.total_count_mode)

        return criteria

    def _decode_json(self, key: str, raw: str):
        try:
            return json.loads(raw)
        except ValueError:
            raise InvalidCriteriaError(f"Parameter '{key}' is not valid JSON")

    def _decode_ids(self, raw: str):
        if raw.lstrip().startswith("["):
            return self._decode_json("ids", raw)
        return [i for i in raw.split("|") if i]

    def _parse_filter(self, payload: FilterPayload) -> Filter:
        if payload.type in ("multi", "not"):
            if not payload.queries:
                raise InvalidCriteriaError(f"A {payload.type} filter needs at least one query")
            queries = [self._parse_filter(q) for q in payload.queries]
            cls = NotFilter if payload.type == "not" else MultiFilter
            return cls(payload.operator, queries)

        if not payload.field:
            raise InvalidCriteriaError(f"An {payload.type} filter needs a field")

        if payload.type == "equals":
            return EqualsFilter(payload.field, payload.value)
        if payload.type == "equalsAny":
            values = payload.value
            if isinstance(values, str):
                values = [v for v in values.split("|") if v]
            if not isinstance(values, list) or not values:
                raise InvalidCriteriaError(f"equalsAny filter on '{payload.field}' needs a list of values")
            return EqualsAnyFilter(payload.field, values)
        if payload.type == "contains":
            if payload.value is None or payload.value == "":
                raise InvalidCriteriaError(f"contains filter on '{payload.field}' needs a value")
            return ContainsFilter(payload.field, str(payload.value))
        return RangeFilter(payload.field, payload.parameters or {})

    def _parse_sorting(self, sort) -> List[FieldSorting]:
        if isinstance(sort, str):
            sortings = []
            for part in sort.split(","):
                part = part.strip()
                if not part:
                    continue
                if part.startswith("-"):
                    sortings.append(FieldSorting(part[1:], FieldSorting.DESCENDING))
                else:
                    sortings.append(FieldSorting(part.lstrip("+"), FieldSorting.ASCENDING))
            return sortings
        return [FieldSorting(s.field, s.order) for s in sort]

    def _parse_associations(self, criteria: Criteria, associations) -> None:
        if isinstance(associations, list):
            for path in associations:
                criteria.add_association(path)
            return

        for name, nested in associations.items():
            child = criteria.get_association(name)
            if not nested:
                continue
            if not isinstance(nested, dict):
                raise InvalidCriteriaError(f"Association '{name}' must be an object")
            try:
                payload = CriteriaPayload.model_validate(nested)
            except ValidationError as e:
                raise InvalidCriteriaError(
                    f"Invalid criteria for association '{name}'",
                    errors=e.errors(include_url=False, include_context=False),
                )
            child.add_filter(*(self._parse_filter(f) for f in payload.filter))
            self._parse_associations(child, payload.associations)
