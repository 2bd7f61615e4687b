import re
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Optional

from sqlalchemy import and_, or_, not_, func, inspect
from sqlalchemy.orm import Session, aliased, selectinload

from core.criteria import (
    Criteria, Filter, SingleFieldFilter, EqualsFilter, EqualsAnyFilter,
    ContainsFilter, RangeFilter, MultiFilter, NotFilter
)
from core.exceptions import InvalidCriteriaError
from core.logging_config import get_logger
from core.model import Product, ProductVisibility

logger = get_logger("core.repository")

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_attribute_name(field: str) -> str:
    """customerId -> customer_id"""
    return _CAMEL_BOUNDARY.sub("_", field).lower()


def _flatten_conjunction(filters: List[Filter]) -> Iterator[Filter]:
    for f in filters:
        if isinstance(f, MultiFilter) and not isinstance(f, NotFilter) \
                and f.operator == MultiFilter.CONNECTION_AND:
            yield from _flatten_conjunction(f.queries)
        else:
            yield f


class EntitySearchResult:
    """Ordered page of entities returned by a repository search"""

    def __init__(self, entity: str, total: int, elements: List[Any], criteria: Criteria, context=None):
        self.entity = entity
        self.total = total
        self.elements = list(elements)
        self.criteria = criteria
        self.context = context

    @property
    def page(self) -> int:
        return self.criteria.get_page()

    @property
    def limit(self) -> Optional[int]:
        return self.criteria.limit

    @property
    def ids(self) -> List[str]:
        return [element.id for element in self.elements]

    def first(self):
        return self.elements[0] if self.elements else None

    def get(self, id: str):
        for element in self.elements:
            if element.id == id:
                return element
        return None

    def has(self, id: str) -> bool:
        return self.get(id) is not None

    def remove(self, id: str) -> None:
        self.elements = [element for element in self.elements if element.id != id]

    def filter(self, predicate: Callable[[Any], bool]) -> "EntitySearchResult":
        return EntitySearchResult(
            self.entity,
            self.total,
            [element for element in self.elements if predicate(element)],
            self.criteria,
            self.context,
        )

    def __iter__(self):
        return iter(self.elements)

    def __len__(self):
        return len(self.elements)


class EntityRepository:
    """Runs ``Criteria`` searches for one mapped entity.

    API field names are camelCase and may walk relationships with dots
    (``wishlists.createdAt``). Filters on relationships compile to EXISTS
    sub-queries; AND-ed filters under the same relationship prefix must hold
    for the same related row. Sorting on a to-many relationship joins it,
    constrained by the filters scoped to that relationship, and orders by the
    max (descending) or min (ascending) value per root row.
    """

    def __init__(self, db: Session, model, entity_name: str):
        self.db = db
        self.model = model
        self.entity_name = entity_name

    def search(self, criteria: Criteria, context=None) -> EntitySearchResult:
        filters = criteria.all_filters() + self._scope_filters(criteria, context)

        query = self.db.query(self.model)
        if criteria.ids:
            query = query.filter(self.model.id.in_(criteria.ids))
        clauses = self._compile_conjunction(self.model, filters)
        if clauses:
            query = query.filter(and_(*clauses))

        filtered = query
        query = self._apply_sortings(query, criteria.sortings, filters)
        options = self._loader_options(self.model, criteria.associations)
        if options:
            query = query.options(*options)
        if criteria.offset:
            query = query.offset(criteria.offset)
        if criteria.limit:
            query = query.limit(criteria.limit)

        elements = query.all()
        total = self._total(filtered, criteria, len(elements))

        logger.debug(
            f"Searched {self.entity_name}: {len(elements)} of {total}",
            extra={"entity": self.entity_name, "fields": criteria.get_fields()}
        )
        return EntitySearchResult(self.entity_name, total, elements, criteria, context)

    def _scope_filters(self, criteria: Criteria, context) -> List[Filter]:
        """Filters enforced by the repository on top of the caller's criteria"""
        return []

    def _total(self, filtered, criteria: Criteria, fetched: int) -> int:
        mode = criteria.total_count_mode
        if mode == Criteria.TOTAL_COUNT_MODE_EXACT or (
                mode == Criteria.TOTAL_COUNT_MODE_NEXT_PAGES and not criteria.limit):
            return filtered.order_by(None).count()
        if mode == Criteria.TOTAL_COUNT_MODE_NEXT_PAGES:
            offset = criteria.offset or 0
            probe = (
                filtered.order_by(None)
                .with_entities(self.model.id)
                .offset(offset)
                .limit(criteria.limit * 5 + 1)
            )
            return offset + probe.count()
        return fetched

    # ---------------- FIELD RESOLUTION ---------------- #

    def _column(self, entity, field: str):
        mapper = inspect(entity).mapper
        key = to_attribute_name(field)
        if key not in mapper.column_attrs:
            raise InvalidCriteriaError(
                f"Field '{field}' does not exist on {mapper.class_.__tablename__}", field=field)
        return getattr(entity, key)

    def _relationship(self, entity, field: str):
        mapper = inspect(entity).mapper
        key = to_attribute_name(field)
        if key not in mapper.relationships:
            raise InvalidCriteriaError(
                f"Association '{field}' does not exist on {mapper.class_.__tablename__}", field=field)
        return mapper.relationships[key]

    def _coerce(self, column, value, field: str):
        if value is None:
            return None
        try:
            python_type = column.type.python_type
        except NotImplementedError:
            return value
        if isinstance(value, python_type):
            return value
        try:
            if python_type is datetime:
                return datetime.fromisoformat(str(value))
            if python_type is bool:
                if isinstance(value, str):
                    lowered = value.lower()
                    if lowered in ("1", "true"):
                        return True
                    if lowered in ("0", "false"):
                        return False
                    raise ValueError(value)
                return bool(value)
            return python_type(value)
        except (TypeError, ValueError, ArithmeticError):
            raise InvalidCriteriaError(f"Invalid value {value!r} for field '{field}'", field=field)

    # ---------------- FILTERS ---------------- #

    def _compile_conjunction(self, entity, filters: List[Filter]) -> list:
        clauses = []
        scoped: Dict[str, List[Filter]] = {}
        for f in _flatten_conjunction(filters):
            if isinstance(f, SingleFieldFilter) and "." in f.field:
                head, rest = f.field.split(".", 1)
                scoped.setdefault(head, []).append(f.with_field(rest))
            elif isinstance(f, SingleFieldFilter):
                clauses.append(self._compile_field_filter(entity, f))
            elif isinstance(f, MultiFilter):
                clauses.append(self._compile_multi_filter(entity, f))
            else:
                raise InvalidCriteriaError(f"Unsupported filter {type(f).__name__}")

        for head, inner in scoped.items():
            clauses.append(self._compile_exists(entity, head, inner))
        return clauses

    def _compile_exists(self, entity, field: str, filters: List[Filter]):
        prop = self._relationship(entity, field)
        attr = getattr(entity, prop.key)
        condition = and_(*self._compile_conjunction(prop.mapper.class_, filters))
        return attr.any(condition) if prop.uselist else attr.has(condition)

    def _compile_multi_filter(self, entity, f: MultiFilter):
        if f.operator == MultiFilter.CONNECTION_AND:
            clause = and_(*self._compile_conjunction(entity, f.queries))
        else:
            clause = or_(*(and_(*self._compile_conjunction(entity, [q])) for q in f.queries))
        return not_(clause) if isinstance(f, NotFilter) else clause

    def _compile_field_filter(self, entity, f: SingleFieldFilter):
        column = self._column(entity, f.field)

        if isinstance(f, EqualsFilter):
            if f.value is None:
                return column.is_(None)
            return column == self._coerce(column, f.value, f.field)
        if isinstance(f, EqualsAnyFilter):
            return column.in_([self._coerce(column, v, f.field) for v in f.values])
        if isinstance(f, ContainsFilter):
            return column.contains(f.value, autoescape=True)
        if isinstance(f, RangeFilter):
            bounds = []
            for op, value in f.parameters.items():
                value = self._coerce(column, value, f.field)
                if op == RangeFilter.GT:
                    bounds.append(column > value)
                elif op == RangeFilter.GTE:
                    bounds.append(column >= value)
                elif op == RangeFilter.LT:
                    bounds.append(column < value)
                else:
                    bounds.append(column <= value)
            return and_(*bounds)
        raise InvalidCriteriaError(f"Unsupported filter {type(f).__name__}")

    # ---------------- SORTING ---------------- #

    def _scoped_filters(self, filters: List[Filter], prefix: str) -> List[Filter]:
        prefix = prefix + "."
        return [
            f.with_field(f.field[len(prefix):])
            for f in _flatten_conjunction(filters)
            if isinstance(f, SingleFieldFilter) and f.field.startswith(prefix)
        ]

    def _apply_sortings(self, query, sortings, filters: List[Filter]):
        order_by = []
        grouped = False
        for sorting in sortings:
            segments = sorting.field.split(".")
            entity = self.model
            to_many = False
            for depth, segment in enumerate(segments[:-1]):
                prop = self._relationship(entity, segment)
                alias = aliased(prop.mapper.class_)
                join_target = getattr(entity, prop.key).of_type(alias)
                if prop.uselist:
                    # Only rows that satisfy the filters on this path take part in ordering
                    path = ".".join(segments[:depth + 1])
                    conditions = self._compile_conjunction(alias, self._scoped_filters(filters, path))
                    if conditions:
                        join_target = join_target.and_(*conditions)
                    to_many = True
                query = query.outerjoin(join_target)
                entity = alias

            column = self._column(entity, segments[-1])
            if to_many:
                column = func.max(column) if sorting.descending else func.min(column)
                grouped = True
            order_by.append(column.desc() if sorting.descending else column.asc())

        if grouped:
            query = query.group_by(self.model.id)
        # Stable pagination for rows with equal sort values
        order_by.append(self.model.id.asc())
        return query.order_by(*order_by)

    # ---------------- ASSOCIATIONS ---------------- #

    def _loader_options(self, entity, associations: Dict[str, Criteria], parent=None) -> list:
        options = []
        for name, nested in associations.items():
            prop = self._relationship(entity, name)
            attr = getattr(entity, prop.key)
            target = prop.mapper.class_
            conditions = self._compile_conjunction(target, nested.all_filters())
            if conditions:
                attr = attr.and_(*conditions)
            loader = parent.selectinload(attr) if parent is not None else selectinload(attr)
            children = self._loader_options(target, nested.associations, loader)
            options.extend(children or [loader])
        return options


class ProductAvailableFilter(MultiFilter):
    """Active products visible in the given sales channel"""

    def __init__(self, sales_channel_id: str, visibility: int = ProductVisibility.VISIBILITY_ALL):
        super().__init__(MultiFilter.CONNECTION_AND, [
            EqualsFilter("active", True),
            EqualsFilter("visibilities.salesChannelId", sales_channel_id),
            RangeFilter("visibilities.visibility", {RangeFilter.GTE: visibility}),
        ])


class SalesChannelProductRepository(EntityRepository):
    """Product searches scoped to the sales channel of the request"""

    def __init__(self, db: Session):
        super().__init__(db, Product, "product")

    def _scope_filters(self, criteria: Criteria, context) -> List[Filter]:
        if criteria.has_filter(ProductAvailableFilter):
            return []
        return [ProductAvailableFilter(context.sales_channel_id, ProductVisibility.VISIBILITY_LINK)]
