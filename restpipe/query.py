"""
Query string translation

    GET /widgets/?name__startswith=a&age__in=1,2&or=name__startswith,age__in&order_by=-age,name&limit=10

- filters: {"or": [{"name__startswith": "a"}, {"age__in": ["1", "2"]}]}
- sorts: [Sort("age", DESCENDING), Sort("name", ASCENDING)]
- limit 10, offset 0

Only parameters whose base field is declared in the resource `filtering` map are kept.
`filtering` maps a field name to the operators allowed on it, ALL (or None) allows any operator:

    filtering = {"name": ALL, "age": ["exact", "gte", "lte", "in"]}
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Mapping, Optional, Tuple
import restpipe
from .errors import BadRequestError

ALL = "__all__"
EXACT = "exact"
IN = "in"
OR = "or"
NOR = "nor"
ORDER_BY = "order_by"
LIMIT = "limit"
OFFSET = "offset"


class Direction(IntEnum):
    ASCENDING = 1
    DESCENDING = -1


@dataclass(frozen=True)
class Sort:
    field: str
    direction: Direction = Direction.ASCENDING

    @property
    def ascending(self) -> bool:
        return self.direction == Direction.ASCENDING


class QueryTranslator:
    """
    Translates the index query string into filter and sort specifications
    """

    def __init__(self, filtering: Optional[Mapping[str, Any]] = None, separator: str = "__") -> None:
        self.filtering = dict(filtering or {})
        self.separator = separator

    def split(self, param: str) -> Tuple[str, Optional[str]]:
        """
        :param param: query parameter name, eg. "age__gte"
        :return: base field and operator, eg. ("age", "gte")
        """
        field, sep, operator = param.partition(self.separator)
        return field, (operator if sep else None)

    def is_allowed(self, field: str, operator: Optional[str]) -> bool:
        if field not in self.filtering:
            return False
        allowed = self.filtering[field]
        if allowed is None or allowed == ALL:
            return True
        return (operator or EXACT) in allowed

    def build_filters(self, query: Mapping[str, Any]) -> Dict[str, Any]:
        """
        builds the filter specification from the query string params

        :param query: query string params
        :return: filter specification
        """
        filters: Dict[str, Any] = {}
        groups: Dict[str, List[str]] = {}
        for param, value in query.items():
            if param in (OR, NOR):
                groups[param] = [name for name in str(value).split(",") if name]
                continue
            field, operator = self.split(param)
            if not self.is_allowed(field, operator):
                restpipe.log.debug(f"Discarding filter {param}")
                continue
            if operator == IN:
                value = str(value).split(",")
            filters[param] = value

        for group, names in groups.items():
            sub_filters = []
            for name in names:
                if name in filters:
                    sub_filters.append({name: filters.pop(name)})
            if sub_filters:
                filters[group] = sub_filters
        return filters

    @staticmethod
    def build_sorts(query: Mapping[str, Any]) -> List[Sort]:
        """
        builds the sort specification from the order_by query string param

        :param query: query string params
        :return: list of Sort, in order of precedence
        """
        sorting = query.get(ORDER_BY)
        if not sorting:
            return []
        sorts = []
        for field in str(sorting).split(","):
            direction = Direction.ASCENDING
            if field.startswith("-"):
                direction = Direction.DESCENDING
                field = field[1:]
            if field:
                sorts.append(Sort(field, direction))
        return sorts

    @staticmethod
    def build_page(query: Mapping[str, Any], default_limit: int, max_limit: int) -> Tuple[int, int]:
        """
        :param query: query string params
        :param default_limit: limit used when the query has none
        :param max_limit: the limit is clamped to this value, a non-positive limit resets to it
        :return: limit, offset
        """
        raw_offset = query.get(OFFSET)
        raw_limit = query.get(LIMIT)
        try:
            offset = 0 if raw_offset in (None, "") else int(raw_offset)
            limit = default_limit if raw_limit in (None, "") else int(raw_limit)
        except (TypeError, ValueError):
            raise BadRequestError(f"Invalid paging parameters: offset={query.get(OFFSET)}, limit={query.get(LIMIT)}")
        if offset < 0:
            raise BadRequestError(f"Invalid offset {offset}")
        limit = min(limit, max_limit)
        if limit <= 0:
            limit = max_limit
        return limit, offset
