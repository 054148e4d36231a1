"""
Fleet core filter normalization

A filter is a transient mapping from field name to a match rule. It is
computed per request from the recognized query parameters only; any
other query parameter is ignored here (but preserved by the link builder).
"""

import enum
from typing import Dict, List, Mapping, NamedTuple, Optional, Type

from sqlalchemy.sql.elements import ColumnElement

from .database import Base


@enum.unique
class MatchKind(enum.Enum):
    EXACT = "exact"
    """Case-sensitive equality"""
    SUBSTRING = "substring"
    """Case-insensitive substring match"""


class MatchRule(NamedTuple):
    kind: MatchKind
    value: str


Filter = Dict[str, MatchRule]

RECOGNIZED_FILTERS: Dict[str, MatchKind] = {
    "status": MatchKind.EXACT,
    "airline": MatchKind.SUBSTRING
}


def normalize_filter(
        params: Mapping[str, Optional[str]],
        recognized: Optional[Mapping[str, MatchKind]] = None
) -> Filter:
    """
    Build the filter from the query parameters, skipping absent or empty values

    :param params: mapping of the query parameters of the request
    :param recognized: optional mapping of field names to their match kind
        (defaults to the recognized filters of the aircraft collection)
    :return: filter, which is empty if no recognized parameter was given
    """

    if recognized is None:
        recognized = RECOGNIZED_FILTERS
    return {
        key: MatchRule(kind, params[key])
        for key, kind in recognized.items()
        if params.get(key)
    }


def to_criteria(model: Type[Base], query_filter: Filter) -> List[ColumnElement]:
    """
    Translate a filter into a list of SQL criteria for the given model

    :raises KeyError: when the filter refers to a field unknown to the model
    """

    criteria = []
    for field, rule in query_filter.items():
        column = getattr(model, field, None)
        if column is None:
            raise KeyError(f"Model {model.__name__} has no field {field!r}")
        if rule.kind == MatchKind.EXACT:
            criteria.append(column == rule.value)
        elif rule.kind == MatchKind.SUBSTRING:
            criteria.append(column.icontains(rule.value, autoescape=True))
    return criteria
