"""
Aggregations

Client-side aggregates for query_collection, computed over the records of the
fetched page (the first 100 matches).

Expressions have the form "<func>(<field>)":
- sum(field): numeric sum; values that don't parse as numbers count as 0
- avg(field): sum / number of records (0 when there are no records)
- count(x):   number of records (the argument is ignored)

A sum or avg that is not finite (an "Infinity" value) is reported as null.
"""

import math
from dataclasses import dataclass
from typing import Any

from utils.expressions import parse_float

AGGREGATE_PAGE_SIZE = 100

VALID_AGGREGATE_FUNCS = ("sum", "avg", "count")


class AggregationError(ValueError):
    """Malformed aggregate expression or unsupported function."""


@dataclass(frozen=True)
class AggregateSpec:
    """One parsed aggregate: output name, function, and field argument."""
    name: str
    func: str
    field: str


def parse_aggregate(name: str, expression: str) -> AggregateSpec:
    """
    Parse "func(field)": split on the first '(' and drop the trailing ')'.

    Raises:
        AggregationError: If there is no '(' or the function is not supported
    """
    if "(" not in expression:
        raise AggregationError(f"Invalid aggregation expression: {expression}")

    func, _, rest = expression.partition("(")
    func = func.strip()
    field = rest[:-1] if rest.endswith(")") else rest
    field = field.strip()

    if func not in VALID_AGGREGATE_FUNCS:
        raise AggregationError(f"Unsupported aggregation function: {func}")

    return AggregateSpec(name=name, func=func, field=field)


def parse_aggregates(aggregate: dict[str, str]) -> list[AggregateSpec]:
    """Parse every expression up front so a bad one fails before any fetch."""
    return [parse_aggregate(name, expression) for name, expression in aggregate.items()]


def _numeric(value: Any) -> float:
    number = parse_float(value)
    return 0.0 if math.isnan(number) else number


def _clean(number: float) -> Any:
    # Infinity and NaN have no JSON form; they are reported as null
    if not math.isfinite(number):
        return None
    # Whole-valued results are reported as ints (e.g. 6, not 6.0)
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def compute_aggregate(spec: AggregateSpec, items: list[dict]) -> Any:
    if spec.func == "count":
        return len(items)

    total = sum(_numeric(item.get(spec.field)) for item in items)
    if spec.func == "sum":
        return _clean(total)

    # avg
    if not items:
        return 0
    return _clean(total / len(items))


def compute_aggregates(specs: list[AggregateSpec], items: list[dict]) -> dict[str, Any]:
    return {spec.name: compute_aggregate(spec, items) for spec in specs}
