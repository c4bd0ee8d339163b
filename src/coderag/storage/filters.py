"""Metadata filters in the Chroma ``where`` dialect.

A filter is a mapping of metadata keys to either a literal (equality) or an
operator mapping such as ``{"$in": ["py", "ts"]}``; ``$and`` / ``$or`` take
lists of filters. Each mapping holds exactly one key and each operator mapping
exactly one operator, as Chroma requires; combine conditions with ``$and``.
"""

import operator
from typing import Any, Callable, Mapping, Optional

from coderag.errors import InvalidArgumentError

_COMPARISONS: dict[str, Callable[[Any, Any], bool]] = {
    "$eq": operator.eq,
    "$ne": operator.ne,
    "$gt": operator.gt,
    "$gte": operator.ge,
    "$lt": operator.lt,
    "$lte": operator.le,
    "$in": lambda value, options: value in options,
    "$nin": lambda value, options: value not in options,
}

_LOGICAL = ("$and", "$or")


def validate_where(where: Optional[Mapping[str, Any]]) -> None:
    """Reject malformed filters before they reach a store.

    Raises:
        InvalidArgumentError: If the filter is not a well-formed mapping
    """
    if where is None:
        return
    if not isinstance(where, Mapping):
        raise InvalidArgumentError(
            f"Filter must be an object, got {type(where).__name__}"
        )
    if len(where) > 1:
        raise InvalidArgumentError(
            f"Filter must have exactly one key, got {len(where)}; "
            "combine conditions with $and"
        )

    for key, condition in where.items():
        if not isinstance(key, str) or not key:
            raise InvalidArgumentError(f"Filter keys must be strings, got {key!r}")

        if key in _LOGICAL:
            if not isinstance(condition, list) or not condition:
                raise InvalidArgumentError(f"{key} expects a non-empty list of filters")
            for sub in condition:
                if not isinstance(sub, Mapping) or not sub:
                    raise InvalidArgumentError(f"{key} expects a list of filter objects")
                validate_where(sub)
        elif key.startswith("$"):
            raise InvalidArgumentError(f"Unsupported filter operator {key}")
        elif isinstance(condition, Mapping):
            if len(condition) != 1:
                raise InvalidArgumentError(
                    f"Filter for {key!r} must have exactly one operator"
                )
            for op, argument in condition.items():
                if op not in _COMPARISONS:
                    raise InvalidArgumentError(
                        f"Unsupported operator {op!r} for filter key {key!r}"
                    )
                if op in ("$in", "$nin") and not isinstance(argument, list):
                    raise InvalidArgumentError(f"{op} expects a list for key {key!r}")
        elif not isinstance(condition, (str, int, float, bool)):
            raise InvalidArgumentError(
                f"Filter value for {key!r} must be a string, number or boolean"
            )


def matches(metadata: Mapping[str, Any], where: Optional[Mapping[str, Any]]) -> bool:
    """Evaluate a filter against one record's metadata."""
    if not where:
        return True

    for key, condition in where.items():
        if key == "$and":
            if not all(matches(metadata, sub) for sub in condition):
                return False
        elif key == "$or":
            if not any(matches(metadata, sub) for sub in condition):
                return False
        elif isinstance(condition, Mapping):
            value = metadata.get(key)
            for op, argument in condition.items():
                try:
                    if not _COMPARISONS[op](value, argument):
                        return False
                except TypeError:
                    # e.g. ordering a missing value against a number
                    return False
        elif metadata.get(key) != condition:
            return False

    return True
