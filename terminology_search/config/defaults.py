"""
Default terminology values shared across the search surfaces.

This module provides the ECL operator catalogue and the search parameters
used when building terminology queries.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EclOperator:
    """
    A SNOMED CT ECL constraint operator.

    `long_name` is the human-readable name shown in diagnostics and used to
    select an operator; `short` is the token sent to the terminology server.

    References:
    - http://snomed.org/ecl
    """

    long_name: str
    short: str
    description: str = ""


ANY_OPERATOR = "ANY"

ECL_OPERATORS: tuple[EclOperator, ...] = (
    EclOperator("self", "", "The concept itself"),
    EclOperator("descendantOf", "<", "Descendants of the concept"),
    EclOperator("descendantOrSelfOf", "<<", "Descendants of the concept and the concept"),
    EclOperator("childOf", "<!", "Direct children of the concept"),
    EclOperator("childOrSelfOf", "<<!", "Direct children of the concept and the concept"),
    EclOperator("ancestorOf", ">", "Ancestors of the concept"),
    EclOperator("ancestorOrSelfOf", ">>", "Ancestors of the concept and the concept"),
    EclOperator("parentOf", ">!", "Direct parents of the concept"),
    EclOperator("parentOrSelfOf", ">>!", "Direct parents of the concept and the concept"),
    EclOperator("memberOf", "^", "Members of the reference set"),
    EclOperator(ANY_OPERATOR, "*", "Any concept"),
)

DEFAULT_ECL_OPERATOR = "descendantOrSelfOf"


@dataclass(frozen=True)
class SearchParams:
    """Default search parameters for terminology queries."""

    VALUE_SET_SUFFIX: str = "?fhir_vs"
    ECL_PREFIX: str = "=ecl/"
    RESOURCE_SEARCH_FIELDS: tuple[str, ...] = ("name:contains", "description:contains", "url")


# Singleton instance
SEARCH_PARAMS = SearchParams()

_OPERATORS_BY_LONG_NAME = {op.long_name: op for op in ECL_OPERATORS}


def get_ecl_operator(long_name: str) -> EclOperator | None:
    """
    Get an ECL operator by its long name.

    Args:
        long_name: Operator name like 'childOf' or 'ANY'

    Returns:
        The operator, or None if the name is unknown
    """
    return _OPERATORS_BY_LONG_NAME.get(long_name)
