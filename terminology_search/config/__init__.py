"""Configuration modules for Terminology Search."""

from terminology_search.config.defaults import (
    ANY_OPERATOR,
    DEFAULT_ECL_OPERATOR,
    ECL_OPERATORS,
    SEARCH_PARAMS,
    EclOperator,
    get_ecl_operator,
)
from terminology_search.config.logging import configure_logging, get_logger
from terminology_search.config.settings import Settings, get_settings, reset_settings

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "ANY_OPERATOR",
    "DEFAULT_ECL_OPERATOR",
    "ECL_OPERATORS",
    "SEARCH_PARAMS",
    "EclOperator",
    "get_ecl_operator",
    "configure_logging",
    "get_logger",
]
