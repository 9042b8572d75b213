"""
Data types for ECL filter rows and rendered expressions.
"""

from dataclasses import dataclass

from pydantic import BaseModel, Field

from terminology_search.config.defaults import ANY_OPERATOR


@dataclass(frozen=True)
class FilterRow:
    """One row of the ECL filter: operator, concept code and optional label."""

    operator_short: str
    operator_long: str
    code: str = ""
    label: str = ""

    @property
    def is_any(self) -> bool:
        """ANY rows are wildcards; their code and label are ignored."""
        return self.operator_long == ANY_OPERATOR


@dataclass(frozen=True)
class EclExpression:
    """Rendered ECL: the short form is sent to the server, the long form is for diagnostics."""

    short_form: str
    long_form: str


class FilterRowInput(BaseModel):
    """A filter row as sent by API clients; the operator is given by long name."""

    operator: str = Field(description="Operator long name, e.g. 'childOf' or 'ANY'")
    code: str = Field(default="", description="SNOMED CT concept id")
    label: str = Field(default="", description="Optional concept term")


class EclRenderRequest(BaseModel):
    """Request body for rendering filter rows."""

    rows: list[FilterRowInput] = Field(default_factory=list)


class EclExpressionResponse(BaseModel):
    """Rendered expression plus the rows it was built from."""

    short_form: str
    long_form: str
    rows: list[dict[str, str]] = Field(default_factory=list)


class EclOperatorInfo(BaseModel):
    """An entry of the ECL operator catalogue."""

    long_name: str
    short: str
    description: str = ""
