"""
Messages exchanged over the interactive search WebSocket.
"""

from enum import Enum

from pydantic import BaseModel, Field

from terminology_search.models.ecl import FilterRowInput
from terminology_search.models.search import Surface


class MessageType(str, Enum):
    """Inbound message types."""

    FIELD = "field"
    PAGE = "page"
    VALUE_SET = "value_set"
    SELECT = "select"
    ECL = "ecl"


class EclAction(str, Enum):
    """Edits of the ECL filter rows."""

    APPEND = "append"
    UPDATE = "update"
    REMOVE = "remove"
    REPLACE = "replace"
    CHILDREN = "children"
    PARENTS = "parents"


class SessionMessage(BaseModel):
    """A client message; which fields are used depends on `type`."""

    type: MessageType
    surface: Surface | None = None

    # field
    event: str = Field(default="change", description="'change' or 'keypress'")
    value: str = ""
    key: str | None = None

    # page
    page: int | None = Field(default=None, ge=1)

    # value_set / select
    url: str | None = None
    id: str | None = None

    # ecl
    action: EclAction | None = None
    index: int | None = None
    operator: str | None = None
    code: str | None = None
    label: str | None = None
    rows: list[FilterRowInput] = Field(default_factory=list)
