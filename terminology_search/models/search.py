"""
Data types for terminology searches.

This module contains the value types passed between the gateway, the
search orchestration services and the API layer:
- search surfaces and tokens
- query requests and the resource entries they produce
- search results, page descriptors and normalized errors
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, Field


class Surface(str, Enum):
    """An independent search field with its own token and page state."""

    CODE_SYSTEM = "code_system"
    VALUE_SET = "value_set"
    CONCEPT = "concept"
    ECL = "ecl"


class ResourceKind(str, Enum):
    """Kind of object wrapped by a ResourceEntry."""

    CODE_SYSTEM = "CodeSystem"
    VALUE_SET = "ValueSet"
    CONCEPT = "Concept"


@dataclass(frozen=True, order=True)
class SearchToken:
    """
    Identifies one user-triggered search on a surface.

    Tokens are ordered by serial only; serials are never reused by the
    guard that minted them.
    """

    serial: int
    surface: Surface = field(compare=False)


@dataclass(frozen=True)
class QueryRequest:
    """A single terminology server query: operation plus string parameters."""

    operation: str
    params: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "params",
            MappingProxyType({k: str(v) for k, v in self.params.items()}),
        )


@dataclass(frozen=True)
class ResourceEntry:
    """
    A Code System, Value Set or Concept returned by the terminology server.

    `identifier` is unique per object: the resource id for Code Systems and
    Value Sets, "{system}|{code}" for Concepts.
    """

    identifier: str
    kind: ResourceKind
    payload: Mapping[str, Any] = field(default_factory=dict, hash=False, compare=False)
    full_url: str | None = None

    @classmethod
    def from_bundle_entry(
        cls, entry: Mapping[str, Any], kind: ResourceKind | None = None
    ) -> "ResourceEntry":
        """Wrap a searchset Bundle entry ({resource, fullUrl})."""
        resource = entry.get("resource") or {}
        if kind is None:
            resource_type = resource.get("resourceType", ResourceKind.CODE_SYSTEM.value)
            try:
                kind = ResourceKind(resource_type)
            except ValueError:
                raise ValueError(f"Unsupported resource type in bundle entry: {resource_type}") from None

        identifier = resource.get("id") or entry.get("fullUrl") or resource.get("url") or ""
        return cls(
            identifier=str(identifier),
            kind=kind,
            payload=MappingProxyType(dict(resource)),
            full_url=entry.get("fullUrl"),
        )

    @classmethod
    def from_expansion_item(cls, item: Mapping[str, Any]) -> "ResourceEntry":
        """Wrap an item of a ValueSet expansion's `contains` list."""
        return cls(
            identifier=f"{item.get('system', '')}|{item.get('code', '')}",
            kind=ResourceKind.CONCEPT,
            payload=MappingProxyType(dict(item)),
        )

    # Code System / Value Set fields

    @property
    def name(self) -> str | None:
        return self.payload.get("name")

    @property
    def description(self) -> str | None:
        return self.payload.get("description")

    @property
    def url(self) -> str | None:
        return self.payload.get("url")

    @property
    def value_set(self) -> str | None:
        """Implicit value set URL of a Code System."""
        return self.payload.get("valueSet")

    # Concept fields

    @property
    def code(self) -> str | None:
        return self.payload.get("code")

    @property
    def display(self) -> str | None:
        return self.payload.get("display")

    @property
    def system(self) -> str | None:
        return self.payload.get("system")

    @property
    def inactive(self) -> bool:
        return bool(self.payload.get("inactive", False))

    @property
    def designations(self) -> list[str]:
        """Synonyms of a Concept (requires includeDesignations)."""
        return [d["value"] for d in self.payload.get("designation", []) if d.get("value")]

    def to_dict(self) -> dict[str, Any]:
        """Display payload for the API layer."""
        if self.kind == ResourceKind.CONCEPT:
            return {
                "id": self.identifier,
                "kind": self.kind.value,
                "code": self.code,
                "display": self.display,
                "system": self.system,
                "designations": self.designations,
                "inactive": self.inactive,
            }
        return {
            "id": self.identifier,
            "kind": self.kind.value,
            "name": self.name,
            "description": self.description,
            "url": self.url,
            "fullUrl": self.full_url,
            "valueSet": self.value_set,
        }


@dataclass(frozen=True)
class QueryPage:
    """
    What a surface query returns.

    `offset` is None for unpaginated results (merged resource searches).
    """

    entries: tuple[ResourceEntry, ...]
    offset: int | None = None
    total: int | None = None
    page_size: int | None = None


class PageDescriptor(BaseModel):
    """Pagination information handed to the display layer."""

    model_config = {"frozen": True}

    offset: int = Field(description="Offset of the first result on this page")
    total: int | None = Field(default=None, description="Total matching results if known")
    page_size: int = Field(description="Results per page")
    page_count: int | None = Field(default=None, description="Number of pages if total is known")
    current_page: int = Field(description="1-based current page")
    first: int = Field(description="1-based position of the first shown result, 0 if none")
    last: int = Field(description="1-based position of the last shown result")


class ErrorPayload(BaseModel):
    """Normalized error for display."""

    model_config = {"frozen": True}

    message: str = Field(description="Pretty-printed JSON body or the raw message")
    status: int | None = Field(default=None, description="HTTP status if a response was received")
    structured: bool = Field(default=False, description="Whether the message is a JSON body")
    error: str = Field(default="GatewayError", description="Error class name")


@dataclass(frozen=True)
class SearchResult:
    """Accepted (non-stale) results of a search."""

    surface: Surface
    token: SearchToken
    entries: tuple[ResourceEntry, ...]
    page: PageDescriptor | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "surface": self.surface.value,
            "entries": [entry.to_dict() for entry in self.entries],
            "page": self.page.model_dump() if self.page else None,
        }


@dataclass(frozen=True)
class SearchFailure:
    """A search that failed at the gateway."""

    surface: Surface
    token: SearchToken
    error: ErrorPayload
    stale: bool = False
