"""Query models for attribute-equality search within a vault."""

from typing import Optional

from pydantic import BaseModel, Field, model_validator


class QueryAttribute(BaseModel):
    """A required attribute name/value pair."""

    name: str = Field(..., min_length=1)
    value: str


class Query(BaseModel):
    """Conjunction of disjunctions over indexed attributes.

    Entries sharing a name are alternatives ("name equals any of these
    values"); distinct names must all match. The single-attribute form
    ``{"index": name, "equals": value}`` is accepted as well.
    """

    index: Optional[str] = Field(None, description="Attribute name (single-attribute form)")
    equals: Optional[str] = Field(None, description="Attribute value (single-attribute form)")
    attributes: list[QueryAttribute] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "example": {
                "attributes": [
                    {"name": "CUQaxPtSLtd8L3WBAIkJ4DiVJeqoF6bdnhR7lSaPloZ", "value": "RV58Va4904K"},
                    {"name": "CUQaxPtSLtd8L3WBAIkJ4DiVJeqoF6bdnhR7lSaPloZ", "value": "Zp8Cq11aM3B"},
                ]
            }
        }
    }

    @model_validator(mode="after")
    def _check_constraints(self) -> "Query":
        if self.index is not None:
            if self.equals is None:
                raise ValueError("'equals' is required when 'index' is given")
            self.attributes.append(QueryAttribute(name=self.index, value=self.equals))
            self.index = None
            self.equals = None
        elif self.equals is not None:
            raise ValueError("'index' is required when 'equals' is given")

        if not self.attributes:
            raise ValueError("query must specify at least one attribute")
        return self

    def constraints(self) -> dict[str, set[str]]:
        """Group the required values by attribute name."""
        grouped: dict[str, set[str]] = {}
        for attribute in self.attributes:
            grouped.setdefault(attribute.name, set()).add(attribute.value)
        return grouped
