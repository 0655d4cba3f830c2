"""Device snapshot model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

OTHER_LABEL = "Other"


class Device(BaseModel):
    """A single entity from the hub's device snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    entity_id: str = Field(alias="entityId")
    domain: str = ""
    area: str | None = Field(default=None, validation_alias=AliasChoices("area", "areaName"))
    attributes: dict[str, Any] = Field(default_factory=dict)
    label: str | None = None
    labels: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _derive_domain(self) -> Device:
        if not self.domain and "." in self.entity_id:
            self.domain = self.entity_id.split(".", 1)[0]
        return self

    @property
    def primary_label(self) -> str:
        """Explicit label, else the first assigned label, else ``Other``."""
        if self.label and self.label.strip():
            return self.label.strip()
        for label in self.labels[:1]:
            if label and label.strip():
                return label.strip()
        return OTHER_LABEL
