"""Access-scope models: who may touch which entities."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from .device import Device


class Role(StrEnum):
    """Caller role on a hub connection."""

    ADMIN = "admin"
    TENANT = "tenant"


class AllowedEntitySet(BaseModel):
    """Entities one caller may read or act upon for one request."""

    model_config = ConfigDict(frozen=True)

    role: Role
    entities: frozenset[str] = frozenset()

    @classmethod
    def for_admin(cls, devices: Iterable[Device]) -> AllowedEntitySet:
        """Every entity in the snapshot."""
        return cls(role=Role.ADMIN, entities=frozenset(d.entity_id for d in devices))

    @classmethod
    def for_tenant(cls, devices: Iterable[Device], areas: Iterable[str]) -> AllowedEntitySet:
        """Entities whose area is one of the tenant's granted *areas*."""
        granted = {area for area in areas if area}
        return cls(
            role=Role.TENANT,
            entities=frozenset(d.entity_id for d in devices if d.area and d.area in granted),
        )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self.entities


class EntityReferenceSet(BaseModel):
    """Entities an automation configuration references, per section."""

    model_config = ConfigDict(frozen=True)

    trigger_entities: frozenset[str] = frozenset()
    condition_entities: frozenset[str] = frozenset()
    action_entities: frozenset[str] = frozenset()
    has_templates: bool = False

    @property
    def all_entities(self) -> frozenset[str]:
        return self.trigger_entities | self.condition_entities | self.action_entities
