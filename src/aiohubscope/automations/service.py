"""Automation pipeline over one hub connection.

Writes run validate → compile → extract → authorize before the hub is
called; reads run extract → authorize on every listed config to annotate
it for the caller. Each call builds its state from its arguments, so one
service instance can serve concurrent requests for different callers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from ..capabilities import CapabilityRegistry, default_registry
from ..exceptions import DraftValidationError
from ..models.config import AutomationConfig, AutomationListItem
from ..models.device import Device
from ..models.draft import AutomationDraft
from ..models.scope import AllowedEntitySet
from ..transport.base import HubTransport
from .authorizer import authorize_edit, authorize_manage, authorize_write, can_edit, is_visible
from .compiler import DEFAULT_ID_PREFIX, compile_draft
from .extractor import extract_entities
from .validator import check_capabilities, validate_draft

logger = logging.getLogger(__name__)


class AutomationService:
    """Create, update, delete, toggle and list hub automations for one caller at a time."""

    def __init__(
        self,
        transport: HubTransport,
        *,
        id_prefix: str = DEFAULT_ID_PREFIX,
        registry: CapabilityRegistry | None = None,
    ) -> None:
        self.transport = transport
        self.id_prefix = id_prefix
        self.registry = registry or default_registry

    # ------------------------------------------------------------------
    # Pure pipeline
    # ------------------------------------------------------------------

    def prepare(
        self,
        raw: Any,
        allowed: AllowedEntitySet,
        *,
        existing_id: str | None = None,
        devices: Iterable[Device] | None = None,
    ) -> tuple[AutomationDraft, AutomationConfig]:
        """Validate, compile and authorize *raw* without touching the hub.

        The compiled config, not the draft, is what gets authorized, so the
        check covers exactly what would be written.
        """
        draft = validate_draft(raw)
        config = compile_draft(draft, existing_id, id_prefix=self.id_prefix)
        authorize_write(extract_entities(config), allowed)
        if devices is not None:
            check_capabilities(draft, devices, self.registry)
        return draft, config

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_automations(
        self,
        allowed: AllowedEntitySet,
        *,
        entity_id: str | None = None,
    ) -> list[AutomationListItem]:
        """List the configs *allowed* may see, annotated with ``can_edit``.

        With *entity_id*, keep only configs acting on that entity, plus
        templated configs whose action targets are unknown.
        """
        items: list[AutomationListItem] = []
        for automation in await self.transport.list_automations():
            config = automation.config
            refs = extract_entities(config)
            if not is_visible(refs, allowed):
                continue
            if entity_id is not None and not (
                entity_id in refs.action_entities
                or (not refs.action_entities and refs.has_templates)
            ):
                continue
            items.append(
                AutomationListItem(
                    id=config.id,
                    entity_id=automation.entity_id or f"automation.{config.id}",
                    alias=config.alias or automation.entity_id or config.id,
                    description=config.description or "",
                    mode=config.mode,
                    action_entities=sorted(refs.action_entities),
                    has_templates=refs.has_templates,
                    can_edit=can_edit(refs, allowed),
                    enabled=automation.enabled,
                )
            )
        logger.debug("Listed %d automations for %s scope", len(items), allowed.role)
        return items

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_automation(
        self,
        raw: Any,
        allowed: AllowedEntitySet,
        *,
        devices: Iterable[Device] | None = None,
    ) -> str:
        """Create an automation from *raw* and return its id."""
        draft, config = self.prepare(raw, allowed, devices=devices)
        automation_id = await self.transport.create(config)
        logger.info("Created automation %s", automation_id)
        if draft.enabled is not None:
            await self.transport.set_enabled(automation_id, draft.enabled)
        return automation_id

    async def update_automation(
        self,
        automation_id: str,
        raw: Any,
        allowed: AllowedEntitySet,
        *,
        devices: Iterable[Device] | None = None,
    ) -> str:
        """Replace automation *automation_id* with the compiled *raw* draft.

        Both the new config and the one it overwrites must be editable by
        the caller.
        """
        if not automation_id:
            raise DraftValidationError("Missing automation id")
        draft, config = self.prepare(raw, allowed, existing_id=automation_id, devices=devices)
        existing = await self.transport.get_automation(config.id)
        authorize_edit(extract_entities(existing.config), allowed)

        await self.transport.update(config.id, config)
        logger.info("Updated automation %s", config.id)
        if draft.enabled is not None:
            await self.transport.set_enabled(config.id, draft.enabled)
        return config.id

    async def delete_automation(self, automation_id: str, allowed: AllowedEntitySet) -> None:
        """Delete *automation_id* if the caller may edit it."""
        if not automation_id:
            raise DraftValidationError("Missing automation id")
        authorize_manage(allowed)
        existing = await self.transport.get_automation(automation_id)
        authorize_edit(extract_entities(existing.config), allowed)

        await self.transport.delete(automation_id)
        logger.info("Deleted automation %s", automation_id)

    async def set_enabled(
        self, automation_id: str, enabled: bool, allowed: AllowedEntitySet
    ) -> None:
        """Enable or disable *automation_id* if the caller may edit it."""
        if not automation_id:
            raise DraftValidationError("Missing automation id")
        if not isinstance(enabled, bool):
            raise DraftValidationError("enabled must be provided as boolean")
        authorize_manage(allowed)
        existing = await self.transport.get_automation(automation_id)
        authorize_edit(extract_entities(existing.config), allowed)

        await self.transport.set_enabled(automation_id, enabled)
        logger.info("%s automation %s", "Enabled" if enabled else "Disabled", automation_id)
