"""Draft validation.

Turns an untyped request payload into an :class:`AutomationDraft` or
rejects it outright. Nothing partially typed ever reaches the compiler.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from ..capabilities import CapabilityRegistry, default_registry
from ..exceptions import DraftValidationError
from ..models.device import Device
from ..models.draft import AutomationDraft, ScheduleTrigger

logger = logging.getLogger(__name__)


def _format_error(error: Any) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()))
    message = error.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


def validate_draft(raw: Any) -> AutomationDraft:
    """Validate *raw* into a draft.

    Raises :class:`DraftValidationError` listing every problem found.
    """
    try:
        return AutomationDraft.model_validate(raw)
    except ValidationError as exc:
        errors = [_format_error(error) for error in exc.errors()]
        logger.debug("Rejected automation draft: %s", "; ".join(errors))
        raise DraftValidationError("Invalid automation payload", errors) from exc


def check_capabilities(
    draft: AutomationDraft,
    devices: Iterable[Device],
    registry: CapabilityRegistry = default_registry,
) -> None:
    """Reject a draft whose trigger or action its devices do not offer."""
    by_id = {device.entity_id: device for device in devices}
    errors: list[str] = []

    if not isinstance(draft.trigger, ScheduleTrigger):
        device = by_id.get(draft.trigger.entity_id)
        if device is None or not registry.supports_trigger(device, draft.trigger):
            errors.append("trigger: not offered by the selected device")

    device = by_id.get(draft.action.entity_id)
    if device is None or not registry.supports_action(device, draft.action):
        errors.append("action: not offered by the selected device")

    if errors:
        logger.debug("Draft %r failed capability check: %s", draft.alias, "; ".join(errors))
        raise DraftValidationError("Automation is not supported by the selected devices", errors)
