"""Scope authorization over extracted entity references."""

from __future__ import annotations

import logging

from ..exceptions import AuthorizationError
from ..models.scope import AllowedEntitySet, EntityReferenceSet

logger = logging.getLogger(__name__)

OUT_OF_SCOPE_MESSAGE = "This automation involves devices outside your areas or uses templates."
NO_ACCESS_MESSAGE = "You do not have permission to manage automations."


def is_allowed(refs: EntityReferenceSet, allowed: AllowedEntitySet) -> bool:
    """True iff every referenced entity is inside *allowed*."""
    return refs.all_entities <= allowed.entities


def can_edit(refs: EntityReferenceSet, allowed: AllowedEntitySet) -> bool:
    """True iff the config is in scope and fully analyzable.

    A templated config may touch entities extraction could not see, so it
    is never editable, whatever the caller's scope.
    """
    return is_allowed(refs, allowed) and not refs.has_templates


def is_visible(refs: EntityReferenceSet, allowed: AllowedEntitySet) -> bool:
    """Admins see every config; tenants see those whose known references are theirs."""
    return allowed.is_admin or is_allowed(refs, allowed)


def authorize_write(refs: EntityReferenceSet, allowed: AllowedEntitySet) -> None:
    """Raise :class:`AuthorizationError` unless *refs* fit inside *allowed*."""
    if not is_allowed(refs, allowed):
        logger.warning(
            "Denied automation write: %d referenced entities outside %s scope",
            len(refs.all_entities - allowed.entities),
            allowed.role,
        )
        raise AuthorizationError(OUT_OF_SCOPE_MESSAGE)


def authorize_edit(refs: EntityReferenceSet, allowed: AllowedEntitySet) -> None:
    """Raise :class:`AuthorizationError` unless the caller may change this config."""
    if not can_edit(refs, allowed):
        logger.warning(
            "Denied automation edit for %s scope (templated=%s)", allowed.role, refs.has_templates
        )
        raise AuthorizationError(OUT_OF_SCOPE_MESSAGE)


def authorize_manage(allowed: AllowedEntitySet) -> None:
    """Refuse tenants that hold no entity at all before any hub call."""
    if not allowed.is_admin and not allowed.entities:
        logger.warning("Denied automation management for tenant without granted areas")
        raise AuthorizationError(NO_ACCESS_MESSAGE)
