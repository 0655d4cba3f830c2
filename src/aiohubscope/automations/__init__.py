"""Automation draft validation, compilation, entity extraction and scoping."""

from .authorizer import (
    authorize_edit,
    authorize_manage,
    authorize_write,
    can_edit,
    is_allowed,
    is_visible,
)
from .compiler import (
    COMMAND_SERVICES,
    DEFAULT_DESCRIPTION,
    DEFAULT_ID_PREFIX,
    compile_draft,
    make_automation_id,
    normalize_time,
)
from .extractor import (
    TARGETED_SERVICES,
    extract_entities,
    is_context_only_template,
    is_targeted_service,
    is_template,
)
from .service import AutomationService
from .validator import check_capabilities, validate_draft

__all__ = [
    "COMMAND_SERVICES",
    "DEFAULT_DESCRIPTION",
    "DEFAULT_ID_PREFIX",
    "TARGETED_SERVICES",
    "AutomationService",
    "authorize_edit",
    "authorize_manage",
    "authorize_write",
    "can_edit",
    "check_capabilities",
    "compile_draft",
    "extract_entities",
    "is_allowed",
    "is_context_only_template",
    "is_targeted_service",
    "is_template",
    "is_visible",
    "make_automation_id",
    "normalize_time",
    "validate_draft",
]
