"""aiohubscope: async Python library for scoped smart-home hub automations."""

from ._version import __version__
from .automations import (
    AutomationService,
    can_edit,
    check_capabilities,
    compile_draft,
    extract_entities,
    is_allowed,
    validate_draft,
)
from .capabilities import CapabilityRegistry, DeviceClass, default_registry
from .exceptions import (
    AuthorizationError,
    AutomationNotFoundError,
    CompilerInvariantError,
    DraftValidationError,
    HubScopeError,
    PathSecurityError,
    TransportError,
    YAMLParseError,
)
from .models import (
    AllowedEntitySet,
    AutomationConfig,
    AutomationDraft,
    AutomationListItem,
    Device,
    EntityReferenceSet,
    HubAutomation,
    Role,
)
from .transport import HubTransport, RestHubTransport, YamlFileTransport

__all__ = [
    "AllowedEntitySet",
    "AuthorizationError",
    "AutomationConfig",
    "AutomationDraft",
    "AutomationListItem",
    "AutomationNotFoundError",
    "AutomationService",
    "CapabilityRegistry",
    "CompilerInvariantError",
    "Device",
    "DeviceClass",
    "DraftValidationError",
    "EntityReferenceSet",
    "HubAutomation",
    "HubScopeError",
    "HubTransport",
    "PathSecurityError",
    "RestHubTransport",
    "Role",
    "TransportError",
    "YAMLParseError",
    "YamlFileTransport",
    "__version__",
    "can_edit",
    "check_capabilities",
    "compile_draft",
    "default_registry",
    "extract_entities",
    "is_allowed",
    "validate_draft",
]
