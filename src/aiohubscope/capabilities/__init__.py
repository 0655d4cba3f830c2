"""Device capability registry."""

from .registry import (
    EXCLUDED_DOMAINS,
    EXCLUDED_LABELS,
    TEMPERATURE_MAX,
    TEMPERATURE_MIN,
    Capability,
    CapabilityRegistry,
    DeviceClass,
    default_registry,
)

__all__ = [
    "EXCLUDED_DOMAINS",
    "EXCLUDED_LABELS",
    "TEMPERATURE_MAX",
    "TEMPERATURE_MIN",
    "Capability",
    "CapabilityRegistry",
    "DeviceClass",
    "default_registry",
]
