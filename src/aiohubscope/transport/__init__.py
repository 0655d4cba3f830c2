"""Hub transports."""

from .base import HubTransport
from .rest import RestHubTransport
from .yaml_file import YamlFileTransport

__all__ = ["HubTransport", "RestHubTransport", "YamlFileTransport"]
