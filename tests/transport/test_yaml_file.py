"""Tests for YamlFileTransport."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from aiohubscope.exceptions import (
    AutomationNotFoundError,
    PathSecurityError,
    TransportError,
    YAMLParseError,
)
from aiohubscope.models import AutomationConfig
from aiohubscope.transport import YamlFileTransport

EXISTING = """\
- id: 'test_auto'
  alias: Test Automation
  trigger:
    - platform: state
      entity_id: binary_sensor.door
  action:
    - service: light.turn_on
      target:
        entity_id: light.hall
- id: 'sleeping'
  alias: Sleeping
  initial_state: false
  triggers: []
  actions: []
- alias: No id
  triggers: []
  actions: []
"""


@pytest.fixture
def tmp_config_dir(tmp_path: Path) -> Path:
    (tmp_path / "automations.yaml").write_text(EXISTING)
    return tmp_path


@pytest.fixture
def file_transport(tmp_config_dir: Path) -> YamlFileTransport:
    return YamlFileTransport(tmp_config_dir)


def _read(path: Path) -> list[dict]:
    return yaml.safe_load((path / "automations.yaml").read_text())


class TestPathSecurity:
    def test_default_file(self, file_transport: YamlFileTransport, tmp_config_dir: Path) -> None:
        assert file_transport.path == tmp_config_dir / "automations.yaml"

    def test_leading_slash_stripped(self, tmp_config_dir: Path) -> None:
        transport = YamlFileTransport(tmp_config_dir, filename="/automations.yaml")
        assert transport.path == tmp_config_dir / "automations.yaml"

    @pytest.mark.parametrize("filename", ["../../etc/passwd", "sub/../..", "", "/", "."])
    def test_traversal_blocked(self, tmp_config_dir: Path, filename: str) -> None:
        with pytest.raises(PathSecurityError):
            YamlFileTransport(tmp_config_dir, filename=filename)


class TestRead:
    async def test_list(self, file_transport: YamlFileTransport) -> None:
        automations = {a.config.id: a for a in await file_transport.list_automations()}
        assert set(automations) == {"test_auto", "sleeping"}
        assert automations["test_auto"].enabled is True
        assert automations["sleeping"].enabled is False
        assert automations["test_auto"].config.actions == [
            {"service": "light.turn_on", "target": {"entity_id": "light.hall"}}
        ]

    async def test_missing_file(self, tmp_path: Path) -> None:
        assert await YamlFileTransport(tmp_path).list_automations() == []

    async def test_empty_file(self, tmp_path: Path) -> None:
        (tmp_path / "automations.yaml").write_text("")
        assert await YamlFileTransport(tmp_path).list_automations() == []

    async def test_invalid_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "automations.yaml").write_text("- id: [unclosed\n")
        with pytest.raises(YAMLParseError):
            await YamlFileTransport(tmp_path).list_automations()

    async def test_not_a_list(self, tmp_path: Path) -> None:
        (tmp_path / "automations.yaml").write_text("automation: {}\n")
        with pytest.raises(YAMLParseError):
            await YamlFileTransport(tmp_path).list_automations()

    async def test_get_missing(self, file_transport: YamlFileTransport) -> None:
        with pytest.raises(AutomationNotFoundError):
            await file_transport.get_automation("ghost")


class TestWrite:
    async def test_create(self, file_transport: YamlFileTransport, tmp_config_dir: Path) -> None:
        config = AutomationConfig(
            id="portal_1",
            alias="Nieuw licht",
            triggers=[{"trigger": "time", "at": "07:00:00"}],
            actions=[{"action": "light.turn_on", "target": {"entity_id": "light.hall"}}],
        )
        assert await file_transport.create(config) == "portal_1"
        items = _read(tmp_config_dir)
        assert [item.get("id") for item in items] == ["test_auto", "sleeping", None, "portal_1"]
        assert items[-1]["triggers"] == [{"trigger": "time", "at": "07:00:00"}]

    async def test_create_duplicate(self, file_transport: YamlFileTransport) -> None:
        with pytest.raises(TransportError) as exc_info:
            await file_transport.create(AutomationConfig(id="test_auto"))
        assert exc_info.value.status == 409

    async def test_create_in_new_directory(self, tmp_path: Path) -> None:
        transport = YamlFileTransport(tmp_path, filename="automations/portal.yaml")
        await transport.create(AutomationConfig(id="a", alias="A"))
        assert (tmp_path / "automations" / "portal.yaml").exists()

    async def test_update_keeps_initial_state(
        self, file_transport: YamlFileTransport, tmp_config_dir: Path
    ) -> None:
        await file_transport.update("sleeping", AutomationConfig(id="ignored", alias="Renamed"))
        (item,) = [i for i in _read(tmp_config_dir) if i.get("id") == "sleeping"]
        assert item["alias"] == "Renamed"
        assert item["initial_state"] is False

    async def test_update_missing(self, file_transport: YamlFileTransport) -> None:
        with pytest.raises(AutomationNotFoundError):
            await file_transport.update("ghost", AutomationConfig(id="ghost"))

    async def test_delete(self, file_transport: YamlFileTransport, tmp_config_dir: Path) -> None:
        await file_transport.delete("test_auto")
        assert "test_auto" not in [i.get("id") for i in _read(tmp_config_dir)]
        await file_transport.delete("sleeping")
        assert [i.get("alias") for i in _read(tmp_config_dir)] == ["No id"]

    async def test_delete_missing(self, file_transport: YamlFileTransport) -> None:
        with pytest.raises(AutomationNotFoundError):
            await file_transport.delete("ghost")

    async def test_set_enabled(self, file_transport: YamlFileTransport) -> None:
        await file_transport.set_enabled("sleeping", True)
        assert (await file_transport.get_automation("sleeping")).enabled is True
        await file_transport.set_enabled("test_auto", False)
        assert (await file_transport.get_automation("test_auto")).enabled is False
