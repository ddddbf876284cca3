"""Shared pytest fixtures for Chotko tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from chotko.config import Config
from chotko.dashboard.model import DashboardModel
from chotko.ignores import IgnoreList
from chotko.zabbix.client import ZabbixClient


@pytest.fixture
def session() -> MagicMock:
    """A mocked ``requests.Session``."""
    return MagicMock()


@pytest.fixture
def client(session: MagicMock) -> ZabbixClient:
    return ZabbixClient("https://zabbix.example.com", session=session)


@pytest.fixture
def config() -> Config:
    cfg = Config()
    cfg.server.url = "https://zabbix.example.com"
    cfg.auth.token = "secret-token"
    return cfg


@pytest.fixture
def ignores(tmp_path: Path) -> IgnoreList:
    return IgnoreList(tmp_path / "ignores.yaml")


@pytest.fixture
def model(config: Config, ignores: IgnoreList) -> DashboardModel:
    m = DashboardModel(config, ignores=ignores)
    m.set_size(120, 40)
    return m


@pytest.fixture
def connected_model(model: DashboardModel) -> DashboardModel:
    """Model that has finished connecting, with a mocked client."""
    model.client = MagicMock(spec=ZabbixClient)
    model.connected = True
    model.version = "7.0.0"
    return model
