from __future__ import annotations

import os

import pytest

from discovery_cli import config


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path, monkeypatch):
    def _config_dir(_: str) -> str:
        return str(tmp_path)

    monkeypatch.setattr(config, "user_config_dir", _config_dir)
    for key in list(os.environ):
        if key.startswith("DISCOVERY_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("IBM_CREDENTIALS_FILE", str(tmp_path / "missing.env"))
