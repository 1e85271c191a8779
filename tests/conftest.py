"""Shared test fixtures for all test modules."""

import os
from pathlib import Path
from textwrap import dedent
from typing import Optional

import pytest


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """
    Keep the user's real configuration out of every test.

    LOGQUARTZ_* variables are removed, the default config file points at a
    path that doesn't exist, and the JSON log goes to the test's tmp dir.
    """
    for name in list(os.environ):
        if name.startswith("LOGQUARTZ_"):
            monkeypatch.delenv(name)

    monkeypatch.setattr("logquartz.config.DEFAULT_CONFIG_PATH", tmp_path / "no-config.yaml")
    monkeypatch.setattr("logquartz.utils.logging.DEFAULT_LOG_FILE", tmp_path / "logs" / "logquartz.log")


@pytest.fixture
def make_graph(tmp_path):
    """
    Factory writing a Logseq graph under ``tmp_path/graph``.

    ``make_graph({"pages/Dune.md": "tags:: book\\n- A desert planet"})``
    writes each file (text is dedented) and returns the graph root.
    ``pages/`` and ``journals/`` always exist.
    """

    def make(files: dict[str, str], config_edn: Optional[str] = None) -> Path:
        root = tmp_path / "graph"
        (root / "pages").mkdir(parents=True, exist_ok=True)
        (root / "journals").mkdir(exist_ok=True)

        for rel_path, text in files.items():
            path = root / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(dedent(text).lstrip("\n"), encoding="utf-8")

        if config_edn is not None:
            (root / "logseq").mkdir(exist_ok=True)
            (root / "logseq" / "config.edn").write_text(dedent(config_edn), encoding="utf-8")

        return root

    return make
