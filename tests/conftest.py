import stat
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from electrsd.config import Settings
from electrsd.logging_config import setup_structured_logging
from tests.fixtures.fake_node import FakeNode

FIXTURES = Path(__file__).resolve().parent / "fixtures"


def pytest_configure(config: pytest.Config) -> None:
    setup_structured_logging(log_level=config.getoption("log_level") or "INFO")


@pytest.fixture(scope="session")
def fake_electrs_exe(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """
    Executable wrapper running the fake electrs with the interpreter running the tests.
    """
    if sys.platform.startswith("win"):
        pytest.skip("fake electrs wrapper needs a POSIX shell")

    wrapper = tmp_path_factory.mktemp("fake-electrs") / "electrs"
    wrapper.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{FIXTURES / "fake_electrs.py"}" "$@"\n')
    wrapper.chmod(wrapper.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return wrapper


@pytest.fixture()
def node(tmp_path: Path) -> Iterator[FakeNode]:
    fake = FakeNode(tmp_path / "node")
    fake.client.call("generatetoaddress", [1, "addr0"])
    yield fake
    fake.stop()


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the developer's environment, temp dirs kept under tmp_path."""
    root = tmp_path / "tempdir-root"
    root.mkdir()
    return Settings(tempdir_root=root, skip_download=True)


@pytest.fixture()
def args_log(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    log = tmp_path / "electrs-args.jsonl"
    monkeypatch.setenv("FAKE_ELECTRS_ARGS_LOG", str(log))
    return log
