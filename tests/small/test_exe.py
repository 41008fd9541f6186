import stat
from pathlib import Path

import pytest

from electrsd import versions
from electrsd.config import GITHUB_URL, Settings
from electrsd.errors import BothEnvVars, NoElectrsExecutableFound
from electrsd.exe import downloaded_exe_path, exe_path


def _make_executable(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return path


def test_settings_from_env(tmp_path: Path):
    """
    Settings mirror the environment variables
    """
    settings = Settings.from_env({
        "ELECTRSD_SKIP_DOWNLOAD": "1",
        "ELECTRSD_DOWNLOAD_ENDPOINT": "http://mirror.local/releases",
        "ELECTRSD_VERSION": "v0.5.1",
        "ELECTRS_EXEC": "/opt/electrs",
        "TEMPDIR_ROOT": str(tmp_path),
    })

    assert settings.skip_download
    assert settings.download_endpoint == "http://mirror.local/releases"
    assert settings.version == "v0.5.1"
    assert settings.electrs_exec == "/opt/electrs"
    assert settings.electrs_exe is None
    assert settings.tempdir_root == tmp_path


def test_settings_defaults():
    settings = Settings.from_env({})

    assert not settings.skip_download
    assert settings.download_endpoint == GITHUB_URL
    assert settings.version is None
    assert settings.tempdir_root is None


def test_both_env_vars():
    """
    ELECTRS_EXEC and ELECTRS_EXE together are rejected
    """
    settings = Settings(electrs_exec="placeholder", electrs_exe="placeholder")

    with pytest.raises(BothEnvVars):
        exe_path(settings)


@pytest.mark.parametrize("field", ["electrs_exec", "electrs_exe"])
def test_env_override_wins(field: str):
    settings = Settings(**{field: "/somewhere/electrs"})
    assert exe_path(settings) == "/somewhere/electrs"


def test_path_lookup(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """
    Without overrides the executable is searched in PATH
    """
    exe = _make_executable(tmp_path / "bin" / "electrs")
    monkeypatch.setenv("PATH", str(exe.parent))

    assert Path(exe_path(Settings())) == exe


def test_nothing_found(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PATH", str(tmp_path))

    with pytest.raises(NoElectrsExecutableFound):
        exe_path(Settings())


def test_downloaded_exe_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """
    A selected version resolves inside the cache dir and is preferred over PATH when present
    """
    settings = Settings(version="v0.5.1", cache_dir=tmp_path)
    expected = tmp_path / "electrs" / "esplora-tapyrus-v0.5.1-x86_64-unknown-linux-gnu" / "electrs"
    assert downloaded_exe_path(settings) == expected

    _make_executable(expected)
    monkeypatch.setenv("PATH", str(tmp_path / "empty"))
    assert exe_path(settings) == str(expected)


def test_downloaded_exe_path_skipped():
    """
    Skip switch, missing or unknown versions disable the downloaded executable
    """
    assert downloaded_exe_path(Settings(version="v0.5.1", skip_download=True)) is None
    assert downloaded_exe_path(Settings()) is None
    assert downloaded_exe_path(Settings(version="v9.9.9")) is None


def test_download_url():
    url = versions.download_url("v0.5.0", "https://example.com/releases/")
    assert url == "https://example.com/releases/v0.5.0/esplora-tapyrus-v0.5.0-x86_64-unknown-linux-gnu.tar.gz"
