from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

SKIP_DOWNLOAD_VAR = "ELECTRSD_SKIP_DOWNLOAD"
DOWNLOAD_ENDPOINT_VAR = "ELECTRSD_DOWNLOAD_ENDPOINT"
VERSION_VAR = "ELECTRSD_VERSION"
CACHE_DIR_VAR = "ELECTRSD_CACHE_DIR"
EXEC_VAR = "ELECTRS_EXEC"
EXE_VAR = "ELECTRS_EXE"
TEMPDIR_ROOT_VAR = "TEMPDIR_ROOT"

GITHUB_URL = "https://github.com/chaintope/esplora-tapyrus/releases/download"


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Process-wide switches normally taken from the environment.

    Read once at the boundary with `Settings.from_env()` and passed down
    explicitly, so nothing below this layer touches `os.environ`.
    """
    skip_download: bool = False
    download_endpoint: str = GITHUB_URL
    version: str | None = None
    cache_dir: Path | None = None
    electrs_exec: str | None = None
    electrs_exe: str | None = None
    tempdir_root: Path | None = None

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        cache_dir = env.get(CACHE_DIR_VAR)
        tempdir_root = env.get(TEMPDIR_ROOT_VAR)
        return Settings(
            skip_download=SKIP_DOWNLOAD_VAR in env,
            download_endpoint=env.get(DOWNLOAD_ENDPOINT_VAR, GITHUB_URL),
            version=env.get(VERSION_VAR) or None,
            cache_dir=Path(cache_dir) if cache_dir else None,
            electrs_exec=env.get(EXEC_VAR),
            electrs_exe=env.get(EXE_VAR),
            tempdir_root=Path(tempdir_root) if tempdir_root else None,
        )

    def resolved_cache_dir(self) -> Path:
        if self.cache_dir is not None:
            return self.cache_dir

        return Path.home() / ".cache" / "electrsd"
