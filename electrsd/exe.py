import shutil
from pathlib import Path

from electrsd import versions
from electrsd.config import Settings
from electrsd.errors import BothEnvVars, NoElectrsExecutableFound
from electrsd.logging_config import get_logger

log = get_logger(__name__)

EXECUTABLE_NAME = "electrs"


def downloaded_exe_path(settings: Settings) -> Path | None:
    """
    Path of the electrs binary unpacked from a release archive, if a supported
    version is selected and downloads are not skipped.

    Fetching the archive is left to the caller; this only resolves
    `<cache_dir>/electrs/<release name>/electrs`.
    """
    if settings.skip_download or settings.version is None:
        return None

    if not versions.is_supported(settings.version):
        log.warning(
            "Unsupported electrs version requested",
            version=settings.version,
            supported=list(versions.SUPPORTED_VERSIONS),
        )
        return None

    return (
        settings.resolved_cache_dir()
        / EXECUTABLE_NAME
        / versions.electrs_name(settings.version)
        / EXECUTABLE_NAME
    )


def exe_path(settings: Settings | None = None) -> str:
    """
    Locate the electrs executable, in order of precedence:

    1. ELECTRS_EXEC or ELECTRS_EXE (error if both are set)
    2. the downloaded release selected by ELECTRSD_VERSION, when present on disk
    3. `electrs` in PATH
    """
    if settings is None:
        settings = Settings.from_env()

    if settings.electrs_exec is not None and settings.electrs_exe is not None:
        raise BothEnvVars()

    if settings.electrs_exec is not None:
        return settings.electrs_exec

    if settings.electrs_exe is not None:
        return settings.electrs_exe

    downloaded = downloaded_exe_path(settings)
    if downloaded is not None:
        if downloaded.exists():
            return str(downloaded)

        log.warning(
            "Downloaded electrs not found, falling back to PATH",
            expected_path=str(downloaded),
            download_url=versions.download_url(settings.version or "", settings.download_endpoint),
        )

    found = shutil.which(EXECUTABLE_NAME)
    if found is None:
        raise NoElectrsExecutableFound()

    return found
