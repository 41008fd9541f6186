"""Known esplora-tapyrus releases and where their archives live."""

SUPPORTED_VERSIONS: tuple[str, ...] = ("v0.5.0", "v0.5.1")

PLATFORM = "x86_64-unknown-linux-gnu"


def is_supported(version: str) -> bool:
    return version in SUPPORTED_VERSIONS


def electrs_name(version: str) -> str:
    return f"esplora-tapyrus-{version}-{PLATFORM}"


def archive_name(version: str) -> str:
    return f"{electrs_name(version)}.tar.gz"


def download_url(version: str, endpoint: str) -> str:
    return f"{endpoint.rstrip('/')}/{version}/{archive_name(version)}"
