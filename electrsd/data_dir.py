from __future__ import annotations

import tempfile
from dataclasses import dataclass
from pathlib import Path

from electrsd.conf import Conf
from electrsd.errors import BothDirsSpecified

TEMPDIR_PREFIX = "electrsd-"


@dataclass(frozen=True, slots=True)
class Persistent:
    """Caller-owned directory, left in place when electrs stops."""
    dir: Path

    @property
    def path(self) -> Path:
        return self.dir

    def cleanup(self) -> None:
        ...


@dataclass(frozen=True, slots=True, eq=False)
class Temporary:
    """Directory owned by the harness, removed on disposal."""
    handle: tempfile.TemporaryDirectory[str]

    @property
    def path(self) -> Path:
        return Path(self.handle.name)

    def cleanup(self) -> None:
        self.handle.cleanup()


type DataDir = Persistent | Temporary


def resolve_data_dir(conf: Conf, tempdir_root: Path | None = None) -> DataDir:
    """
    Pick and create the electrs work directory for one launch attempt.

    `tempdir_root` is the TEMPDIR_ROOT override, only used when the conf
    names neither directory.
    """
    match conf.tmpdir, conf.staticdir:
        case None, None:
            return _temporary_in(tempdir_root)

        case tmpdir, None:
            return _temporary_in(Path(tmpdir))

        case None, staticdir:
            staticdir = Path(staticdir)
            staticdir.mkdir(parents=True, exist_ok=True)
            return Persistent(staticdir)

        case tmpdir, staticdir:
            raise BothDirsSpecified(tmpdir, staticdir)


def _temporary_in(root: Path | None) -> Temporary:
    handle = tempfile.TemporaryDirectory(
        prefix=TEMPDIR_PREFIX,
        dir=root,
        ignore_cleanup_errors=True,
    )
    return Temporary(handle)
