from __future__ import annotations
from pathlib import Path
from typing import Dict, List
import os, tempfile

from i2kn_core.errors import NotFoundError
from i2kn_core.logger import get_logger
from i2kn_core.storage.provider import StorageProvider, check_name

log = get_logger("i2kn.storage.fs")

TMP_PREFIX = ".tmp."


class FileSystemStorage(StorageProvider):
    def __init__(self, root: str | Path, mode: int = 0o600):
        self.path = Path(root)
        self.root = str(self.path)
        self.mode = mode

    def _file(self, name: str) -> Path:
        return self.path / check_name(name)

    def root_exists(self) -> bool:
        return self.path.is_dir()

    def create_root(self, bootstrap: Dict[str, str]) -> bool:
        if self.path.is_dir():
            return False
        self.path.mkdir(parents=True, exist_ok=True)
        for name, content in bootstrap.items():
            self.write_text(name, content)
        return True

    def exists(self, name: str) -> bool:
        return self._file(name).is_file()

    def read_text(self, name: str) -> str:
        try:
            return self._file(name).read_text(encoding="utf-8")
        except FileNotFoundError:
            raise NotFoundError(name) from None

    def _stage(self, data: str) -> str:
        fd, tmp = tempfile.mkstemp(prefix=TMP_PREFIX, dir=self.path)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp, self.mode)
        except BaseException:
            os.unlink(tmp)
            raise
        return tmp

    def write_text(self, name: str, data: str) -> None:
        # temp file + rename: a reader never sees a half-written file under `name`
        target = self._file(name)
        tmp = self._stage(data)
        try:
            os.replace(tmp, target)
        finally:
            if os.path.exists(tmp):
                os.unlink(tmp)

    def write_new(self, name: str, data: str) -> None:
        # hard link fails with FileExistsError instead of replacing `name`
        target = self._file(name)
        tmp = self._stage(data)
        try:
            os.link(tmp, target)
        finally:
            os.unlink(tmp)

    def list_names(self) -> List[str]:
        try:
            entries = list(self.path.iterdir())
        except FileNotFoundError:
            return []
        return sorted(p.name for p in entries if p.is_file() and not p.name.startswith(TMP_PREFIX))

    def erase_root(self) -> None:
        # rmdir only: a non-empty repo raises OSError instead of being wiped
        self.path.rmdir()
        log.info(f"[FS] removed repo {self.root}")
