from typing import Dict, List, Optional
import errno

from i2kn_core.errors import NotFoundError
from i2kn_core.storage.provider import StorageProvider, check_name


class InMemoryStorage(StorageProvider):
    def __init__(self, root: str = "memory"):
        self.root = root
        self.files: Optional[Dict[str, str]] = None

    def _require_root(self):
        if self.files is None:
            raise FileNotFoundError(errno.ENOENT, "repo does not exist", self.root)
        return self.files

    def root_exists(self) -> bool:
        return self.files is not None

    def create_root(self, bootstrap: Dict[str, str]) -> bool:
        if self.files is not None:
            return False
        self.files = dict(bootstrap)
        return True

    def exists(self, name: str) -> bool:
        return self.files is not None and check_name(name) in self.files

    def read_text(self, name: str) -> str:
        files = self._require_root()
        try:
            return files[check_name(name)]
        except KeyError:
            raise NotFoundError(name) from None

    def write_text(self, name: str, data: str) -> None:
        self._require_root()[check_name(name)] = data

    def write_new(self, name: str, data: str) -> None:
        files = self._require_root()
        if check_name(name) in files:
            raise FileExistsError(errno.EEXIST, "already stored", name)
        files[name] = data

    def list_names(self) -> List[str]:
        return sorted(self.files or {})

    def erase_root(self) -> None:
        files = self._require_root()
        if files:
            raise OSError(errno.ENOTEMPTY, "repo is not empty", self.root)
        self.files = None
