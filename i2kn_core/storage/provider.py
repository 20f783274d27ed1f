# i2kn_core/storage/provider.py
from __future__ import annotations
from typing import Dict, List

from i2kn_core.errors import StorageKeyError


def check_name(name: str) -> str:
    """Storage names are flat: no separators, no parent references."""
    if not isinstance(name, str) or not name or name in (".", ".."):
        raise StorageKeyError(f"invalid storage name: {name!r}")
    if "/" in name or "\\" in name or "\x00" in name or ".." in name:
        raise StorageKeyError(f"invalid storage name: {name!r}")
    return name


class StorageProvider:
    """
    Flat name -> UTF-8 text store rooted at one node directory.

    write_new never replaces an existing name; it raises FileExistsError.
    Missing names raise NotFoundError; other I/O errors propagate as OSError.
    """
    root: str = ""

    def create_root(self, bootstrap: Dict[str, str]) -> bool: ...
    def root_exists(self) -> bool: ...
    def exists(self, name: str) -> bool: ...
    def read_text(self, name: str) -> str: ...
    def write_text(self, name: str, data: str) -> None: ...
    def write_new(self, name: str, data: str) -> None: ...
    def list_names(self) -> List[str]: ...
    def erase_root(self) -> None: ...
