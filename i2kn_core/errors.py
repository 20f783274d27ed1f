"""
i2kn_core.errors
----------------
Exception taxonomy for the record store.

Structural problems (no identity, missing file, malformed input) are raised.
Trust problems (bad signature, CID mismatch, undecryptable-but-well-formed
ciphertext) are never raised; they surface as flags on LoadResult.
Plain OSError from the filesystem is propagated unchanged.
"""

from __future__ import annotations


class I2knError(Exception):
    pass


class UninitializedError(I2knError):
    """Operation attempted before the node identity was set up."""


class AlreadyInitializedError(I2knError):
    pass


class NotFoundError(I2knError, LookupError):
    """No envelope or clear file is stored under the requested name."""

    def __init__(self, name: str):
        super().__init__(f"nothing stored under {name!r}")
        self.name = name


class EncodingError(I2knError):
    """Input cannot be canonicalized (unsupported type, bad JSON, bad CID)."""


class DecryptionError(I2knError):
    pass


class KeyMaterialError(I2knError):
    """The supplied private key cannot be loaded or used."""


class EnvelopeFormatError(I2knError):
    pass


class RecordExistsError(I2knError):
    """A different envelope is already stored under this CID."""

    def __init__(self, cid: str, stored_prev, requested_prev):
        super().__init__(
            f"{cid} is already stored with cidPrev={stored_prev!r}, not {requested_prev!r}"
        )
        self.cid = cid
        self.stored_prev = stored_prev
        self.requested_prev = requested_prev


class StorageKeyError(I2knError, ValueError):
    pass


# I/O failures are not wrapped
FilesystemError = OSError
