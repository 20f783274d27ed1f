"""
i2kn_core.store
---------------
Record store: content-addressed, encrypted and signed envelopes on top of a
StorageProvider.

save:  canonicalize -> CID -> embed cid -> encrypt -> sign -> write envelope
load:  read envelope -> signer id from byPubkey -> decrypt -> verify sig
       -> recompute CID -> LoadResult

An envelope is never rewritten once stored under its CID.

Nothing about trust is cached. Every load recomputes the signer identity,
the signature check and the CID check from the stored bytes.
"""

from __future__ import annotations
from typing import Any, List, Mapping, Optional, Union

from . import crypto
from .canonical import parse_record
from .cid import compute_cid, is_cid, parse_cid
from .envelope import Envelope
from .errors import (
    EncodingError, EnvelopeFormatError, NotFoundError, RecordExistsError, StorageKeyError,
)
from .identity import identity_from_public_key
from .logger import get_logger
from .node import NodeContext
from .storage import LoadResult
from .utils import compact_json

log = get_logger("i2kn.store")

RecordInput = Union[str, bytes, Mapping[str, Any]]


class RecordStore:
    def __init__(self, ctx: NodeContext):
        self.ctx = ctx

    @property
    def storage(self):
        return self.ctx.storage

    # ------------------------------------------------------------------
    # Encrypted, content-addressed records
    # ------------------------------------------------------------------
    def save(self, record: RecordInput, previous_cid: Optional[str] = None) -> str:
        if previous_cid is not None:
            parse_cid(previous_cid)

        item = dict(record) if isinstance(record, Mapping) else parse_record(record)
        cid = compute_cid(item)
        item["cid"] = cid
        try:
            plaintext = compact_json(item).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise EncodingError(f"record is not serializable: {e}") from e

        nonce, ciphertext = self.ctx.cipher.encrypt(plaintext)
        signature = crypto.sign(self.ctx.identity.private_key, plaintext)

        env = Envelope.seal(
            ciphertext=ciphertext,
            public_key=self.ctx.identity.public_key_bytes,
            signature=signature,
            cid_prev=previous_cid,
            nonce=nonce,
        )
        try:
            self.storage.write_new(cid, env.to_json())
        except FileExistsError:
            return self._existing(cid, previous_cid)
        log.info({"event": "record_saved", "cid": cid, "cid_prev": previous_cid,
                  "bytes": len(ciphertext), "nonce": self.ctx.cipher.strategy.name})
        return cid

    def _existing(self, cid: str, previous_cid: Optional[str]) -> str:
        # envelopes are immutable: same content and link is a no-op, a new link is refused
        stored = self.read_envelope(cid)
        if stored.cid_prev != previous_cid:
            raise RecordExistsError(cid, stored.cid_prev, previous_cid)
        log.info({"event": "record_unchanged", "cid": cid, "cid_prev": previous_cid})
        return cid

    def read_envelope(self, cid: str) -> Envelope:
        try:
            text = self.storage.read_text(cid)
        except UnicodeDecodeError as e:
            raise EnvelopeFormatError(f"envelope {cid} is not UTF-8: {e}") from e
        return Envelope.from_json(text)

    def load(self, cid: str) -> LoadResult:
        env = self.read_envelope(cid)

        pubkey = env.public_key()
        signer = identity_from_public_key(pubkey)

        plaintext = self.ctx.cipher.decrypt(env.ciphertext(), env.nonce_bytes())

        sig_ok = crypto.verify(pubkey, env.signature(), plaintext)
        cid_ok = self._recomputed_cid(plaintext) == cid

        result = LoadResult(
            plaintext=plaintext.decode("utf-8", errors="replace"),
            previous_cid=env.cid_prev,
            signer_identity=signer,
            signature_valid=sig_ok,
            cid_valid=cid_ok,
        )
        log.info({"event": "record_loaded", "cid": cid, "by": signer,
                  "sig_ok": sig_ok, "cid_ok": cid_ok})
        if not result.verified:
            log.warning(f"record {cid} failed verification (sig_ok={sig_ok}, cid_ok={cid_ok})")
        return result

    @staticmethod
    def _recomputed_cid(plaintext: bytes) -> Optional[str]:
        # garbage from a foreign key is expected here; it just fails to match
        try:
            item = parse_record(plaintext.decode("utf-8"))
            return compute_cid(item)
        except (UnicodeDecodeError, EncodingError):
            return None

    def exists(self, cid: str) -> bool:
        return self.storage.exists(cid)

    def list_cids(self) -> List[str]:
        return [name for name in self.storage.list_names() if is_cid(name)]

    def history(self, cid: str, limit: Optional[int] = None) -> List[LoadResult]:
        """
        Follow previous-CID links from `cid` towards the chain root, newest first.

        Stops at `limit`, at a predecessor that is not stored, or at the
        first CID seen twice.
        """
        chain: List[LoadResult] = []
        seen = set()
        current: Optional[str] = cid
        while current is not None:
            if limit is not None and len(chain) >= limit:
                break
            if current in seen:
                log.warning(f"cycle in record chain at {current}")
                break
            seen.add(current)
            try:
                result = self.load(current)
            except NotFoundError:
                if not chain:
                    raise
                log.warning(f"chain from {cid} broken: {current} is not stored")
                break
            chain.append(result)
            current = result.previous_cid
        return chain

    # ------------------------------------------------------------------
    # Clear files (no encryption, no verification)
    # ------------------------------------------------------------------
    def save_clear(self, name: str, content: str) -> None:
        if is_cid(name):
            raise StorageKeyError(f"{name!r} is a CID; clear files cannot use envelope names")
        self.storage.write_text(name, content)

    def load_clear(self, name: str) -> str:
        return self.storage.read_text(name)

    def erase_dir(self) -> None:
        self.storage.erase_root()
