# i2kn_core/storage/models.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional
import json


@dataclass(frozen=True)
class LoadResult:
    """
    Outcome of loading one envelope.

    The two flags are advisory: a record from another trust domain (or a
    tampered one) still loads, and the caller decides what to do with it.
    """
    plaintext: str
    previous_cid: Optional[str]
    signer_identity: str
    signature_valid: bool
    cid_valid: bool

    @property
    def verified(self) -> bool:
        return self.signature_valid and self.cid_valid

    def record(self) -> Optional[Dict[str, Any]]:
        """Parsed plaintext, or None when it is not a JSON object."""
        try:
            obj = json.loads(self.plaintext)
        except ValueError:
            return None
        return obj if isinstance(obj, dict) else None

    def to_wire(self) -> Dict[str, Any]:
        # field names used by the networking layer
        return {
            "item": self.plaintext,
            "cidPrev": self.previous_cid,
            "byPeerId": self.signer_identity,
            "sigOK": self.signature_valid,
            "cidOK": self.cid_valid,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_wire(), ensure_ascii=False)
