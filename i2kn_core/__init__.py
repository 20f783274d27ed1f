"""
i2kn Core Package
=================
Persistence and integrity layer of an i2kn knowledge-sharing node.

Provides:
- Canonical record encoding and CIDv1 content identifiers
- AES-256-CTR record encryption and RSA/Ed25519/ECDSA signatures
- Peer identity derived from public keys
- Envelope store on the local filesystem, with previous-CID chaining
"""
