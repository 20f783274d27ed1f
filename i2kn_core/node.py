"""
i2kn_core.node
--------------
Explicit node context. ``init_node`` builds everything derived from the
node's private key once; every store operation receives the context instead
of reading process-global state.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .config import NodeConfig
from .constants import BOOTSTRAP_CONTENT, BOOTSTRAP_FILES, REPO_DIR_PREFIX
from .crypto import CipherService, nonce_strategy
from .identity import NodeIdentity
from .logger import get_logger, set_level
from .storage import StorageProvider, load_storage_provider

log = get_logger("i2kn.node")


@dataclass(frozen=True)
class NodeContext:
    identity: NodeIdentity
    cipher: CipherService
    storage: StorageProvider
    config: NodeConfig

    @property
    def peer_id(self) -> str:
        return self.identity.peer_id

    @property
    def repo_dir(self) -> Path:
        return repo_dir(self.config.home, self.identity.peer_id)


def repo_dir(home: Union[str, Path], peer_id: str) -> Path:
    return Path(home) / f"{REPO_DIR_PREFIX}{peer_id}"


def init_node(private_key_material, config: Optional[Union[NodeConfig, Dict[str, Any]]] = None) -> NodeContext:
    if not isinstance(config, NodeConfig):
        config = NodeConfig.from_env(config)
    if config.log_level:
        # process-wide: every i2kn.* logger, including other nodes in this process
        set_level(config.log_level)

    identity = NodeIdentity.from_private_key(private_key_material)
    cipher = CipherService.from_private_key_bytes(
        identity.private_key_bytes,
        method=config.key_derivation,
        strategy=nonce_strategy(config.nonce_strategy),
    )
    storage = load_storage_provider(
        repo_dir(config.home, identity.peer_id),
        {"provider": config.storage_provider},
    )
    log.info(f"init files repo: {identity.peer_id}")
    return NodeContext(identity=identity, cipher=cipher, storage=storage, config=config)


def create_repo(ctx: NodeContext) -> bool:
    """Create the node root and its bootstrap collections; False if it already exists."""
    created = ctx.storage.create_root({name: BOOTSTRAP_CONTENT for name in BOOTSTRAP_FILES})
    if created:
        log.info(f"created repo {ctx.storage.root}")
    return created
