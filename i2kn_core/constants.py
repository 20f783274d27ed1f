# i2kn_core/constants.py

# Storage root is <home>/.i2KnV3-<peer_id>
REPO_DIR_PREFIX = ".i2KnV3-"

# Opaque collections created alongside a fresh repo
BOOTSTRAP_FILES = ("companies.db", "bases.db", "pages.db", "users.db")
BOOTSTRAP_CONTENT = "[]"

# Fields that make up a record's identity; anything else is ignored by the CID
RECORD_FIELDS = ("id", "name", "content")

CID_VERSION = 1
CID_CODEC = "json"
CID_BASE = "base32"
CID_HASH = "sha2-256"

AES_KEY_SIZE = 32
AES_IV_SIZE = 16
HKDF_INFO = b"i2kn-files-v3"
