from typing import Final

# Value units (micro-units, 1 unit = 1_000_000)
MICRO_UNITS_PER_UNIT: Final[int] = 1_000_000

# Storage reserve every actor keeps after processing a message
MIN_RESERVE: Final[int] = 20_000  # 0.02 units

# Value a client attaches on top of the price to cover the three hops.
# Sending only the price spends a refund-only item on a mint the issuer refuses.
GAS_BUFFER: Final[int] = 150_000  # 0.15 units

# Gas consumed per handler (charged at the network gas price)
GAS_BASE: Final[int] = 1_000
GAS_PENDING_MINT: Final[int] = 6_000
GAS_PENDING_BOUNCE: Final[int] = 3_000
GAS_ISSUER_MINT: Final[int] = 8_000
GAS_ISSUER_BOUNCE: Final[int] = 3_000
GAS_ADMIN: Final[int] = 3_000
GAS_CATALOG: Final[int] = 5_000

# ABI Types Byte Sizes
UINT32_SIZE: Final[int] = 4
UINT64_SIZE: Final[int] = 8
BYTES32_SIZE: Final[int] = 32
SIGNATURE_SIZE: Final[int] = 64

# Message op-codes (first 4 bytes of every non-empty body)
OP_SIZE: Final[int] = UINT32_SIZE
OP_DEPLOY_AND_MINT: Final[int] = 0x5D0A1F7E
OP_MINT_ITEM: Final[int] = 0x90231E2C
OP_INTERNAL_MINT_ITEM: Final[int] = 0x0505DC31
OP_ADMIN_CLAIM: Final[int] = 0x1B9403D8
OP_ADMIN_TOGGLE_POLICY: Final[int] = 0x6A3F5C12
OP_ADMIN_SET_START_TIME: Final[int] = 0x6A3F5C13
OP_ADMIN_TRANSFER_CATALOG_OWNERSHIP: Final[int] = 0x2C1F9B47
OP_CATALOG_ISSUE: Final[int] = 0x00000001
OP_CATALOG_CHANGE_OWNER: Final[int] = 0x00000003
OP_EXCESSES: Final[int] = 0xD53276DB

# Bounced bodies are the original body behind this marker
BOUNCE_PREFIX: Final[bytes] = b"\xff\xff\xff\xff"

# Content blob prefixes
CONTENT_ONCHAIN: Final[int] = 0x00
CONTENT_OFFCHAIN: Final[int] = 0x01

# Domain Separators
HASH_DOMAIN_ACCOUNT: Final[bytes] = b"signed-issuance/account"
HASH_DOMAIN_MINT: Final[bytes] = b"signed-issuance/mint"
CODE_TEMPLATE_PREFIX: Final[bytes] = b"signed-issuance/"
