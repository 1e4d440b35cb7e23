import enum


class BouncePolicy(str, enum.Enum):
    """What a pending issuance does when the issuer bounces its mint request."""

    # Stay minted and refund the owner; the instance is consumed for good.
    REFUND_ONLY = "refund-only"
    # Refund the owner and return to the unminted state so the owner can retry.
    RESET_FOR_RETRY = "reset-for-retry"
