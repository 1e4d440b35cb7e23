import enum


class ErrorCode(enum.IntEnum):
    """Exit codes reported by a rejected message. Values are stable."""

    MALFORMED_BODY = 9

    NOT_YET_ACTIVE = 200
    MINT_DISABLED = 201
    NOT_OWNER = 202
    INSUFFICIENT_FUNDS = 203
    ALREADY_MINTED = 204
    INVALID_SIGNATURE = 205
    ADDRESS_MISMATCH = 206
    NOT_ADMIN = 207
    INSUFFICIENT_BALANCE = 208
    CONTENT_MISSING = 209

    CATALOG_NOT_OWNER = 401

    UNKNOWN_OP = 0xFFFF


MESSAGES = {
    ErrorCode.MALFORMED_BODY: "Message body does not match the op-code layout",
    ErrorCode.NOT_YET_ACTIVE: "Minting is not active yet",
    ErrorCode.MINT_DISABLED: "Minting is disabled",
    ErrorCode.NOT_OWNER: "Sender is not the owner of the pending issuance",
    ErrorCode.INSUFFICIENT_FUNDS: "Attached value does not cover the price and fees",
    ErrorCode.ALREADY_MINTED: "Pending issuance is already minted",
    ErrorCode.INVALID_SIGNATURE: "Invalid signer signature",
    ErrorCode.ADDRESS_MISMATCH: "Sender is not the pending issuance for these parameters",
    ErrorCode.NOT_ADMIN: "Unauthorized, must be the admin",
    ErrorCode.INSUFFICIENT_BALANCE: "Balance does not exceed the minimum reserve",
    ErrorCode.CONTENT_MISSING: "Content was already cleared",
    ErrorCode.CATALOG_NOT_OWNER: "Unauthorized, must be the catalog owner",
    ErrorCode.UNKNOWN_OP: "Unknown op-code",
}


class ProtocolError(Exception):
    """Rejection of the message currently being processed by an actor."""

    def __init__(self, code: ErrorCode, detail: str | None = None) -> None:
        self.code = ErrorCode(code)
        self.detail = detail
        message = MESSAGES[self.code]
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)

    @property
    def name(self) -> str:
        return self.code.name
