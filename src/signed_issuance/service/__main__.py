from __future__ import annotations

import argparse
import json
import logging
import sys

import uvicorn

from ..codec import offchain_content
from ..errors import SignedIssuanceError
from ..keys import describe_keys, load_or_create_keys
from ..signing import sign_mint
from .app import ServiceContext, create_app
from .config import ServiceConfig

logger = logging.getLogger("signed_issuance.service")


def _context() -> ServiceContext:
    config = ServiceConfig.from_environment()
    return ServiceContext(keys=load_or_create_keys(config.keys_path), config=config)


def _cmd_keys(args: argparse.Namespace) -> None:
    ctx = _context()
    print(describe_keys(ctx.keys))
    print("\nUse this public key when deploying the issuer.")


def _cmd_serve(args: argparse.Namespace) -> None:
    ctx = _context()
    port = args.port or ctx.config.port
    logger.info("Signer service for %s listening on %s:%d", ctx.config.network, args.host, port)
    uvicorn.run(create_app(ctx), host=args.host, port=port)


def _cmd_sign(args: argparse.Namespace) -> None:
    ctx = _context()
    signed = sign_mint(
        ctx.signer_context(), args.owner, offchain_content(args.url), args.price
    )
    print(json.dumps({**signed.to_json(), "content": args.url}, indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="signed_issuance.service", description="Signed issuance signer service"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("keys", help="show the signer public key")
    p.set_defaults(func=_cmd_keys)

    p = sub.add_parser("serve", help="run the HTTP API")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=None, help="overrides PORT")
    p.set_defaults(func=_cmd_serve)

    p = sub.add_parser("sign", help="sign a single mint")
    p.add_argument("owner", help="owner account address")
    p.add_argument("url", help="metadata URL")
    p.add_argument("price", nargs="?", default=None, help="whole units below 1000, else micro-units")
    p.set_defaults(func=_cmd_sign)
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        args.func(args)
    except SignedIssuanceError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
