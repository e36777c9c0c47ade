"""command-line front end over a persisted credential environment

every command that changes state runs inside one storage transaction on --db,
so concurrent invocations queue up instead of overwriting each other.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ringkyc.config import EngineConfig
from ringkyc.credential import decrypt_credential, encrypt_credential, issue_credential, new_challenge
from ringkyc.errors import RingKycError
from ringkyc.group import Point, SecretKey
from ringkyc.keys import KeyPair, generate_keys
from ringkyc.schnorr import authorize_ring
from ringkyc.signer import RingSignature
from ringkyc.storage import StateStore


def _write_output(text: str, out: Optional[Path]) -> None:
    if out is None:
        print(text)
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text)
    print(f"wrote {out}")


def cmd_init(args, store: StateStore, config: EngineConfig) -> int:
    with store.transaction(config) as env:
        env.initialize(args.admin)
    print(f"initialized with admin {args.admin}")
    return 0


def cmd_keygen(args, store: StateStore, config: EngineConfig) -> int:
    batch = generate_keys(args.count)
    payload = {
        "secrets": [sk.to_hex() for sk in batch.secrets],
        "publics": [pk.to_hex() for pk in batch.publics],
    }
    batch.wipe()
    _write_output(json.dumps(payload, indent=2), args.out)
    return 0


def cmd_register_issuer(args, store: StateStore, config: EngineConfig) -> int:
    with store.transaction(config) as env:
        env.register_issuer(Point.from_hex(args.pubkey), args.caller)
        total = len(env.list_issuers())
    print(f"registered issuer {args.pubkey[:16]}... ({total} total)")
    return 0


def cmd_create_ring(args, store: StateStore, config: EngineConfig) -> int:
    issuer = KeyPair.from_secret(SecretKey.from_hex(args.issuer_secret))
    members = [Point.from_hex(m) for m in args.member]
    authorization = authorize_ring(issuer, args.attribute, members)
    with store.transaction(config) as env:
        ring = env.create_ring_for_attribute(authorization, args.attribute, members)
    print(f"ring for {args.attribute}: {len(ring)} members")
    return 0


def cmd_issue(args, store: StateStore, config: EngineConfig) -> int:
    issuer = KeyPair.from_secret(SecretKey.from_hex(args.issuer_secret))
    with store.transaction(config) as env:
        credential = issue_credential(env, issuer, args.holder, args.attribute, decoys=args.decoys)
    blob = encrypt_credential(credential, args.password, config.kdf_iterations)
    credential.wipe()
    _write_output(blob, args.out)
    return 0


def cmd_challenge(args, store: StateStore, config: EngineConfig) -> int:
    print(new_challenge())
    return 0


def cmd_prove(args, store: StateStore, config: EngineConfig) -> int:
    credential = decrypt_credential(args.credential.read_text().strip(), args.password, config.kdf_iterations)
    try:
        signature = credential.prove(args.attribute, args.message)
    finally:
        credential.wipe()
    _write_output(signature.to_json(), args.out)
    return 0


def cmd_verify(args, store: StateStore, config: EngineConfig) -> int:
    signature = RingSignature.from_json(args.signature.read_text())
    with store.transaction(config) as env:
        ok = env.verify_attribute(args.message, signature, args.attribute)
    print("VALID" if ok else "INVALID")
    return 0 if ok else 1


def cmd_status(args, store: StateStore, config: EngineConfig) -> int:
    env = store.load_or_create(config)
    print(f"admin:              {env.get_admin()}")
    print(f"issuers:            {len(env.list_issuers())}")
    for issuer in env.list_issuers():
        print(f"  {issuer.to_hex()[:32]}...")
    print(f"attribute rings:    {len(env.attributes())}")
    for attribute in env.attributes():
        print(f"  {attribute:20s} {len(env.get_ring_for_attribute(attribute))} members")
    print(f"verifications:      {env.verification_count}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ringkyc", description="Anonymous attribute credentials")
    parser.add_argument("--db", default=None, help="SQLAlchemy URL for persisted state")
    parser.add_argument("-v", "--verbose", action="store_true", help="log engine activity")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init", help="set the admin identity")
    p.add_argument("--admin", required=True)
    p.set_defaults(func=cmd_init)

    p = sub.add_parser("keygen", help="generate key pairs")
    p.add_argument("--count", type=int, default=1)
    p.add_argument("--out", type=Path, default=None)
    p.set_defaults(func=cmd_keygen)

    p = sub.add_parser("register-issuer", help="admin: register an issuer public key")
    p.add_argument("--caller", required=True)
    p.add_argument("--pubkey", required=True)
    p.set_defaults(func=cmd_register_issuer)

    p = sub.add_parser("create-ring", help="issuer: write the ring for an attribute")
    p.add_argument("--issuer-secret", required=True)
    p.add_argument("--attribute", required=True)
    p.add_argument("--member", action="append", required=True)
    p.set_defaults(func=cmd_create_ring)

    p = sub.add_parser("issue", help="issuer: mint an encrypted holder credential")
    p.add_argument("--issuer-secret", required=True)
    p.add_argument("--holder", required=True)
    p.add_argument("--attribute", action="append", required=True)
    p.add_argument("--decoys", type=int, default=None)
    p.add_argument("--password", required=True)
    p.add_argument("--out", type=Path, default=None)
    p.set_defaults(func=cmd_issue)

    p = sub.add_parser("challenge", help="print a fresh challenge message")
    p.set_defaults(func=cmd_challenge)

    p = sub.add_parser("prove", help="holder: sign a challenge for an attribute")
    p.add_argument("--credential", type=Path, required=True)
    p.add_argument("--password", required=True)
    p.add_argument("--attribute", required=True)
    p.add_argument("--message", required=True)
    p.add_argument("--out", type=Path, default=None)
    p.set_defaults(func=cmd_prove)

    p = sub.add_parser("verify", help="verifier: check a signature for an attribute")
    p.add_argument("--attribute", required=True)
    p.add_argument("--message", required=True)
    p.add_argument("--signature", type=Path, required=True)
    p.set_defaults(func=cmd_verify)

    p = sub.add_parser("status", help="show registry, rings and counter")
    p.set_defaults(func=cmd_status)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    try:
        config = EngineConfig.from_env()
        store = StateStore(args.db or config.db_url)
        return args.func(args, store, config)
    except RingKycError as e:
        print(f"error: {type(e).__name__}: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
