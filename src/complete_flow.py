"""
complete anonymous attribute verification flow

this demonstrates the full protocol:
1. admin initializes the environment and registers an issuer
2. issuer approves a holder and writes an "over_18" ring with decoys
3. verifier hands out a fresh challenge
4. holder signs the challenge with the ring signature
5. verifier checks the signature against the stored ring
6. the same signature replayed against a new challenge is rejected
"""

import json
from pathlib import Path
import sys
sys.path.append(str(Path(__file__).parent))

from ringkyc.credential import decrypt_credential, encrypt_credential, issue_credential, new_challenge
from ringkyc.keys import generate_keypair
from ringkyc.state import CredentialEnvironment
from ringkyc.storage import StateStore


def complete_verification_flow(
    attribute="over_18",
    decoys=4,
    password="correct horse battery staple",
    db_url="sqlite:///artifacts/ringkyc_demo.db",
):
    """
    run the complete issuance and verification flow

    args:
        attribute: attribute to issue and prove
        decoys: decoy keys placed in the ring next to the holder
        password: password protecting the holder's credential blob
        db_url: store the environment's changes are saved into at the end

    returns:
        dict with verification results and the final counter
    """
    print(f"\ncomplete verification flow for attribute {attribute}")
    print("=" * 60)

    # step 1: admin sets up the environment
    print("\n[admin] initializing environment...")
    env = CredentialEnvironment()
    env.initialize("admin")
    issuer = generate_keypair()
    env.register_issuer(issuer.pk, caller="admin")
    print(f"  issuer registered: {issuer.pk.to_hex()[:32]}...")

    # step 2: issuer mints the holder credential
    print("\n[issuer] issuing credential...")
    credential = issue_credential(env, issuer, "holder-1", [attribute], decoys=decoys)
    blob = encrypt_credential(credential, password)
    credential.wipe()
    credential_path = Path("artifacts/credentials/holder-1.txt")
    credential_path.parent.mkdir(parents=True, exist_ok=True)
    credential_path.write_text(blob)
    print(f"  ring size: {len(env.get_ring_for_attribute(attribute))}")
    print(f"  encrypted credential saved to {credential_path}")

    # step 3: verifier issues a challenge
    challenge = new_challenge()
    print(f"\n[verifier] challenge: {challenge}")

    # step 4: holder proves membership
    print("\n[holder] signing challenge...")
    holder_credential = decrypt_credential(credential_path.read_text(), password)
    signature = holder_credential.prove(attribute, challenge)
    holder_credential.wipe()
    signature_path = Path("artifacts/proofs/holder-1_signature.json")
    signature_path.parent.mkdir(parents=True, exist_ok=True)
    signature_path.write_text(json.dumps(signature.to_dict(), indent=2))
    print(f"  signature saved to {signature_path}")

    # step 5: verifier checks the proof
    print("\n[verifier] verifying signature...")
    valid = env.verify_attribute(challenge, signature, attribute)
    print(f"  verification: {'success' if valid else 'failed'}")

    # step 6: replay against a fresh challenge
    print("\n[verifier] replaying signature against a new challenge...")
    replay_valid = env.verify_attribute(new_challenge(), signature, attribute)
    print(f"  replay accepted: {replay_valid}")

    Path("artifacts").mkdir(exist_ok=True)
    StateStore(db_url).save(env)

    print("\n" + "=" * 60)
    print("verification flow complete")

    return {
        "valid": valid,
        "replay_rejected": not replay_valid,
        "verification_count": env.verification_count,
    }


if __name__ == "__main__":
    print("demonstration: anonymous attribute proofs with ring signatures")

    result = complete_verification_flow()

    print("\nfinal result:")
    print(f"  proof verified: {result['valid']}")
    print(f"  replay rejected: {result['replay_rejected']}")
    print(f"  verification counter: {result['verification_count']}")
    print("\nthe verifier learned that some member of the ring signed the challenge,")
    print("but not which one.")
