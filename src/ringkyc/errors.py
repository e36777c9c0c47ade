"""error taxonomy for the credential engine

every error is terminal for the call that raised it; nothing here is retried.
a cryptographically invalid signature is not an error (verification returns
False); these are reserved for misuse and missing state.
"""


class RingKycError(Exception):
    """base class for engine errors"""


class AlreadyInitialized(RingKycError):
    """initialize() called on an environment that already has an admin"""


class Unauthorized(RingKycError):
    """caller is not the admin, or issuer authorization failed"""


class DuplicateIssuer(RingKycError):
    """issuer public key already registered"""


class InvalidRingSize(RingKycError):
    """ring has fewer than the minimum or more than the maximum members"""


class DuplicateMember(RingKycError):
    """two ring entries encode to identical bytes"""


class RingNotFound(RingKycError):
    """no ring stored for the requested attribute"""


class KeyMismatch(RingKycError):
    """secret key does not match the public key at the signer index"""


class InvalidParameter(RingKycError, ValueError):
    """malformed or out-of-range input"""


class CredentialError(RingKycError):
    """credential blob could not be decrypted or parsed"""


class StorageError(RingKycError):
    """persisted state could not be read or written"""
