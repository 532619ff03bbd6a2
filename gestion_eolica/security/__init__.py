from .guards import current_identity, requires_auth, requires_role
from .jwt import decode_jwt, encode_jwt

__all__ = ["current_identity", "decode_jwt", "encode_jwt", "requires_auth", "requires_role"]
