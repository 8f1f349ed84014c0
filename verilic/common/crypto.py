"""Common cryptographic utilities.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Union

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import dsa, ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.ed448 import Ed448PublicKey
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from verilic.common.models import VerifyOutcome

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

    PublicKeyMaterial = Union[bytes, str, PublicKeyTypes, None]

logger = logging.getLogger(__name__)


class CryptoUtils:
    """Utility class for cryptographic operations."""

    @staticmethod
    def load_public_key(material: bytes | str | PublicKeyTypes) -> PublicKeyTypes:
        """Load PEM key material, passing already loaded keys through."""
        if isinstance(material, str):
            material = material.encode("ascii")
        if isinstance(material, bytes):
            return serialization.load_pem_public_key(material)
        return material

    @staticmethod
    def _verify_with_key(key: PublicKeyTypes, signature: bytes, data: bytes) -> None:
        """Dispatch to the verify call matching the key type."""
        if isinstance(key, (Ed25519PublicKey, Ed448PublicKey)):
            key.verify(signature, data)
        elif isinstance(key, rsa.RSAPublicKey):
            key.verify(signature, data, padding.PKCS1v15(), hashes.SHA256())
        elif isinstance(key, ec.EllipticCurvePublicKey):
            key.verify(signature, data, ec.ECDSA(hashes.SHA256()))
        elif isinstance(key, dsa.DSAPublicKey):
            key.verify(signature, data, hashes.SHA256())
        else:
            msg = f"Unsupported public key type: {type(key).__name__}"
            raise TypeError(msg)

    @staticmethod
    def verify(
        signed_data: bytes,
        signature: bytes,
        public_key: PublicKeyMaterial,
    ) -> VerifyOutcome:
        """Check ``signature`` over ``signed_data``.

        Returns INVALID without touching the crypto backend when no key is
        available, and ERROR when the backend fails rather than rejects.
        """
        if not public_key:
            logger.warning("No public key available, signature not trusted")
            return VerifyOutcome.INVALID

        try:
            key = CryptoUtils.load_public_key(public_key)
            CryptoUtils._verify_with_key(key, signature, signed_data)
        except InvalidSignature:
            logger.info("License signature invalid")
            return VerifyOutcome.INVALID
        except (ValueError, TypeError, UnsupportedAlgorithm) as err:
            logger.warning("License signature could not be verified: %s", err)
            return VerifyOutcome.ERROR

        logger.debug("License signature valid")
        return VerifyOutcome.VALID
