import base64
import json
from pathlib import Path
from typing import Any, Callable

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

VALID_RECORD = {"license_number": "5678-1234-9012-3456", "sites": 5}


def _encode(container: Any) -> bytes:
    return base64.b64encode(json.dumps(container).encode())


@pytest.fixture
def private_key() -> Ed25519PrivateKey:
    """Generate a signing key for test licenses."""
    return Ed25519PrivateKey.generate()


@pytest.fixture
def public_pem(private_key: Ed25519PrivateKey) -> bytes:
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


@pytest.fixture
def write_raw(tmp_path: Path) -> Callable[..., Path]:
    """Write an arbitrary outer container as a license file."""

    def _write(container: Any, name: str = "license.key") -> Path:
        path = tmp_path / name
        path.write_bytes(_encode(container))
        return path

    return _write


@pytest.fixture
def write_license(
    tmp_path: Path, private_key: Ed25519PrivateKey
) -> Callable[..., Path]:
    """Write a license file, signed by ``private_key`` unless ``signed=False``.

    ``data`` replaces the payload text after signing, which simulates tampering.
    """

    def _write(
        record: dict[str, Any] | None = None,
        *,
        signed: bool = True,
        data: str | None = None,
        name: str = "license.key",
    ) -> Path:
        text = json.dumps(VALID_RECORD if record is None else record)
        container: dict[str, Any] = {"data": text}
        if signed:
            signature = private_key.sign(text.encode())
            container["signature"] = base64.b64encode(signature).decode()
        if data is not None:
            container["data"] = data
        path = tmp_path / name
        path.write_bytes(_encode(container))
        return path

    return _write
