import base64
import json
import threading
from pathlib import Path
from unittest import mock

import pytest

from verilic.common.config import Config
from verilic.common.crypto import CryptoUtils
from verilic.common.exceptions import FieldNotFoundError
from verilic.common.models import ErrorKind, ParseState, VerifyOutcome
from verilic.license import envelope
from verilic.license.license import License


def test_signed_license_round_trip(write_license, public_pem) -> None:
    lic = License(write_license(), public_pem)
    assert lic.is_valid()
    assert lic.is_signed()
    assert lic.signature_is_valid()
    assert lic.verify_outcome() is VerifyOutcome.VALID
    assert not lic.has_errors()
    assert lic.state is ParseState.OK


def test_field_access(write_license, public_pem) -> None:
    lic = License(write_license(), public_pem)
    assert lic.get_field("license_number") == "5678-1234-9012-3456"
    assert lic["sites"] == 5
    assert "sites" in lic
    assert "expires" not in lic
    assert dict(lic.fields()) == {"license_number": "5678-1234-9012-3456", "sites": 5}
    with pytest.raises(TypeError):
        lic.fields()["sites"] = 10


def test_unknown_field_is_not_an_invalid_license(write_license, public_pem) -> None:
    lic = License(write_license(), public_pem)
    with pytest.raises(FieldNotFoundError) as excinfo:
        lic.get_field("expires")
    assert excinfo.value.field == "expires"
    assert isinstance(excinfo.value, LookupError)
    assert lic.is_valid()
    assert not lic.has_errors()


def test_parse_happens_once(write_license, public_pem) -> None:
    path = write_license()
    with mock.patch(
        "verilic.license.license.read_license_bytes",
        wraps=envelope.read_license_bytes,
    ) as reader:
        lic = License(path, public_pem)
        results = [lic.is_valid() for _ in range(5)]
        lic.get_field("sites")
        lic.is_signed()
    assert results == [True] * 5
    assert reader.call_count == 1


def test_parse_is_lazy(write_license, public_pem) -> None:
    path = write_license()
    lic = License(path, public_pem)
    path.unlink()
    assert lic.state is ParseState.UNPARSED
    assert not lic.has_errors()
    assert not lic.is_valid()
    assert ErrorKind.MISSING_LICENSE_FILE in lic.errors()


def test_cached_state_survives_file_changes(write_license, public_pem) -> None:
    path = write_license()
    lic = License(path, public_pem)
    assert lic.is_valid()
    path.write_bytes(b"garbage")
    assert lic.is_valid()
    assert lic["sites"] == 5


def test_concurrent_first_access_parses_once(write_license, public_pem) -> None:
    path = write_license()
    lic = License(path, public_pem)
    barrier = threading.Barrier(8)
    results = []

    def worker() -> None:
        barrier.wait()
        results.append(lic.is_valid())

    with mock.patch(
        "verilic.license.license.read_license_bytes",
        wraps=envelope.read_license_bytes,
    ) as reader:
        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    assert results == [True] * 8
    assert reader.call_count == 1


@pytest.mark.parametrize("public_key", [None, b"", ""])
def test_missing_public_key_fails_closed(write_license, public_key) -> None:
    lic = License(write_license(), public_key)
    assert lic.errors() == {ErrorKind.MISSING_PUBLIC_KEY: "The public key is missing"}

    with mock.patch.object(CryptoUtils, "load_public_key") as load:
        assert not lic.is_valid()
        assert not lic.signature_is_valid()
    load.assert_not_called()

    errors = lic.errors()
    assert ErrorKind.MISSING_PUBLIC_KEY in errors
    assert ErrorKind.INVALID_SIGNATURE in errors


def test_missing_public_key_survives_parse(tmp_path: Path) -> None:
    lic = License(tmp_path / "absent.key", None)
    assert not lic.is_valid()
    assert set(lic.errors()) == {
        ErrorKind.MISSING_PUBLIC_KEY,
        ErrorKind.MISSING_LICENSE_FILE,
    }


def test_tampered_payload(write_license, public_pem) -> None:
    original = json.dumps({"license_number": "5678-1234-9012-3456", "sites": 5})
    tampered = original.replace('"sites": 5', '"sites": 50')
    lic = License(write_license(data=tampered), public_pem)

    assert lic.is_signed()
    assert not lic.signature_is_valid()
    assert not lic.is_valid()
    assert lic.verify_outcome() is VerifyOutcome.INVALID
    assert lic.errors()[ErrorKind.INVALID_SIGNATURE] == (
        "The license file has been tampered with"
    )
    # The tampered data is still readable
    assert lic["sites"] == 50


def test_verification_error_is_not_valid(write_license) -> None:
    lic = License(write_license(), b"-----BEGIN PUBLIC KEY-----\nbroken\n")
    assert not lic.is_valid()
    assert lic.verify_outcome() is VerifyOutcome.ERROR
    assert lic.errors()[ErrorKind.INVALID_SIGNATURE] == (
        "The license signature could not be verified"
    )


def test_signature_checked_once(write_license, public_pem) -> None:
    lic = License(write_license(), public_pem)
    with mock.patch.object(
        CryptoUtils, "verify", return_value=VerifyOutcome.VALID
    ) as verify:
        lic.is_valid()
        lic.is_valid()
        lic.signature_is_valid()
    verify.assert_called_once()
    args = verify.call_args.args
    assert args[0] == json.dumps(
        {"license_number": "5678-1234-9012-3456", "sites": 5}
    ).encode()


def test_unsigned_license_is_structurally_valid(write_license) -> None:
    lic = License(write_license(signed=False), None)
    assert not lic.is_signed()
    assert not lic.signature_is_valid()
    assert lic.verify_outcome() is None
    assert lic.is_valid()
    # A missing key is still reported
    assert lic.has_errors()


def test_empty_record_is_invalid(write_license, public_pem) -> None:
    lic = License(write_license({}, signed=False), public_pem)
    assert not lic.is_valid()
    assert not lic.has_errors()
    assert lic.state is ParseState.OK


def test_missing_license_file(tmp_path: Path, public_pem) -> None:
    path = tmp_path / "nope.key"
    lic = License(path, public_pem)
    assert not lic.is_valid()
    assert not lic.is_signed()
    assert lic.state is ParseState.MISSING
    assert lic.errors() == {
        ErrorKind.MISSING_LICENSE_FILE: f"Cannot read your license file: {path}"
    }
    with pytest.raises(FieldNotFoundError):
        lic.get_field("sites")


def test_license_missing_data(write_raw, public_pem) -> None:
    lic = License(write_raw({"signature": None}), public_pem)
    assert not lic.is_valid()
    assert lic.state is ParseState.CORRUPT
    assert lic.errors() == {
        ErrorKind.CORRUPT_LICENSE_FILE: "The license is missing its data."
    }


@pytest.mark.parametrize(
    "container",
    [
        ["data"],
        {"data": "not json"},
        {"data": "[1, 2, 3]"},
        {"data": '{"sites": {"max": 5}}'},
        {"data": "{}", "signature": "not base64!"},
        {"data": '{"sites": ' + "9" * 5000 + "}"},
        {"data": "[" * 30000},
    ],
)
def test_corrupt_license_file(write_raw, public_pem, container) -> None:
    lic = License(write_raw(container), public_pem)
    assert not lic.is_valid()
    assert lic.state is ParseState.CORRUPT
    assert ErrorKind.CORRUPT_LICENSE_FILE in lic.errors()


def test_license_file_not_base64(tmp_path: Path, public_pem) -> None:
    path = tmp_path / "license.key"
    path.write_text("this is not a license!")
    lic = License(path, public_pem)
    assert not lic.is_valid()
    assert ErrorKind.CORRUPT_LICENSE_FILE in lic.errors()


def test_oversized_license_file(write_license, public_pem) -> None:
    config = Config()
    config.MAX_LICENSE_FILE_LEN = 16
    lic = License(write_license(), public_pem, config)
    assert not lic.is_valid()
    assert ErrorKind.CORRUPT_LICENSE_FILE in lic.errors()


def test_from_config(write_license, public_pem, tmp_path: Path) -> None:
    key_path = tmp_path / "public.pem"
    key_path.write_bytes(public_pem)
    config = Config()
    config.LICENSE_FILE_PATH = write_license()
    config.PUBLIC_KEY_PATH = key_path

    lic = License.from_config(config)
    assert lic.public_key == public_pem
    assert lic.is_valid()


def test_status(write_license, public_pem) -> None:
    status = License(write_license(), public_pem).status()
    assert status.is_valid
    assert status.is_signed
    assert status.signature_is_valid
    assert status.verify_outcome is VerifyOutcome.VALID
    assert status.state is ParseState.OK
    assert status.errors == {}


@pytest.mark.parametrize(
    "container",
    [
        b'{"data": "{}", "serial": ' + b"9" * 5000 + b"}",
        b"[" * 30000,
    ],
)
def test_undecodable_container_is_corrupt(tmp_path: Path, public_pem, container) -> None:
    path = tmp_path / "license.key"
    path.write_bytes(base64.b64encode(container))
    with mock.patch(
        "verilic.license.license.read_license_bytes",
        wraps=envelope.read_license_bytes,
    ) as reader:
        lic = License(path, public_pem)
        assert not lic.is_valid()
        assert not lic.is_valid()
    assert lic.state is ParseState.CORRUPT
    assert ErrorKind.CORRUPT_LICENSE_FILE in lic.errors()
    assert reader.call_count == 1
