"""
Unit tests for ShareClient and the sealdrop CLI with a mocked HTTP session.
"""

import base64
import json
from unittest.mock import Mock, patch

import pytest
import requests

from sealdrop.client import cli
from sealdrop.client.cipher import TAG_SIZE
from sealdrop.client.share_client import DownloadedFile, ShareClient
from sealdrop.domain.errors import (
    DomainError,
    ExpiredError,
    IntegrityError,
    LimitReachedError,
    PasswordRequiredError,
    StorageError,
    ValidationError,
)

BASE_URL = "http://share.test/api/v1"


def _response(status_code=200, body=None):
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    if body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def share_client(session):
    return ShareClient(BASE_URL + "/", owner_id="owner-1", session=session)


def _uploaded_form(session):
    """Form fields and ciphertext the client sent in its last upload."""
    kwargs = session.request.call_args.kwargs
    return kwargs["data"], kwargs["files"]["file"][1]


class TestUpload:
    def test_sends_only_ciphertext(self, share_client, session):
        session.request.return_value = _response(201, {"success": True, "fileId": "abcdefgh1234"})

        share_client.upload(b"top secret plan", "plan.txt", mime_type="text/plain", max_downloads=3)

        args, kwargs = session.request.call_args
        assert args == ("POST", f"{BASE_URL}/files/upload")
        assert kwargs["headers"] == {"X-User-Id": "owner-1"}

        form, ciphertext = _uploaded_form(session)
        assert b"top secret plan" not in ciphertext
        assert len(ciphertext) == len(b"top secret plan") + TAG_SIZE
        assert form["fileSize"] == str(len(b"top secret plan"))
        assert form["maxDownloads"] == "3"
        assert json.loads(form["exportedKey"])["alg"] == "A256GCM"
        assert len(base64.b64decode(form["nonce"])) == 12
        assert "password" not in form

    def test_password_is_forwarded(self, share_client, session):
        session.request.return_value = _response(201, {"fileId": "abcdefgh1234"})
        share_client.upload(b"x", "x.bin", password="pw-123456")
        assert _uploaded_form(session)[0]["password"] == "pw-123456"


class TestDownload:
    def _download_body(self, form, ciphertext, count=1):
        return {
            "success": True,
            "file": {
                "id": "abcdefgh1234",
                "originalName": "plan.txt",
                "mimeType": "text/plain",
                "fileSize": int(form["fileSize"]),
                "exportedKey": form["exportedKey"],
                "nonce": form["nonce"],
                "downloadCount": count,
                "maxDownloads": 3,
            },
            "encryptedData": base64.b64encode(ciphertext).decode(),
        }

    def test_round_trip_through_server(self, share_client, session):
        session.request.return_value = _response(201, {"fileId": "abcdefgh1234"})
        share_client.upload(b"top secret plan", "plan.txt")
        form, ciphertext = _uploaded_form(session)

        session.request.return_value = _response(200, self._download_body(form, ciphertext))
        downloaded = share_client.download("abcdefgh1234", password="pw")

        assert isinstance(downloaded, DownloadedFile)
        assert downloaded.content == b"top secret plan"
        assert downloaded.original_name == "plan.txt"
        assert session.request.call_args.kwargs["json"] == {"password": "pw"}
        assert "top secret" not in repr(downloaded)

    def test_tampered_ciphertext(self, share_client, session):
        session.request.return_value = _response(201, {"fileId": "abcdefgh1234"})
        share_client.upload(b"top secret plan", "plan.txt")
        form, ciphertext = _uploaded_form(session)

        tampered = ciphertext[:-1] + bytes([ciphertext[-1] ^ 0x01])
        session.request.return_value = _response(200, self._download_body(form, tampered))

        with pytest.raises(IntegrityError):
            share_client.download("abcdefgh1234")


class TestErrorMapping:
    @pytest.mark.parametrize(
        "status, category, error",
        [
            (410, "file_expired", ExpiredError),
            (409, "download_limit_reached", LimitReachedError),
            (401, "password_required", PasswordRequiredError),
            (503, "storage_unavailable", StorageError),
        ],
    )
    def test_categories(self, share_client, session, status, category, error):
        session.request.return_value = _response(status, {"error": category, "message": "m"})
        with pytest.raises(error):
            share_client.info("abcdefgh1234")

    def test_validation_keeps_field(self, share_client, session):
        session.request.return_value = _response(400, {
            "error": "validation_failed",
            "field": "expiry_hours",
            "details": "expiry_hours: must be between 1 and 168",
        })

        with pytest.raises(ValidationError) as exc_info:
            share_client.upload(b"x", "x.bin", expiry_hours=999)

        assert exc_info.value.field == "expiry_hours"
        assert str(exc_info.value) == "expiry_hours: must be between 1 and 168"

    def test_unknown_server_error(self, share_client, session):
        session.request.return_value = _response(502)
        with pytest.raises(StorageError):
            share_client.list_files()

    def test_unknown_client_error(self, share_client, session):
        session.request.return_value = _response(418, {"message": "teapot"})
        with pytest.raises(DomainError):
            share_client.stats()

    def test_transport_failure(self, share_client, session):
        session.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(StorageError):
            share_client.delete("abcdefgh1234")


class TestCli:
    @pytest.fixture
    def client_cls(self):
        with patch("sealdrop.client.cli.ShareClient") as client_cls:
            yield client_cls

    def test_upload(self, client_cls, tmp_path, capsys):
        source = tmp_path / "report.pdf"
        source.write_bytes(b"%PDF-1.7")
        client_cls.return_value.upload.return_value = {
            "fileId": "abcdefgh1234",
            "shareUrl": "https://s/share/abcdefgh1234",
            "expiresAt": "2024-01-16T12:00:00",
        }

        code = cli.main(["--server", BASE_URL, "upload", str(source), "--generate-password"])

        assert code == 0
        kwargs = client_cls.return_value.upload.call_args.kwargs
        assert kwargs["mime_type"] == "application/pdf"
        assert len(kwargs["password"]) == 16
        assert kwargs["password"] in capsys.readouterr().out

    def test_download_writes_file(self, client_cls, tmp_path):
        client_cls.return_value.download.return_value = DownloadedFile(
            "abcdefgh1234", "notes.txt", "text/plain", b"hello", 1, 1
        )
        target = tmp_path / "out.txt"

        assert cli.main(["download", "abcdefgh1234", "-o", str(target)]) == 0
        assert target.read_bytes() == b"hello"

    def test_domain_error_exit_code(self, client_cls, capsys):
        client_cls.return_value.info.side_effect = ExpiredError("File abcdefgh has expired")

        assert cli.main(["info", "abcdefgh1234"]) == 1
        assert "expired" in capsys.readouterr().err

    def test_missing_input_file(self, client_cls, tmp_path):
        assert cli.main(["upload", str(tmp_path / "missing.bin")]) == 2

    def test_password_required_without_tty(self, client_cls):
        client_cls.return_value.download.side_effect = PasswordRequiredError("needs password")
        with patch("sealdrop.client.cli.sys.stdin") as stdin:
            stdin.isatty.return_value = False
            assert cli.main(["download", "abcdefgh1234"]) == 1
