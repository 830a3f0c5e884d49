import stat
import sys

import pytest

from iiscommons.errors import CredentialFileNotFoundError
from iiscommons.services.credential_store import CredentialStore
from iiscommons.services.filesystem import FileSystemService


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def info(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


def test_write_then_read_reproduces_fields(tmp_path):
    store = CredentialStore(logger=DummyLogger())
    auth_file = tmp_path / ".infosvrauth"
    fields = {
        "user": "isadmin",
        "password": "{iisenc}q1w2e3==",
        "domain": "services.example.com:9443",
        "server": "ENGINE.EXAMPLE.COM",
    }

    store.write(str(auth_file), fields)

    assert store.read(str(auth_file)) == fields
    assert auth_file.read_text(encoding="utf-8").splitlines() == [
        "user=isadmin",
        "password={iisenc}q1w2e3==",
        "domain=services.example.com:9443",
        "server=ENGINE.EXAMPLE.COM",
    ]


def test_read_keeps_everything_after_first_equals(tmp_path):
    auth_file = tmp_path / "auth"
    auth_file.write_text("user=isadmin\npassword=abc=def==\n", encoding="utf-8")

    fields = CredentialStore(logger=DummyLogger()).read(str(auth_file))

    assert fields["password"] == "abc=def=="


def test_read_skips_unknown_and_blank_lines(tmp_path):
    auth_file = tmp_path / "auth"
    auth_file.write_text(
        "# created by hand\n\nuser=dsadm\nsomething else\ncolour=blue\nserver=eng1\n",
        encoding="utf-8",
    )

    fields = CredentialStore(logger=DummyLogger()).read(str(auth_file))

    assert fields == {"user": "dsadm", "server": "eng1"}


def test_read_uses_first_occurrence_of_a_field(tmp_path):
    auth_file = tmp_path / "auth"
    auth_file.write_text("user=first\nuser=second\n", encoding="utf-8")

    assert CredentialStore(logger=DummyLogger()).read(str(auth_file))["user"] == "first"


def test_read_missing_file_raises(tmp_path):
    with pytest.raises(CredentialFileNotFoundError, match="Unable to find an authorisation file"):
        CredentialStore(logger=DummyLogger()).read(str(tmp_path / "absent"))


def test_missing_file_error_is_a_file_not_found_error(tmp_path):
    with pytest.raises(FileNotFoundError):
        CredentialStore(logger=DummyLogger()).read(str(tmp_path / "absent"))


def test_write_keeps_remote_templates_after_core_fields(tmp_path):
    store = CredentialStore(logger=DummyLogger())
    auth_file = tmp_path / "auth"

    store.write(
        str(auth_file),
        {
            "remoteCopyString": "docker cp __SOURCE__ infosvr:__TARGET__",
            "user": "isadmin",
            "password": "x",
            "domain": "h:9445",
            "server": "H",
            "remoteConnectString": "docker exec -i infosvr",
        },
    )

    lines = auth_file.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "user=isadmin"
    assert lines[4] == "remoteConnectString=docker exec -i infosvr"
    assert lines[5] == "remoteCopyString=docker cp __SOURCE__ infosvr:__TARGET__"


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions only")
def test_write_restricts_permissions(tmp_path):
    store = CredentialStore(logger=DummyLogger(), filesystem_service=FileSystemService(DummyLogger()))
    auth_file = tmp_path / "auth"

    store.write(str(auth_file), {"user": "u", "password": "p", "domain": "h:1", "server": "S"})

    assert stat.S_IMODE(auth_file.stat().st_mode) == 0o600


def test_append_adds_missing_newline_before_text(tmp_path):
    auth_file = tmp_path / "auth"
    auth_file.write_text("user=isadmin", encoding="utf-8")

    CredentialStore(logger=DummyLogger()).append(str(auth_file), "remoteConnectString=docker exec -i c")

    assert auth_file.read_text(encoding="utf-8") == (
        "user=isadmin\nremoteConnectString=docker exec -i c\n"
    )


def test_append_requires_existing_file(tmp_path):
    with pytest.raises(CredentialFileNotFoundError):
        CredentialStore(logger=DummyLogger()).append(str(tmp_path / "absent"), "user=x\n")
