"""
Unit tests for the operator console.
"""

from unittest.mock import patch

import pytest

from nrv.auth import ConsumeResult
from nrv.cli import generate_invite_cli, read_inquiries_cli, run_console
from nrv.errors import StorageError
from nrv.services import ContentService


@pytest.fixture
def content(context) -> ContentService:
    return ContentService(context)


def feed(*lines):
    """input() replacement that raises EOFError when lines run out."""
    pending = list(lines)

    def read(prompt):
        if not pending:
            raise EOFError
        return pending.pop(0)

    return read


class TestConsole:

    @pytest.mark.unit
    def test_generate_invite(self, auth_service, invitation_ledger, capsys):
        assert generate_invite_cli(auth_service) is True

        out = capsys.readouterr().out
        assert out.startswith("Invitation code: ")
        code = out.split(": ", 1)[1].strip()
        assert invitation_ledger.consume(code) is ConsumeResult.CONSUMED

    @pytest.mark.unit
    def test_generate_invite_failure(self, auth_service, capsys):
        with patch.object(auth_service.invitations, "issue", side_effect=StorageError("down")):
            assert generate_invite_cli(auth_service) is False

        assert "Failed to generate invitation code" in capsys.readouterr().out

    @pytest.mark.unit
    def test_read_inquiries(self, content, capsys):
        content.add_inquiry("Trinity", "trinity@example.com", "Hello", "10.0.0.1")

        assert read_inquiries_cli(content) is True

        out = capsys.readouterr().out
        assert "Name: Trinity" in out
        assert "Email: trinity@example.com" in out
        assert "Message: Hello" in out
        assert "IP Address: 10.0.0.1" in out
        assert "Timestamp: " in out

    @pytest.mark.unit
    def test_read_no_inquiries(self, content, capsys):
        read_inquiries_cli(content)
        assert "No inquiries." in capsys.readouterr().out

    @pytest.mark.unit
    def test_read_inquiries_failure(self, content, capsys):
        with patch.object(content, "list_inquiries", side_effect=StorageError("down")):
            assert read_inquiries_cli(content) is False

        assert "Failed to read inquiries" in capsys.readouterr().out

    @pytest.mark.unit
    def test_console_loop(self, auth_service, content, capsys):
        run_console(auth_service, content, input_fn=feed("", "bogus", "generate-invite", "exit", "read-inquiries"))

        out = capsys.readouterr().out
        assert "Unknown command: bogus" in out
        assert "Invitation code: " in out
        # Nothing after exit runs
        assert "No inquiries." not in out

    @pytest.mark.unit
    def test_console_stops_on_eof(self, auth_service, content, capsys):
        run_console(auth_service, content, input_fn=feed("read-inquiries"))

        assert "No inquiries." in capsys.readouterr().out
