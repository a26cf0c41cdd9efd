"""
Tests for the serialsession-monitor command line tool.
"""

import io
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from serialsession import monitor

pytestmark = pytest.mark.timeout(10)


class TestFormatPacket:

    def test_text(self):
        assert monitor.format_packet(b"hello\r\n") == "hello\r\n"

    def test_invalid_text_is_replaced(self):
        assert monitor.format_packet(b"\xffok") == "\ufffdok"

    def test_hex(self):
        assert monitor.format_packet(b"\x01\xab\x00", as_hex=True) == "01 AB 00"


class TestMain:

    def test_list(self, capsys):
        ports = [SimpleNamespace(device="/dev/ttyUSB0", description="CP2102")]
        with patch('serial.tools.list_ports.comports', return_value=ports):
            assert monitor.main(["--list"]) == 0

        out = capsys.readouterr().out
        assert "/dev/ttyUSB0" in out
        assert "CP2102" in out
        assert "onepointfive" in out
        assert "1843200" in out

    def test_port_required(self, capsys):
        assert monitor.main([]) == 2
        assert "--port" in capsys.readouterr().err

    def test_rejected_port(self, patched_serial, capsys):
        patched_serial.rejected_ports.add("COM_FAKE")

        assert monitor.main(["--port", "COM_FAKE", "--baudrate", "9600"]) == 1
        assert "COM_FAKE" in capsys.readouterr().err

    def test_configuration_error(self, patched_serial, capsys):
        assert monitor.main(["--port", "COM1", "--stopbits", "none"]) == 1
        assert "Error message - " in capsys.readouterr().err
        assert patched_serial.open_calls == 0

    def test_sends_stdin_lines(self, patched_serial):
        stdin = io.StringIO("hello\n\nworld\n")
        with patch('sys.stdin', stdin):
            assert monitor.main(["--port", "/dev/ttyTEST0", "--eol", "crlf"]) == 0

        assert patched_serial.written == [b"hello\r\n", b"\r\n", b"world\r\n"]
        assert patched_serial.is_open is False

    def test_empty_lines_skipped_without_eol(self, patched_serial):
        stdin = io.StringIO("a\n\nb\n")
        with patch('sys.stdin', stdin):
            assert monitor.main(["--port", "/dev/ttyTEST0", "--eol", "none"]) == 0

        assert patched_serial.written == [b"a", b"b"]
