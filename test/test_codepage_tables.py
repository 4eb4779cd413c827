"""Pytest tests for the code page table printing tool."""

import os
from unittest.mock import patch

import pytest

from starprnt import StarPrntEncoder
from starprnt.codepage_tables import build_tables, main, print_codepage, send_to_printer
from starprnt.config import load_settings


@pytest.fixture
def env_file(tmp_path):
    return str(tmp_path / "missing.env")


@pytest.fixture(autouse=True)
def clean_environment():
    """Run every test with an empty environment and without log files."""
    with patch.dict(os.environ, {}, clear=True), patch("starprnt.codepage_tables.setup_logging"):
        yield


class TestPrintCodepage:
    """Tests for print_codepage."""

    def test_named_codepage_is_selected(self):
        encoder = StarPrntEncoder()
        print_codepage(encoder, "cp866")
        assert encoder.encode().startswith(b"\x1b\x1dt\x0a")

    def test_numeric_codepage_is_sent_raw(self):
        encoder = StarPrntEncoder()
        print_codepage(encoder, "32")
        assert encoder.encode().startswith(b"\x1b\x1dt\x20")

    def test_rows_contain_every_printable_byte(self):
        encoder = StarPrntEncoder()
        print_codepage(encoder, "cp437")
        data = encoder.encode()
        assert bytes(range(0xF0, 0x100)) in data
        # Control characters are replaced by spaces
        assert b" " * 16 + b"\n\r" in data


class TestBuildTables:
    """Tests for build_tables."""

    def test_starts_with_initialize_and_ends_with_cut(self):
        data = build_tables(["cp437"], StarPrntEncoder(width=48))
        assert data.startswith(b"\x1b@\x18")
        assert data.endswith(b"\x1bd\x01")

    def test_one_table_per_codepage(self):
        data = build_tables(["cp437", "cp866"], StarPrntEncoder(width=48))
        assert data.count(bytes(range(0xF0, 0x100))) == 2


class TestMain:
    """Tests for the command line entry point."""

    def test_writes_output_file(self, tmp_path, env_file, capsys):
        output = tmp_path / "tables.bin"
        assert main(["cp437", "-o", str(output), "--env-file", env_file]) == 0
        assert output.read_bytes().startswith(b"\x1b@\x18")
        assert "Wrote" in capsys.readouterr().out

    def test_writes_stdout(self, env_file, capsysbinary):
        assert main(["-o", "-", "--env-file", env_file]) == 0
        assert capsysbinary.readouterr().out.endswith(b"\x1bd\x01")

    def test_sends_to_printer_by_default(self, env_file):
        with patch("starprnt.codepage_tables.send_to_printer") as send:
            assert main(["cp437", "--env-file", env_file]) == 0

        data, settings = send.call_args.args
        assert data.startswith(b"\x1b@\x18")
        assert settings.serial_port == "/dev/serial0"

    def test_unknown_codepage_returns_error(self, env_file, capsys):
        with patch("starprnt.codepage_tables.send_to_printer") as send:
            assert main(["klingon", "--env-file", env_file]) == 2

        send.assert_not_called()
        assert "Unknown codepage: klingon" in capsys.readouterr().err


class TestSendToPrinter:
    """Tests for send_to_printer."""

    def test_writes_raw_data_and_closes(self, env_file):
        settings = load_settings(env_file)

        with patch("escpos.printer.Serial") as serial:
            send_to_printer(b"\x1b@", settings)

        serial.assert_called_once_with(
            devfile="/dev/serial0",
            baudrate=9600,
            bytesize=8,
            parity="N",
            stopbits=1,
            timeout=1.0,
            dsrdtr=True,
        )
        serial.return_value._raw.assert_called_once_with(b"\x1b@")
        serial.return_value.close.assert_called_once()

    def test_closes_on_error(self, env_file):
        settings = load_settings(env_file)

        with patch("escpos.printer.Serial") as serial:
            serial.return_value._raw.side_effect = OSError("port gone")
            with pytest.raises(OSError):
                send_to_printer(b"\x1b@", settings)

        serial.return_value.close.assert_called_once()
