"""Tests for serial port -> make variable parsing."""
from genmf.core.serial import serial_make_args


class TestSerialMakeArgs:

    def test_windows(self):
        assert serial_make_args("COM12", "win32") == ["USBDEVBASENAME=COM", "MOTE=12"]

    def test_linux(self):
        assert serial_make_args("/dev/ttyUSB0", "linux") == [
            "USBDEVBASENAME=/dev/ttyUSB", "MOTE=0",
        ]

    def test_macos_callout_rewritten(self):
        assert serial_make_args("/dev/cu.usbserial-A9007", "darwin") == [
            "USBDEVBASENAME=/dev/tty.usbserial-", "MOTE=A9007",
        ]

    def test_empty_port(self):
        assert serial_make_args("", "linux") == []

    def test_unmatched_port_ignored(self):
        assert serial_make_args("/dev/tty0x", "linux") == []

    def test_unknown_platform(self):
        assert serial_make_args("COM1", "sunos5") == []
