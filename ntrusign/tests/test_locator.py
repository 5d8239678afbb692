import unittest
from types import SimpleNamespace
from unittest.mock import patch

from ntrusign.errors import DeviceNotFound
from ntrusign.locator import find_token_port, is_token
from ntrusign.logger import Logger

Logger.enabled = False


def port(device, vid=0x0420, pid=0x2137, manufacturer="ABW", product="STM32 NTRU Token"):
    return SimpleNamespace(device=device, vid=vid, pid=pid, manufacturer=manufacturer, product=product)


class TestLocator(unittest.TestCase):
    def test_matches_token(self):
        self.assertTrue(is_token(port("/dev/ttyACM0")))

    def test_each_identity_field_must_match(self):
        self.assertFalse(is_token(port("a", vid=0x0483)))
        self.assertFalse(is_token(port("a", pid=0x5740)))
        self.assertFalse(is_token(port("a", manufacturer="STMicroelectronics")))
        self.assertFalse(is_token(port("a", product="STM32 Virtual ComPort")))

    def test_missing_strings_never_match(self):
        self.assertFalse(is_token(port("a", manufacturer=None)))
        self.assertFalse(is_token(port("a", product=None)))
        self.assertFalse(is_token(SimpleNamespace(device="/dev/ttyS0", vid=None, pid=None)))

    def test_finds_token_among_others(self):
        ports = [
            port("/dev/ttyUSB0", vid=0x10C4, pid=0xEA60, manufacturer="Silicon Labs", product="CP2102"),
            port("/dev/ttyACM1"),
            port("/dev/ttyS0", vid=None, pid=None, manufacturer=None, product=None),
        ]
        self.assertEqual(find_token_port(ports), "/dev/ttyACM1")

    def test_not_found(self):
        ports = [port(f"/dev/ttyUSB{i}", vid=0x1A86, pid=0x7523) for i in range(5)]
        with self.assertRaises(DeviceNotFound):
            find_token_port(ports)

    def test_empty_list(self):
        with self.assertRaises(DeviceNotFound):
            find_token_port([])

    def test_defaults_to_system_ports(self):
        with patch('ntrusign.locator.list_ports.comports', return_value=[port("COM7")]) as comports:
            self.assertEqual(find_token_port(), "COM7")
            comports.assert_called_once()


if __name__ == '__main__':
    unittest.main()
