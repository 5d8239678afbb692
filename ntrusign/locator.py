"""
Token discovery among the serial ports reported by the operating system.
"""

from typing import Iterable, Optional

from serial.tools import list_ports

from .config import TOKEN_VID, TOKEN_PID, TOKEN_MANUFACTURER, TOKEN_PRODUCT
from .errors import DeviceNotFound
from .logger import Logger


def is_token(port_info) -> bool:
    """
    Check a port descriptor against the token's USB identity.

    Args:
        port_info: Descriptor with vid, pid, manufacturer and product
            attributes (e.g. serial.tools.list_ports_common.ListPortInfo)

    Returns:
        True if every identity field matches
    """
    return (
        getattr(port_info, 'vid', None) == TOKEN_VID
        and getattr(port_info, 'pid', None) == TOKEN_PID
        and (getattr(port_info, 'manufacturer', None) or "") == TOKEN_MANUFACTURER
        and (getattr(port_info, 'product', None) or "") == TOKEN_PRODUCT
    )


def find_token_port(ports: Optional[Iterable] = None) -> str:
    """
    Locate the attached token.

    Args:
        ports: Port descriptors to search (defaults to list_ports.comports())

    Returns:
        Device name of the matching port (e.g. '/dev/ttyACM0', 'COM3')

    Raises:
        DeviceNotFound: If no descriptor matches
    """
    if ports is None:
        ports = list_ports.comports()

    for port_info in ports:
        if is_token(port_info):
            Logger.debug("LOCATOR", f"Token found at {port_info.device}")
            return port_info.device
        Logger.debug("LOCATOR", f"Skipping {getattr(port_info, 'device', port_info)}")

    raise DeviceNotFound("Token not found")
