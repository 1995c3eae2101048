"""pyswav Python Package

Python library for controlling SW-AV series audio/video switchers over RS-232.
"""

from pyswav.exceptions import (
    ConfigurationError,
    DeviceError,
    NoResponseError,
    PortRangeError,
    ProtocolError,
    SwitcherError,
    TransportError,
)
from pyswav.listener import LoggingListener, MultiplexingListener, SwitcherListener
from pyswav.switcher import SWAVSwitcher, SwitchMode

__all__ = [
    "SWAVSwitcher",
    "SwitchMode",
    "SwitcherListener",
    "MultiplexingListener",
    "LoggingListener",
    "SwitcherError",
    "ConfigurationError",
    "PortRangeError",
    "DeviceError",
    "ProtocolError",
    "NoResponseError",
    "TransportError",
]
