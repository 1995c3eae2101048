"""Exceptions raised by pyswav."""

from typing import Optional

# Error codes the switcher reports as E<code>
ERROR_INVALID_INPUT = 1
ERROR_INVALID_COMMAND = 10
ERROR_PARAMETER_OUT_OF_RANGE = 13
ERROR_ILLEGAL_COMMAND = 14

DEVICE_ERROR_DESCRIPTIONS = {
    ERROR_INVALID_INPUT: "Invalid input channel number (out of range)",
    ERROR_INVALID_COMMAND: "Invalid command",
    ERROR_PARAMETER_OUT_OF_RANGE: "Invalid parameter (out of range)",
    ERROR_ILLEGAL_COMMAND: "Illegal command for this configuration",
}


class SwitcherError(Exception):
    """Base class for all errors raised by this package."""
    pass


class ConfigurationError(SwitcherError, ValueError):
    """Invalid construction parameter, e.g. channel 0."""
    pass


class PortRangeError(SwitcherError, ValueError):
    """Port number is 0 or above the number of ports the switcher reported."""

    def __init__(self, port, port_count: Optional[int]):
        self.port = port
        self.port_count = port_count
        if port_count is None:
            message = f"Invalid input {port!r}, port count is not known yet"
        else:
            message = f"Invalid input {port!r}, must be 1-{port_count}"
        super().__init__(message)


class DeviceError(SwitcherError):
    """The switcher answered with an E<code> error line."""

    def __init__(self, code: int):
        self.code = code
        self.description = DEVICE_ERROR_DESCRIPTIONS.get(code, f"Error '{code}' received")
        super().__init__(f"E{code:02d}: {self.description}")

    @property
    def is_known(self) -> bool:
        """Whether the code is one of the documented SW-AV error codes."""
        return self.code in DEVICE_ERROR_DESCRIPTIONS


class ProtocolError(SwitcherError):
    """A reply or notification did not have the expected shape."""
    pass


class NoResponseError(SwitcherError, TimeoutError):
    """The transport read timed out before a reply was received."""
    pass


class TransportError(SwitcherError):
    """The serial channel could not be opened or failed during I/O."""
    pass
