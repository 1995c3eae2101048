from abc import ABC, abstractmethod
from typing import List
import logging


class SwitcherListener(ABC):

    @abstractmethod
    def signal_status_changed(self, signal_status: tuple[bool, ...]):
        """Called after a full Sig report replaced the signal presence mirror."""
        pass

    @abstractmethod
    def input_selected(self, port: int, audio: bool, video: bool):
        """Called when the switcher reports a new selected input.

        Args:
            port: Input port (1-based)
            audio: Whether the audio selection moved to this port
            video: Whether the video selection moved to this port
        """
        pass

    def rebooted(self, banner: str):
        # By default, do nothing but can be overwritten to be notified of these messages.
        pass

    def reconfig_started(self):
        # By default, do nothing but can be overwritten to be notified of these messages.
        pass

    def unexpected_reply(self, line: str):
        # A reply arrived while no command was waiting for one.
        pass


class MultiplexingListener(SwitcherListener):

    _listeners: List[SwitcherListener]

    def __init__(self):
        self._listeners = []

    def signal_status_changed(self, signal_status: tuple[bool, ...]):
        for listener in self._listeners:
            listener.signal_status_changed(signal_status)

    def input_selected(self, port: int, audio: bool, video: bool):
        for listener in self._listeners:
            listener.input_selected(port, audio, video)

    def rebooted(self, banner: str):
        for listener in self._listeners:
            listener.rebooted(banner)

    def reconfig_started(self):
        for listener in self._listeners:
            listener.reconfig_started()

    def unexpected_reply(self, line: str):
        for listener in self._listeners:
            listener.unexpected_reply(line)

    def register_listener(self, listener: SwitcherListener):
        self._listeners.append(listener)

    def unregister_listener(self, listener: SwitcherListener):
        if listener in self._listeners:
            self._listeners.remove(listener)
        else:
            logging.info("Listener isn't registered")


class LoggingListener(SwitcherListener):

    def __init__(self, logger = logging):
        self.logger = logger

    def signal_status_changed(self, signal_status: tuple[bool, ...]):
        for port, active in enumerate(signal_status, start=1):
            self.logger.info(f"Port({port}) Status({int(active)})")

    def input_selected(self, port: int, audio: bool, video: bool):
        if audio and video:
            kind = "All"
        elif audio:
            kind = "Aud"
        else:
            kind = "Vid"
        self.logger.info(f"Port({port}) Input({kind}) selected")

    def rebooted(self, banner: str):
        self.logger.info(f"Reboot: {banner}")

    def reconfig_started(self):
        self.logger.info("Reconfig initiated")

    def unexpected_reply(self, line: str):
        self.logger.warning(f"Discarding unexpected reply: {line!r}")
