"""Client-side mirror of the switcher state the device reports."""

from typing import Optional, Sequence


class SwitcherState:
    """Signal presence and input selection as last reported by the switcher.

    Only the protocol engine mutates this; callers read it through the
    properties. The port count is unknown until the first Sig report.
    """

    def __init__(self):
        self._signal_status: Optional[tuple[bool, ...]] = None
        self._selected_audio_port: int = 1
        self._selected_video_port: int = 1

    @property
    def initialized(self) -> bool:
        """Whether a full status report has been received."""
        return self._signal_status is not None

    @property
    def port_count(self) -> Optional[int]:
        """Number of inputs, or None before the first status report."""
        if self._signal_status is None:
            return None
        return len(self._signal_status)

    @property
    def signal_status(self) -> tuple[bool, ...]:
        """Signal presence per input, index 0 is port 1."""
        return self._signal_status or ()

    @property
    def selected_audio_port(self) -> int:
        return self._selected_audio_port

    @property
    def selected_video_port(self) -> int:
        return self._selected_video_port

    def has_signal(self, port: int) -> bool:
        return self.signal_status[port - 1]

    def is_valid_port(self, port) -> bool:
        """Whether port is an int in 1..port_count."""
        if isinstance(port, bool) or not isinstance(port, int):
            return False
        count = self.port_count
        return count is not None and 1 <= port <= count

    def replace_signal_status(self, status: Sequence[bool]):
        self._signal_status = tuple(bool(s) for s in status)

    def select(self, port: int, audio: bool = True, video: bool = True):
        if port < 1:
            raise ValueError(f"Selected port must be at least 1, got {port}")
        if audio:
            self._selected_audio_port = port
        if video:
            self._selected_video_port = port

    def __repr__(self) -> str:
        return (
            f"SwitcherState(ports={self.port_count}, audio={self._selected_audio_port}, "
            f"video={self._selected_video_port}, signal={list(self.signal_status)})"
        )
