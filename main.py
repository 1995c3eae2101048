"""
Main command-line interface for pyswav.

This script provides a CLI to interact with an SW-AV series switcher.
"""

import argparse
import logging
import sys

from pyswav import SWAVSwitcher, SwitcherError, SwitchMode


def show_status(switcher: SWAVSwitcher):
    """Query and display identity, modes and input status."""
    print(f"Part number:      {switcher.part_number}")
    print(f"Firmware version: {switcher.firmware_version}")
    print(f"Switch mode:      {switcher.switch_mode.name.lower()}")
    print(f"Video muted:      {switcher.video_muted}")
    print(f"Audio muted:      {switcher.audio_muted}")

    print("\nInput Status:")
    print("-" * 50)
    for port in range(1, switcher.ports + 1):
        markers = []
        if port == switcher.selected_video_port:
            markers.append("video")
        if port == switcher.selected_audio_port:
            markers.append("audio")
        selected = ",".join(markers) if markers else "-"
        signal = "signal" if switcher.state.has_signal(port) else "no signal"
        print(f"Input {port:2d}: {signal:10s} | Selected: {selected}")
    print("-" * 50)


def select_input(switcher: SWAVSwitcher, port: int, audio_only: bool, video_only: bool):
    """Route an input to the outputs."""
    if audio_only:
        print(f"Selecting audio input {port}...")
        switcher.select_input_audio(port)
    elif video_only:
        print(f"Selecting video input {port}...")
        switcher.select_input_video(port)
    else:
        print(f"Selecting input {port}...")
        switcher.select_input_audio_video(port)

    # Pick up the In<port> echo
    switcher.poll()
    print(f"Audio: {switcher.selected_audio_port}  Video: {switcher.selected_video_port}")


def switch_mode(switcher: SWAVSwitcher, mode):
    if mode is not None:
        switcher.switch_mode = SwitchMode[mode.upper()]
    print(f"Switch mode: {switcher.switch_mode.name.lower()}")


def mute(switcher: SWAVSwitcher, target: str, state):
    attribute = f"{target}_muted"
    if state is not None:
        setattr(switcher, attribute, state == "on")
    print(f"{target.capitalize()} muted: {getattr(switcher, attribute)}")


def watch(switcher: SWAVSwitcher):
    """Log unsolicited notifications until interrupted."""
    print("Watching for switcher notifications, Ctrl-C to stop")
    try:
        while True:
            switcher.poll()
    except KeyboardInterrupt:
        print("Done")


def main():
    parser = argparse.ArgumentParser(description="Control an SW-AV series A/V switcher")
    parser.add_argument("--channel", type=int, default=1, help="Serial channel number, 1 = COM1 / /dev/ttyS0 (default: 1)")
    parser.add_argument("--device", default=None, help="Serial device path, overrides --channel (e.g. /dev/ttyUSB0)")
    parser.add_argument("--timeout", type=float, default=0.5, help="Read timeout in seconds (default: 0.5)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Status command
    subparsers.add_parser("status", help="Show identity, modes and input status")

    # Select command
    select_parser = subparsers.add_parser("select", help="Select an input")
    select_parser.add_argument("port", type=int, help="Input number")
    kind = select_parser.add_mutually_exclusive_group()
    kind.add_argument("--audio", action="store_true", help="Select audio only")
    kind.add_argument("--video", action="store_true", help="Select video only")

    # Mode command
    mode_parser = subparsers.add_parser("mode", help="Show or set the front panel switch mode")
    mode_parser.add_argument("mode", nargs="?", choices=["normal", "auto"], help="Mode to set")

    # Mute command
    mute_parser = subparsers.add_parser("mute", help="Show or set audio/video mute")
    mute_parser.add_argument("target", choices=["video", "audio"], help="What to mute")
    mute_parser.add_argument("state", nargs="?", choices=["on", "off"], help="Mute on or off")

    # Watch command
    subparsers.add_parser("watch", help="Log notifications sent by the switcher")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    try:
        with SWAVSwitcher(args.channel, port_name=args.device, read_timeout=args.timeout) as switcher:
            if args.command == "status":
                show_status(switcher)
            elif args.command == "select":
                select_input(switcher, args.port, args.audio, args.video)
            elif args.command == "mode":
                switch_mode(switcher, args.mode)
            elif args.command == "mute":
                mute(switcher, args.target, args.state)
            elif args.command == "watch":
                watch(switcher)
    except SwitcherError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
