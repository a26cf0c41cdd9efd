#!/usr/bin/env python3
"""
Serial Monitor

Opens a serial port, prints everything it receives, and sends each line
typed on stdin.

Usage:
    serialsession-monitor --list
    serialsession-monitor --port /dev/ttyUSB0 --baudrate 115200

Example:
    serialsession-monitor -p COM3 -b 9600 --parity even --eol crlf --hex
"""

import argparse
import logging
import sys
from typing import List, Optional

from .catalog import BAUD_RATES, DATA_BITS, PARITY_BITS, STOP_BITS, enumerate_ports
from .session import SerialSession

LINE_ENDINGS = {
    "lf": "\n",
    "cr": "\r",
    "crlf": "\r\n",
    "none": "",
}


def format_packet(packet: bytes, as_hex: bool = False, encoding: str = "utf-8") -> str:
    """Render an inbound packet for the terminal."""
    if as_hex:
        return " ".join(f"{b:02X}" for b in packet)
    return packet.decode(encoding, errors="replace")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Interactive serial port monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument('--port', '-p',
                        help='Serial port (e.g. /dev/ttyUSB0, COM3)')
    parser.add_argument('--baudrate', '-b', type=int, default=115200,
                        help='Baud rate (default: 115200)')
    parser.add_argument('--parity', default='none',
                        help=f"Parity: {', '.join(PARITY_BITS)} (default: none)")
    parser.add_argument('--databits', type=int, default=8,
                        help='Data bits (default: 8)')
    parser.add_argument('--stopbits', default='one',
                        help=f"Stop bits: {', '.join(STOP_BITS)} (default: one)")
    parser.add_argument('--encoding', default='utf-8',
                        help='Text encoding for sent and printed data (default: utf-8)')
    parser.add_argument('--eol', choices=sorted(LINE_ENDINGS), default='lf',
                        help='Line ending appended to each sent line (default: lf)')
    parser.add_argument('--hex', action='store_true',
                        help='Print received bytes as hex')
    parser.add_argument('--list', action='store_true',
                        help='List available ports and common settings, then exit')
    parser.add_argument('--log-level', default='WARNING',
                        help='Logging level (default: WARNING)')
    return parser


def print_catalog() -> None:
    ports = enumerate_ports()
    print("Available ports:")
    if not ports:
        print("  (none found)")
    for device, description in ports:
        print(f"  {device:<20} {description}")
    print()
    print(f"Baud rates: {', '.join(BAUD_RATES)}")
    print(f"Data bits:  {', '.join(DATA_BITS)}")
    print(f"Parity:     {', '.join(PARITY_BITS)}")
    print(f"Stop bits:  {', '.join(STOP_BITS)}")


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for `serialsession-monitor`."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    if args.list:
        print_catalog()
        return 0

    if not args.port:
        print("Error: --port is required (use --list to see available ports)", file=sys.stderr)
        return 2

    eol = LINE_ENDINGS[args.eol]

    with SerialSession(args.port, args.baudrate, args.parity, args.databits,
                       args.stopbits, encoding=args.encoding) as session:
        error = session.current_error
        if error:
            print(error, file=sys.stderr)
            return 1

        def on_packet(packet: bytes):
            end = "\n" if args.hex else ""
            print(format_packet(packet, args.hex, args.encoding), end=end, flush=True)

        session.add_listener(on_packet)

        print(f"Opening {args.port} at {args.baudrate} baud...")
        if not session.open():
            print(session.current_error, file=sys.stderr)
            return 1
        print("Connected! Type to send, Ctrl+D or Ctrl+C to quit.\n")

        try:
            for line in sys.stdin:
                payload = line.rstrip("\r\n") + eol
                if not payload:
                    continue
                if not session.send(payload):
                    print(session.current_error, file=sys.stderr)
                    if not session.is_open:
                        return 1
        except KeyboardInterrupt:
            print("\nShutting down...")

    return 0


if __name__ == "__main__":
    sys.exit(main())
