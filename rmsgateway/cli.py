"""List the channels defined in a channel file and look one up by name."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import Optional, Sequence

from rmsgateway.channels import Channel, ChannelFileError, find_channel, read_channels
from rmsgateway.rms import DFLT_SERVICECODE

_FIELDS = (
    "basecall",
    "callsign",
    "gridsquare",
    "frequency",
    "mode",
    "autoonly",
    "baud",
    "power",
    "height",
    "gain",
    "direction",
    "hours",
    "groupreference",
    "servicecode",
    "statuschecker",
)


def _shown(value: Optional[str]) -> str:
    return "(null)" if value is None else value


def format_channel(channel: Channel, heading: str = "Found channel") -> str:
    """Return a readable description of channel, one field per line."""
    lines = [f"{heading} '{_shown(channel.name)}' (active={_shown(channel.active)})"]
    lines.extend(f"\t{name:>14} = {_shown(getattr(channel, name))}" for name in _FIELDS)
    return "\n".join(lines) + "\n"


def main(argv: Optional[Sequence[str]] = None) -> int:
    """List every channel in the file, then the one matching name and callsign."""
    parser = argparse.ArgumentParser(description="Show gateway channel definitions.")
    parser.add_argument("chanfile", nargs="?", default="channels.xml")
    parser.add_argument("name", nargs="?", default="radio")
    parser.add_argument("callsign", nargs="?", default="N0CALL-10")
    options = parser.parse_args(argv)

    try:
        channels = read_channels(options.chanfile)
    except ChannelFileError as exc:
        print(f"warning: {exc}", file=sys.stderr)
        return 0

    for channel in channels:
        if not channel.servicecode:
            channel = replace(channel, servicecode=DFLT_SERVICECODE)
        sys.stdout.write(format_channel(channel))

    match = find_channel(options.chanfile, options.name, options.callsign)
    if match is not None:
        sys.stdout.write(format_channel(match, "Found channel (by name)"))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())