"""Reading gateway channel definitions from the channels XML file."""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Optional, Union

from rmsgateway.rms import MAXSERVICECODE

log = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

_ROOT = "rmschannels"
_CHANNEL = "channel"
_ATTRIBUTES = ("name", "type", "active")
_ELEMENTS = (
    "basecall",
    "callsign",
    "password",
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


class ChannelFileError(Exception):
    """Raised when the channel file cannot be read or is not a channel file."""


@dataclass
class Channel:
    """One channel definition; values missing from the file are None.

    ``symbols`` holds every attribute and child element value by name.
    """

    name: Optional[str] = None
    type: Optional[str] = None
    active: Optional[str] = None
    basecall: Optional[str] = None
    callsign: Optional[str] = None
    password: Optional[str] = None
    gridsquare: Optional[str] = None
    frequency: Optional[str] = None
    mode: Optional[str] = None
    autoonly: Optional[str] = None
    baud: Optional[str] = None
    power: Optional[str] = None
    height: Optional[str] = None
    gain: Optional[str] = None
    direction: Optional[str] = None
    hours: Optional[str] = None
    groupreference: Optional[str] = None
    servicecode: Optional[str] = None
    statuschecker: Optional[str] = None
    symbols: dict[str, str] = field(default_factory=dict)


def _local_name(tag: object) -> str:
    """Return an element's name without namespace; '' for non-elements."""
    if not isinstance(tag, str):
        return ""
    return tag.rpartition("}")[2]


def _channel_from(element: ET.Element) -> Channel:
    values: dict[str, Optional[str]] = {}
    symbols: dict[str, str] = {}

    for attr in _ATTRIBUTES:
        value = element.get(attr)
        values[attr] = value
        if value is not None:
            symbols[attr] = value

    for child in element:
        tag = _local_name(child.tag)
        if not tag:
            continue
        content = "".join(child.itertext()).strip(" \t\n")
        symbols[tag] = content
        if tag in _ELEMENTS:
            values[tag] = content

    servicecode = values.get("servicecode")
    if servicecode is not None:
        values["servicecode"] = servicecode[:MAXSERVICECODE]

    return Channel(**values, symbols=symbols)


def parse_channels(text: Union[str, bytes]) -> list[Channel]:
    """Parse a channels document and return its channels in order."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ChannelFileError(f"cannot parse channel file: {exc}") from exc
    if _local_name(root.tag) != _ROOT:
        raise ChannelFileError(
            f"root element is '{_local_name(root.tag)}', expected '{_ROOT}'"
        )
    return [_channel_from(child) for child in root if _local_name(child.tag) == _CHANNEL]


def read_channels(path: PathLike) -> list[Channel]:
    """Read and parse the channel file at path."""
    try:
        with open(path, "rb") as stream:
            data = stream.read()
    except OSError as exc:
        raise ChannelFileError(f"cannot read channel file {path}: {exc.strerror}") from exc
    return parse_channels(data)


def find_channel(path: PathLike, name: str, callsign: str) -> Optional[Channel]:
    """Return the first channel matching name and callsign, or None.

    The channel name must start with name, and the channel callsign must
    start with callsign, ignoring case.
    """
    wanted_call = callsign.lower()
    for channel in read_channels(path):
        if channel.name is None or channel.callsign is None:
            continue
        if channel.name.startswith(name) and channel.callsign.lower().startswith(wanted_call):
            return channel
    return None