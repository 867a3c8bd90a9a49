"""Loading of the gateway configuration, environment and version files."""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from typing import MutableMapping, Optional, Union

from rmsgateway.mapname import MapError, fmapname
from rmsgateway.rms import MAXGWCALL
from rmsgateway.util import read_line

log = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

VER_FALLBACK_PACKAGE = "Linux RMS Gateway"
VER_FALLBACK_PROGRAM = "RMS Gateway"
VER_FALLBACK_LABEL = "0.0.0"

_ASCII_UPPER = str.maketrans(
    "abcdefghijklmnopqrstuvwxyz", "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
)

_CONFIG_NAMES = {
    "GWCALL": "gwcall",
    "CHANNELFILE": "channelfile",
    "GRIDSQUARE": "gridsquare",
    "BANNERFILE": "bannerfile",
    "LOGFACILITY": "logfacility",
    "LOGMASK": "logmask",
    "PYTHON": "python",
    "VERSIONUPD": "versionupd",
    "CHANNELUPD": "channelupd",
    "RMSGWENV": "rmsgwenv",
    "RMSGWACIENV": "rmsgwacienv",
    "HOOKDIR": "hookdir",
}

_VERSION_NAMES = {
    "PACKAGE": "package",
    "PROGRAM": "program",
    "LABEL": "label",
    "REVISION": "revision",
    "DATE": "date",
    "AUTHOR": "author",
    "ID": "id",
}


class ConfigErrorCode(enum.IntEnum):
    """Reasons a configuration cannot be loaded."""

    MAP_ERROR = 1
    MISSING_FILE = 2
    INVALID_CALL = 3
    MISSING_CALL = 4


_CONFIG_MESSAGES = {
    ConfigErrorCode.MAP_ERROR: "cannot read configuration file",
    ConfigErrorCode.MISSING_FILE: "missing configuration file",
    ConfigErrorCode.INVALID_CALL: "invalid gateway callsign",
    ConfigErrorCode.MISSING_CALL: "missing gateway callsign in configuration",
}


class ConfigError(Exception):
    """Raised when the configuration file is unusable."""

    def __init__(self, code: ConfigErrorCode) -> None:
        self.code = code
        super().__init__(_CONFIG_MESSAGES[code])


class VersionErrorCode(enum.IntEnum):
    """Reasons a version file cannot be loaded."""

    MAP_ERROR = 1
    MISSING_FILE = 2
    MISSING_PACKAGE = 3
    MISSING_PROGRAM = 4
    MISSING_LABEL = 5


_VERSION_MESSAGES = {
    VersionErrorCode.MAP_ERROR: "cannot read version file",
    VersionErrorCode.MISSING_FILE: "missing version file",
    VersionErrorCode.MISSING_PACKAGE: "version file has no PACKAGE",
    VersionErrorCode.MISSING_PROGRAM: "version file has no PROGRAM",
    VersionErrorCode.MISSING_LABEL: "version file has no LABEL",
}


class VersionError(Exception):
    """Raised when the version file is unusable."""

    def __init__(self, code: VersionErrorCode) -> None:
        self.code = code
        super().__init__(_VERSION_MESSAGES[code])


@dataclass
class Config:
    """Gateway configuration values; unset values are None."""

    gwcall: Optional[str] = None
    channelfile: Optional[str] = None
    gridsquare: Optional[str] = None
    bannerfile: Optional[str] = None
    authfile: Optional[str] = None
    logfacility: Optional[str] = None
    logmask: Optional[str] = None
    python: Optional[str] = None
    versionupd: Optional[str] = None
    channelupd: Optional[str] = None
    rmsgwenv: Optional[str] = None
    rmsgwacienv: Optional[str] = None
    hookdir: Optional[str] = None


@dataclass
class VersionInfo:
    """Package version details reported by the gateway."""

    package: str
    program: str
    label: str
    revision: Optional[str] = None
    date: Optional[str] = None
    author: Optional[str] = None
    id: Optional[str] = None


def load_config(cfgfile: PathLike, hookdir_default: Optional[str] = None) -> Config:
    """Read the gateway configuration from cfgfile.

    The gateway callsign is required, at most nine characters long, and is
    returned in upper case. HOOKDIR falls back to hookdir_default.
    """
    log.debug("using config file %s", cfgfile)
    try:
        values = fmapname(cfgfile, _CONFIG_NAMES)
    except MapError as exc:
        raise ConfigError(ConfigErrorCode.MAP_ERROR) from exc

    conf = Config(**{attr: values[name] for name, attr in _CONFIG_NAMES.items()})

    if conf.gwcall is None:
        raise ConfigError(ConfigErrorCode.MISSING_CALL)
    if len(conf.gwcall) > MAXGWCALL:
        raise ConfigError(ConfigErrorCode.INVALID_CALL)
    conf.gwcall = conf.gwcall.translate(_ASCII_UPPER)

    if conf.hookdir is None:
        conf.hookdir = hookdir_default
    return conf


def load_env(
    envfile: PathLike, environ: Optional[MutableMapping[str, str]] = None
) -> dict[str, str]:
    """Set variables from lines of the form NAME=value in envfile.

    Text after '#' is ignored; runs of '=' separate fields and empty fields
    are dropped; only lines with exactly two fields are used. Returns the
    assignments made. Raises OSError if the file cannot be opened and
    ValueError if some variables could not be set.
    """
    target = os.environ if environ is None else environ
    log.debug("using environment file %s", envfile)
    try:
        stream = open(envfile, "r")
    except OSError as exc:
        log.error(
            "can't open environment file '%s' - errno = %d (%s)",
            envfile, exc.errno or 0, exc.strerror,
        )
        raise

    assigned: dict[str, str] = {}
    failed: list[str] = []
    with stream:
        while (line := read_line(stream)) is not None:
            line = line.split("#", 1)[0]
            fields = [field for field in line.split("=") if field]
            if len(fields) != 2:
                continue
            name, value = fields
            log.debug("setenv %s=%s", name, value)
            try:
                target[name] = value
            except (ValueError, TypeError) as exc:
                log.error("setenv for %s failed - %s", name, exc)
                failed.append(name)
                continue
            assigned[name] = value

    if failed:
        raise ValueError(f"could not set environment variables: {', '.join(failed)}")
    return assigned


def load_version(verfile: PathLike) -> VersionInfo:
    """Read the package version details from verfile.

    PACKAGE, PROGRAM and LABEL are required; the rest may be missing.
    """
    log.debug("using version file %s", verfile)
    try:
        values = fmapname(verfile, _VERSION_NAMES)
    except MapError as exc:
        raise VersionError(VersionErrorCode.MAP_ERROR) from exc

    if values["PACKAGE"] is None:
        raise VersionError(VersionErrorCode.MISSING_PACKAGE)
    if values["PROGRAM"] is None:
        raise VersionError(VersionErrorCode.MISSING_PROGRAM)
    if values["LABEL"] is None:
        raise VersionError(VersionErrorCode.MISSING_LABEL)

    return VersionInfo(**{attr: values[name] for name, attr in _VERSION_NAMES.items()})