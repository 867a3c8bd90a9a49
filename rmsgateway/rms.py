"""Gateway-wide limits, defaults, states and session statistics."""

from __future__ import annotations

import enum
from dataclasses import dataclass

MAXBUF = 512
MAXGREETING = 80
MAXUSERCALL = 9
MAXGWCALL = 9
MAXBTEXT = 2048
MAXSERVICECODE = 16

DFLT_SERVICECODE = "PUBLIC"
DFLTPACLEN = 128

DFLT_VERSIONUPD = 86400
DFLT_CHANNELUPD = 7140

CONNECT_TIMEOUT = 5
CONV_TIMEOUT = 60

SECSPERDAY = 86400
SECSPERHOUR = 3600

HOOKSHELL = "/bin/sh"
MAXHOOKARGS = 128

START_RMSGW = "start-rmsgw"
END_RMSGW = "end-rmsgw"
PRE_RMSGW_SESSION = "pre-rmsgw-session"
POST_RMSGW_SESSION = "post-rmsgw-session"

START_RMSGW_ACI = "start-rmsgw_aci"
END_RMSGW_ACI = "end-rmsgw_aci"
PRE_RMSGW_ACI_CHANNEL_UPDATE = "pre-rmsgw_aci-channel-update"
POST_RMSGW_ACI_CHANNEL_UPDATE = "post-rmsgw_aci-channel-update"
PRE_RMSGW_ACI_VERSION_UPDATE = "pre-rmsgw_aci-version-update"
POST_RMSGW_ACI_VERSION_UPDATE = "post-rmsgw_aci-version-update"

_FATAL_LIMIT = -101


class SGLState(enum.IntEnum):
    """States of the secure gateway login exchange."""

    CALLSIGN = 0
    CALLSIGN_FAIL = 1
    CHALLENGE = 2
    CHALLENGE_FAIL = 3
    RESPONSE_SENT = 4
    LOGIN_COMPLETE = 5
    BAD_STATE = 6


class GatewayErrorCode(enum.IntEnum):
    """Result codes recorded for a gateway session."""

    LOGIN = -1
    TIMEOUT = 1
    SOCK = -101
    AX25 = -102
    SOCKIO = -103
    AX25IO = -104
    INVPORT = -105

    def is_fatal(self) -> bool:
        """Tell whether the code is in the fatal range."""
        return self.value <= _FATAL_LIMIT


class SendFlag(enum.IntFlag):
    """Options for sending data over the radio link."""

    NONE = 0
    EOL_XLATE = 0x00000001
    ADD_EOL = 0x00000002


@dataclass
class UserStat:
    """Statistics of one user session."""

    errcode: int = 0
    bytes_sent: int = 0
    bytes_recv: int = 0