# rmsgateway

Support code for a Winlink RMS packet-radio gateway. It reads the gateway
configuration, version and environment files, the CMS host table and the XML
channel definitions, computes the secure gateway login response, carries out
the line-oriented login exchange with a CMS host, and runs optional sysop
hook scripts.

It uses only the Python standard library.

## Installation

```
pip install .
```

Run the tests with:

```
pip install ".[test]"
pytest
```

## Modules

- `rmsgateway.config`
  - `load_config(cfgfile, hookdir_default=None)` reads a `NAME=value` file
    into a `Config`. `GWCALL` is required, must be at most nine characters
    long, and is returned in upper case. A missing `HOOKDIR` takes
    `hookdir_default`. Problems are raised as `ConfigError` with a
    `ConfigErrorCode`.
  - `load_version(verfile)` returns a `VersionInfo`. `PACKAGE`, `PROGRAM`
    and `LABEL` are required. Problems are raised as `VersionError` with a
    `VersionErrorCode`.
  - `load_env(envfile, environ=None)` sets variables from `NAME=value`
    lines into `os.environ` or the mapping given. Text after `#` is ignored,
    and only lines with exactly two fields are used. It returns the
    assignments it made. It raises `OSError` if the file cannot be opened.
- `rmsgateway.mapname`
  - `fmapname(mapfile, logicals, fail_on_not_found=False)` and
    `mapname(logicals, fail_on_not_found=False)` return a dict from each
    logical name to its value, or to `None` when the name is missing.
    `mapname` uses the file named by `MAPDB`. Failures are raised as
    `MapError` with a `MapErrorCode`. `map_error_message` returns the text
    for a code.
- `rmsgateway.cms`
  - `parse_cms_line`, `read_cms_hosts` and `find_cms_host` read the
    `host:port:password` table into `CmsHost` entries. `find_cms_host`
    returns the first entry whose host starts with the given name.
  - `format_cms_entry` and `write_cms_entry` write an entry back out.
  - `get_cms_list(path, stat_dir)` returns usable hosts as `CmsNode`s,
    least recently used first. Order comes from the access time of
    `stat_dir/<host>`, and a missing file counts as time 0. Entries with no
    host, a port outside 1024–65535, or no password are skipped.
    `insert_cms_node` keeps such a list in time order.
- `rmsgateway.channels`
  - `parse_channels(text)`, `read_channels(path)` and
    `find_channel(path, name, callsign)` read an `rmschannels` XML document
    into `Channel` records.
  - The service code is cut to 16 characters.
  - `find_channel` matches on a name prefix and a case-insensitive callsign
    prefix.
  - Unreadable or invalid files raise `ChannelFileError`.
- `rmsgateway.challenge`
  - `sgl_challenge_response(challenge, password)` returns the eight-digit
    answer to a CMS `;SQ:` challenge.
  - `challenged_password` returns the underlying number.
- `rmsgateway.login`
  - `cms_login(conn, config, channel, usercall)` and
    `sgl_process(conn, password, usercall, gwcall)` carry out the secure
    gateway login over a connected socket or stream. They return the final
    `SGLState` or raise `LoginError`.
  - `telnet_process` runs the older telnet-style chat.
  - `expect_send` waits for a string and then sends one. It raises
    `ExpectTimeout` if the string does not arrive in time.
- `rmsgateway.net`
  - `cms_connect(node, timeout, out)` opens a TCP connection to a CMS host
    and raises `ConnectError` on failure.
  - `readln` reads one line up to an end-of-line byte.
  - `rf_encode` and `sendrf` translate newlines and add a final carriage
    return according to `SendFlag`.
  - `send_datagram` sends one UDP datagram.
  - `err` sends an error message and exits with status 1.
- `rmsgateway.hooks`
  - `run_hook(hookdir, hook_name, *args)` runs `hookdir/hook_name` through
    `/bin/sh`.
  - A missing hook script counts as success. It returns `False` when the
    hook directory is missing or the script fails.
- `rmsgateway.rms`
  - Gateway limits and defaults, such as `MAXGWCALL`, `DFLT_SERVICECODE`
    and `CONNECT_TIMEOUT`.
  - Hook names.
  - The enums `SGLState`, `GatewayErrorCode` and `SendFlag`.
  - The `UserStat` record.
- `rmsgateway.util`
  - `CharSet`, `downcase`, `read_line`, `read_line_cr`, `file_exists`,
    `file_age` and `print_file`.

## Example

```python
from rmsgateway.config import load_config
from rmsgateway.channels import find_channel
from rmsgateway.challenge import sgl_challenge_response

cfg = load_config("/etc/rmsgw/gateway.conf")
chan = find_channel(cfg.channelfile, "radio", cfg.gwcall)
if chan is not None:
    print(sgl_challenge_response("12345678", chan.password))
```

## Checking a channel file

```
rmsgw-chantest [chanfile] [name] [callsign]
```

The arguments default to `channels.xml`, `radio` and `N0CALL-10`. The
command lists every channel in the file, then the channel that matches the
name and callsign, if there is one. A channel with no service code is listed
with the default `PUBLIC`. If the file cannot be read, a warning goes to
standard error.

## What it does not do

This package is a library of building blocks, not a running gateway. It does
not provide:

- a service that accepts AX.25 connections from radio users and relays them
  to a CMS;
- a process that reports channels and versions to Winlink;
- shared-memory status tracking for gateway processes.