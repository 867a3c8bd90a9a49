"""Support library for Winlink RMS packet radio gateways: configuration, CMS hosts, channels, secure login and hooks."""

__version__ = "0.1.0"