"""pumlwatch error types."""

from __future__ import annotations


class PumlWatchError(Exception):
    """Base exception for pumlwatch."""

    pass


class ConfigError(PumlWatchError):
    """Invalid or inconsistent configuration."""

    pass


class DiscoveryError(PumlWatchError):
    """The input tree cannot be enumerated at all."""

    def __init__(self, input_root, reason: str):
        self.input_root = input_root
        self.reason = reason
        super().__init__(f"cannot enumerate input directory {input_root}: {reason}")
