"""Activation and verbosity gating for logit reports."""

from __future__ import annotations

from dataclasses import dataclass

from logit_probe.config import VERBOSE_SETTING, LogitProbeConfig


@dataclass(frozen=True, slots=True)
class ActivationPolicy:
    """Immutable answer to "should we report, and how much?".

    Built once (usually at engine startup) and handed to the reporter, so
    the reporting logic never reads the environment itself.

    Attributes:
        enabled: Reporting is active at all.
        verbose: Decoded token text and row statistics are included.
            Ignored when ``enabled`` is False.
    """

    enabled: bool = False
    verbose: bool = False

    def is_enabled(self) -> bool:
        return self.enabled

    def is_verbose(self) -> bool:
        return self.enabled and self.verbose

    @classmethod
    def from_setting(cls, value: str | None) -> ActivationPolicy:
        """Build a policy from the raw value of the activation switch.

        Args:
            value: ``None`` when the switch is absent, otherwise its value.
                Any value, including ``""``, enables basic mode; only
                ``"verbose"`` enables verbose mode.
        """
        if value is None:
            return cls()
        return cls(enabled=True, verbose=value == VERBOSE_SETTING)

    @classmethod
    def from_config(cls, config: LogitProbeConfig) -> ActivationPolicy:
        return cls(enabled=config.is_enabled, verbose=config.is_verbose)

    @classmethod
    def from_env(cls) -> ActivationPolicy:
        """Read the activation switch from the process environment once."""
        return cls.from_config(LogitProbeConfig())


DISABLED = ActivationPolicy()
BASIC = ActivationPolicy(enabled=True)
VERBOSE = ActivationPolicy(enabled=True, verbose=True)
