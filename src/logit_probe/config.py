"""Configuration system for logit-probe.

Uses pydantic-settings for declarative, layered configuration:
init kwargs -> environment variables (LOGIT_PROBE_*) -> .env file -> field defaults.

The activation switch is ``LOGIT_PROBE_DEBUG_LOGITS``. Its absence is the
normal disabled state; any value enables reporting and the literal
``"verbose"`` additionally enables decoded text and row statistics.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

VERBOSE_SETTING = "verbose"


class LogitProbeConfig(BaseSettings):
    """Configuration for logit-probe.

    Resolution order: init kwargs -> env vars (LOGIT_PROBE_*) -> .env file -> defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="LOGIT_PROBE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Activation ---

    debug_logits: str | None = Field(
        default=None,
        description="Reporting switch: unset disables, 'verbose' adds text and stats",
    )

    # --- Reporting ---

    top_k: int = Field(
        default=10,
        ge=0,
        description="Number of highest-scoring tokens reported per row",
    )
    sink: str = Field(
        default="stderr",
        description="Report destination: 'stderr', 'stdout', 'logging'",
    )

    @property
    def is_enabled(self) -> bool:
        """Whether the activation switch is present (with any value)."""
        return self.debug_logits is not None

    @property
    def is_verbose(self) -> bool:
        """Whether the activation switch is exactly ``'verbose'``."""
        return self.debug_logits == VERBOSE_SETTING
