"""Runtime bootstrap helpers."""

from __future__ import annotations

from anchorsvc.app.runtime import AnchorRuntime
from anchorsvc.config import Settings, load_anchor_keys


def build_runtime(settings: Settings) -> AnchorRuntime:
    """Build the anchor runtime. Configuration errors are raised as ``StartupConfigError``."""

    keys = load_anchor_keys(settings)
    settings.anchor_target()
    return AnchorRuntime(settings, keys)
