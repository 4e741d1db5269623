from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

ENV_PREFIX = "MOUNTGREP_"


@dataclass(frozen=True)
class GrepConfig:
    mount_point: str | None = None  # e.g. "/data"
    backend_url: str | None = None  # e.g. "http://127.0.0.1:7070"
    connect_timeout: float = 5.0
    request_timeout: float = 30.0
    log_level: str = "WARNING"

    @property
    def remote_enabled(self) -> bool:
        return bool(self.mount_point and self.backend_url)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GrepConfig:
        """Build a config from ``MOUNTGREP_*`` variables, defaults elsewhere."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            mount_point=env.get(f"{ENV_PREFIX}MOUNT") or defaults.mount_point,
            backend_url=env.get(f"{ENV_PREFIX}BACKEND_URL") or defaults.backend_url,
            connect_timeout=float(env.get(f"{ENV_PREFIX}CONNECT_TIMEOUT", defaults.connect_timeout)),
            request_timeout=float(env.get(f"{ENV_PREFIX}REQUEST_TIMEOUT", defaults.request_timeout)),
            log_level=env.get(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level).upper(),
        )
