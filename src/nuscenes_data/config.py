"""
Loader configuration
"""
import os
from typing import Optional

from pydantic import BaseModel, Field

_FALSE_VALUES = {"0", "false", "no", "off"}


class LoaderConfig(BaseModel):
    """Dataset loading options"""

    # Integrity checking is on unless explicitly disabled
    check: bool = True
    max_workers: Optional[int] = Field(default=None, ge=1, description="Thread pool width")
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "LoaderConfig":
        check = os.getenv("NUSCENES_DATA_CHECK", "1").strip().lower() not in _FALSE_VALUES
        max_workers = os.getenv("NUSCENES_DATA_MAX_WORKERS")
        return cls(
            check=check,
            max_workers=int(max_workers) if max_workers else None,
            log_level=os.getenv("NUSCENES_DATA_LOG_LEVEL", "INFO"),
        )
