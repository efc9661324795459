from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


@dataclass
class CacheConfig:
    default_capacity: int = 1024
    memoize_capacity: int = 256


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def load_config(env_path: Optional[str] = None) -> CacheConfig:
    if env_path:
        load_dotenv(env_path)
    else:
        load_dotenv()
    return CacheConfig(
        default_capacity=_int_env("LRU_CACHE_CAPACITY", 1024),
        memoize_capacity=_int_env("LRU_MEMOIZE_CAPACITY", 256),
    )
