import os


class Cache:
    def __init__(self, config: dict | None = None) -> None:
        cache_cfg = (config or {}).get("cache", {})
        self.CACHE_LENGTH: int = int(cache_cfg.get("cache_length", os.getenv("CACHE_LENGTH", "5000")))
        if self.CACHE_LENGTH <= 0:
            raise ValueError("CACHE_LENGTH must be a positive integer")
