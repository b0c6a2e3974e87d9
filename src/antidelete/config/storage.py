import os
from pathlib import Path

_DEFAULT_DATA_DIR = Path("data")


class Storage:
    def __init__(self, config: dict | None = None) -> None:
        storage_cfg = (config or {}).get("storage", {})
        self.DB_PATH: str = str(
            storage_cfg.get("db_path", os.getenv("DB_PATH", str(_DEFAULT_DATA_DIR / "deleted_messages.db")))
        )
        self.MEDIA_DIR: str = str(
            storage_cfg.get("media_dir", os.getenv("MEDIA_DIR", str(_DEFAULT_DATA_DIR / "deleted_media")))
        )
