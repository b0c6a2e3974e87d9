import logging
import os

logger = logging.getLogger(__name__)


class Core:
    def __init__(self, config: dict | None = None) -> None:
        bridge_cfg = (config or {}).get("bridge", {})

        self.BRIDGE_URL: str | None = bridge_cfg.get("url") or os.getenv("BRIDGE_URL")
        self.BRIDGE_TIMEOUT: float = float(bridge_cfg.get("timeout", os.getenv("BRIDGE_TIMEOUT", "30")))

        # Recovered content is forwarded here; forwarding is skipped when unset.
        self.OWNER_JID: str | None = bridge_cfg.get("owner_jid") or os.getenv("OWNER_JID") or None

    def require(self) -> None:
        """Raise ``ValueError`` naming every setting the bot cannot start without."""

        required = [
            ("BRIDGE_URL", self.BRIDGE_URL),
        ]
        missing = [name for name, val in required if not val]
        if missing:
            raise ValueError(f"Missing environment variables: {', '.join(missing)}")

        if not self.OWNER_JID:
            logger.warning("OWNER_JID is not configured; recovered messages will not be forwarded.")
