import logging
from typing import Any, Dict

from antidelete.config import core
from antidelete.recovery.contracts import DeliverySink

logger = logging.getLogger(__name__)

STARTUP_NOTICE = "🤖 Bot is now active and monitoring for deleted messages!"


async def handle(client: DeliverySink, data: Dict[str, Any]) -> None:
    """Announce readiness to the owner once the session is open."""

    connection = data.get("connection")
    if data.get("qr"):
        logger.info("Bridge is waiting for QR pairing; scan it from the bridge console.")

    if connection == "open":
        logger.info("Bot connected successfully")
        if not core.OWNER_JID:
            return
        try:
            await client.send_message(core.OWNER_JID, {"text": STARTUP_NOTICE})
        except Exception as e:
            logger.error("Failed to send startup message: %s", e)

    elif connection == "close":
        # Reconnecting is the bridge's job; we only record why the session ended.
        error = (data.get("lastDisconnect") or {}).get("error") or {}
        # Baileys wraps the code in a Boom error's ``output``.
        status_code = (error.get("output") or {}).get("statusCode", error.get("statusCode"))
        logger.info("Connection closed (status code %s)", status_code)
