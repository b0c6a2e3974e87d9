import os, sys
import tempfile
from pathlib import Path

import pytest

# Add src/ to sys.path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

# Ensure required environment variables for config validation
_TMP = Path(tempfile.mkdtemp(prefix="antidelete-tests-"))
os.environ.setdefault("BRIDGE_URL", "http://bridge.test")
os.environ.setdefault("OWNER_JID", "999@s.whatsapp.net")
os.environ.setdefault("DB_PATH", str(_TMP / "deleted_messages.db"))
os.environ.setdefault("MEDIA_DIR", str(_TMP / "deleted_media"))


def envelope(
    remote_jid="123@g.us",
    msg_id="ABC",
    message=None,
    participant=None,
    ts=1_700_000_000,
):
    """Build a Baileys-shaped inbound message envelope."""
    key = {"remoteJid": remote_jid, "id": msg_id, "fromMe": False}
    if participant:
        key["participant"] = participant
    return {
        "key": key,
        "message": message if message is not None else {"conversation": "hello"},
        "messageTimestamp": ts,
    }


def revoke_update(remote_jid="123@g.us", msg_id="ABC"):
    """Deletion announced through an embedded protocolMessage."""
    return {
        "key": {"remoteJid": remote_jid, "id": "REVOKE-" + msg_id},
        "update": {
            "message": {
                "protocolMessage": {
                    "type": 0,
                    "key": {"remoteJid": remote_jid, "id": msg_id},
                }
            }
        },
    }


def stub_update(remote_jid="123@g.us", msg_id="ABC"):
    """Deletion announced through messageStubType == 1."""
    return {
        "key": {"remoteJid": remote_jid, "id": msg_id},
        "update": {"messageStubType": 1},
    }


class FakeBridge:
    """Records sends and serves (or fails) media downloads."""

    def __init__(self, media: bytes | None = b"\x89PNG-bytes", fail_send: bool = False):
        self.media = media
        self.fail_send = fail_send
        self.sent = []
        self.downloads = []

    async def download_media(self, envelope):
        self.downloads.append(envelope)
        if self.media is None:
            raise RuntimeError("media reference expired")
        return self.media

    async def send_message(self, jid, payload):
        if self.fail_send:
            raise RuntimeError("sink unavailable")
        self.sent.append((jid, payload))


class FakeStore:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.records = []

    async def append(self, record):
        if self.fail:
            raise RuntimeError("disk full")
        self.records.append(record)
        return len(self.records)


@pytest.fixture
def make_envelope():
    return envelope


@pytest.fixture
def updates():
    return {"revoke": revoke_update, "stub": stub_update}


@pytest.fixture
def fake_bridge():
    return FakeBridge()


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def bridge_factory():
    return FakeBridge


@pytest.fixture
def store_factory():
    return FakeStore
