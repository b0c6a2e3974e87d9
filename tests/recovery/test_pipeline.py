import asyncio

import pytest

from antidelete.memory.cache import MessageCache
from antidelete.messages.model import MessageIdentity
from antidelete.recovery import DeletionCorrelator, RecoveryPipeline, RecoveryResolver
from antidelete.storage import MediaStore

OWNER = "999@s.whatsapp.net"


def _pipeline(bridge, store, tmp_path, capacity=100, owner=OWNER):
    cache = MessageCache(capacity)
    resolver = RecoveryResolver(bridge, MediaStore(tmp_path / "media"), timeout=5)
    return RecoveryPipeline(
        cache,
        DeletionCorrelator(cache),
        resolver,
        store,
        bridge,
        owner_jid=owner,
        task_timeout=5,
    )


@pytest.mark.asyncio
async def test_text_deletion_produces_one_record(fake_bridge, fake_store, tmp_path, make_envelope, updates):
    pipeline = _pipeline(fake_bridge, fake_store, tmp_path)
    pipeline.ingest(make_envelope("123@g.us", "ABC", {"conversation": "hello"}))

    pipeline.handle_update(updates["revoke"]("123@g.us", "ABC"))
    await pipeline.drain()

    [record] = fake_store.records
    assert record.text_content == "hello"
    assert record.media_path is None
    assert record.content_kind == "conversation"
    assert MessageIdentity("123@g.us", "ABC") not in pipeline.cache

    [(jid, payload)] = fake_bridge.sent
    assert jid == OWNER
    assert payload["text"].endswith("hello")


@pytest.mark.asyncio
async def test_replayed_deletion_is_processed_once(fake_bridge, fake_store, tmp_path, make_envelope, updates):
    pipeline = _pipeline(fake_bridge, fake_store, tmp_path)
    pipeline.ingest(make_envelope())

    first = pipeline.handle_update(updates["revoke"]())
    second = pipeline.handle_update(updates["revoke"]())
    third = pipeline.handle_update(updates["stub"]())
    await pipeline.drain()

    assert first is not None
    assert second is None and third is None
    assert len(fake_store.records) == 1
    assert len(fake_bridge.sent) == 1


@pytest.mark.asyncio
async def test_deletion_without_cached_content_is_dropped(fake_bridge, fake_store, tmp_path, make_envelope, updates):
    pipeline = _pipeline(fake_bridge, fake_store, tmp_path)
    pipeline.ingest(make_envelope(msg_id="KEEP"))

    assert pipeline.handle_update(updates["stub"]("123@g.us", "MISSING")) is None
    await pipeline.drain()

    assert fake_store.records == []
    assert fake_bridge.sent == []
    assert pipeline.cache.identities() == [MessageIdentity("123@g.us", "KEEP")]


@pytest.mark.asyncio
async def test_both_encodings_behave_identically(tmp_path, make_envelope, updates, bridge_factory, store_factory):
    outcomes = {}
    for name in ("revoke", "stub"):
        bridge, store = bridge_factory(), store_factory()
        pipeline = _pipeline(bridge, store, tmp_path / name)
        pipeline.ingest(make_envelope())
        pipeline.handle_update(updates[name]())
        await pipeline.drain()

        [record] = store.records
        outcomes[name] = (record.content_kind, record.text_content, record.chat, record.sender, len(bridge.sent))

    assert outcomes["revoke"] == outcomes["stub"]


@pytest.mark.asyncio
async def test_unreachable_media_degrades_but_still_records(fake_bridge, fake_store, tmp_path, make_envelope, updates):
    fake_bridge.media = None
    pipeline = _pipeline(fake_bridge, fake_store, tmp_path)
    pipeline.ingest(make_envelope(message={"imageMessage": {"mimetype": "image/jpeg", "caption": "cat"}}))

    pipeline.handle_update(updates["revoke"]())
    await pipeline.drain()

    [record] = fake_store.records
    assert record.content_kind == "imageMessage"
    assert record.media_path is None
    [(_, payload)] = fake_bridge.sent
    assert "Media file could not be recovered" in payload["text"]


@pytest.mark.asyncio
async def test_housekeeping_status_video_is_recorded_as_video(fake_bridge, fake_store, tmp_path, make_envelope, updates):
    pipeline = _pipeline(fake_bridge, fake_store, tmp_path)
    pipeline.ingest(
        make_envelope(
            remote_jid="status@broadcast",
            msg_id="S1",
            participant="777@s.whatsapp.net",
            message={
                "senderKeyDistributionMessage": {"groupId": "status@broadcast"},
                "videoMessage": {"mimetype": "video/mp4"},
            },
        )
    )

    pipeline.handle_update(updates["stub"]("status@broadcast", "S1"))
    await pipeline.drain()

    [record] = fake_store.records
    assert record.content_kind == "videoMessage"
    assert record.is_status is True
    [(_, payload)] = fake_bridge.sent
    assert payload["video"] == fake_bridge.media
    assert payload["caption"].startswith("🚨 *DELETED STATUS UPDATE* 🚨")


@pytest.mark.asyncio
async def test_store_failure_does_not_block_delivery(fake_bridge, fake_store, tmp_path, make_envelope, updates):
    fake_store.fail = True
    pipeline = _pipeline(fake_bridge, fake_store, tmp_path)
    pipeline.ingest(make_envelope())

    pipeline.handle_update(updates["revoke"]())
    await pipeline.drain()

    assert fake_store.records == []
    assert len(fake_bridge.sent) == 1


@pytest.mark.asyncio
async def test_delivery_failure_keeps_store_write(fake_bridge, fake_store, tmp_path, make_envelope, updates):
    fake_bridge.fail_send = True
    pipeline = _pipeline(fake_bridge, fake_store, tmp_path)
    pipeline.ingest(make_envelope())

    pipeline.handle_update(updates["revoke"]())
    await pipeline.drain()

    assert len(fake_store.records) == 1
    assert pipeline.pending == 0


@pytest.mark.asyncio
async def test_missing_owner_skips_forwarding(fake_bridge, fake_store, tmp_path, make_envelope, updates):
    pipeline = _pipeline(fake_bridge, fake_store, tmp_path, owner=None)
    pipeline.ingest(make_envelope())

    pipeline.handle_update(updates["revoke"]())
    await pipeline.drain()

    assert len(fake_store.records) == 1
    assert fake_bridge.sent == []


@pytest.mark.asyncio
async def test_slow_media_does_not_block_ingestion(fake_store, tmp_path, make_envelope, updates):
    release = asyncio.Event()

    class SlowBridge:
        def __init__(self):
            self.sent = []

        async def download_media(self, envelope):
            await release.wait()
            return b"late"

        async def send_message(self, jid, payload):
            self.sent.append(payload)

    bridge = SlowBridge()
    pipeline = _pipeline(bridge, fake_store, tmp_path)
    pipeline.ingest(make_envelope(msg_id="IMG", message={"imageMessage": {"mimetype": "image/jpeg"}}))
    pipeline.handle_update(updates["revoke"]("123@g.us", "IMG"))
    await asyncio.sleep(0)

    # Recovery is parked on the download; new content is still cached immediately.
    assert pipeline.ingest(make_envelope(msg_id="NEXT")) is not None
    assert MessageIdentity("123@g.us", "NEXT") in pipeline.cache
    assert fake_store.records == []

    release.set()
    await pipeline.drain()
    assert len(fake_store.records) == 1
    assert bridge.sent[0]["image"] == b"late"


@pytest.mark.asyncio
async def test_capacity_one_evicts_first_identity(fake_bridge, fake_store, tmp_path, make_envelope, updates):
    pipeline = _pipeline(fake_bridge, fake_store, tmp_path, capacity=1)
    pipeline.ingest(make_envelope(msg_id="FIRST"))
    pipeline.ingest(make_envelope(msg_id="SECOND"))

    assert pipeline.cache.get(MessageIdentity("123@g.us", "FIRST")) is None
    assert pipeline.handle_update(updates["revoke"]("123@g.us", "FIRST")) is None
    await pipeline.drain()
    assert fake_store.records == []


def test_protocol_messages_are_never_ingested(fake_bridge, fake_store, tmp_path, make_envelope):
    pipeline = _pipeline(fake_bridge, fake_store, tmp_path)
    env = make_envelope(message={"protocolMessage": {"type": 0, "key": {"remoteJid": "123@g.us", "id": "X"}}})

    assert pipeline.ingest(env) is None
    assert len(pipeline.cache) == 0
