from antidelete.messages.model import MessageIdentity
from antidelete.messages.normalizer import content_kind, normalize, unwrap


def test_plain_text_is_normalized(make_envelope):
    cached = normalize(make_envelope(), clock=lambda: 42.0)

    assert cached is not None
    assert cached.identity == MessageIdentity("123@g.us", "ABC")
    assert cached.content_kind == "conversation"
    assert cached.content == {"conversation": "hello"}
    assert cached.received_at == 42.0
    assert cached.source_timestamp == 1_700_000_000_000
    assert cached.wrapper is None


def test_ephemeral_and_view_once_wrappers_are_unwrapped(make_envelope):
    image = {"imageMessage": {"caption": "look", "mimetype": "image/jpeg"}}
    for wrapper in ("ephemeralMessage", "viewOnceMessage", "viewOnceMessageV2"):
        env = make_envelope(message={wrapper: {"message": image}})
        cached = normalize(env)

        assert cached.content_kind == "imageMessage"
        assert cached.content == image
        assert cached.wrapper == wrapper
        # The envelope keeps its original (wrapped) shape for media download.
        assert cached.raw_envelope is env


def test_protocol_messages_are_not_cached(make_envelope):
    env = make_envelope(message={"protocolMessage": {"type": 0, "key": {"id": "X"}}})
    assert normalize(env) is None

    wrapped = make_envelope(
        message={"ephemeralMessage": {"message": {"protocolMessage": {"type": 0}}}}
    )
    assert normalize(wrapped) is None


def test_empty_bodies_are_discarded(make_envelope):
    assert normalize(make_envelope(message={})) is None
    assert normalize({"key": {"remoteJid": "1@s.whatsapp.net", "id": "X"}}) is None
    assert normalize({}) is None


def test_missing_key_fields_get_defaults():
    cached = normalize({"message": {"conversation": "hi"}})

    assert cached.identity.conversation_id == "unknown"
    assert cached.identity.message_id.isdigit()


def test_sender_prefers_participant(make_envelope):
    env = make_envelope(participant="555@s.whatsapp.net")
    assert normalize(env).sender == "555@s.whatsapp.net"
    assert normalize(make_envelope()).sender == "123@g.us"


def test_long_timestamp_shape(make_envelope):
    env = make_envelope(ts={"low": 1_700_000_001, "high": 0, "unsigned": True})
    assert normalize(env).source_timestamp == 1_700_000_001_000


def test_unwrap_and_kind_helpers():
    assert unwrap(None) == (None, None)
    body = {"conversation": "x"}
    assert unwrap(body) == (body, None)
    assert content_kind({}) is None
    assert content_kind({"senderKeyDistributionMessage": {}, "imageMessage": {}}) == (
        "senderKeyDistributionMessage"
    )
