import threading
from datetime import datetime, timedelta, timezone

import fakeredis
import pytest

from marketplace.domain.errors import OtpStatus
from marketplace.services import otp_service
from marketplace.services.otp_service import InMemoryOtpStore, OtpGate, RedisOtpStore, generate_code


class Clock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def codes(monkeypatch):
    sequence = iter(["111111", "222222", "333333", "444444"])
    monkeypatch.setattr(otp_service, "generate_code", lambda: next(sequence))


@pytest.fixture(params=["memory", "redis"])
def gate(request):
    clock = Clock()
    if request.param == "memory":
        store = InMemoryOtpStore()
    else:
        store = RedisOtpStore(client=fakeredis.FakeRedis(decode_responses=True))
    return OtpGate(store, ttl_seconds=300, now=clock)


def test_generated_codes_are_six_digits():
    for _ in range(200):
        code = generate_code()
        assert len(code) == 6
        assert 100000 <= int(code) <= 999999


def test_issue_sets_five_minute_expiry():
    clock = Clock()
    gate = OtpGate(InMemoryOtpStore(), ttl_seconds=300, now=clock)

    record = gate.issue("user", "a@x.com")

    assert record.expires_at == clock.now + timedelta(minutes=5)


def test_wrong_then_right_then_replay(gate, codes):
    gate.issue("user", "a@x.com")

    assert gate.verify("user", "a@x.com", "999999") == OtpStatus.MISMATCH
    assert gate.verify("user", "a@x.com", "111111") == OtpStatus.VERIFIED
    assert gate.verify("user", "a@x.com", "111111") == OtpStatus.EXPIRED


def test_new_request_invalidates_previous_code(gate, codes):
    gate.issue("user", "a@x.com")
    gate.issue("user", "a@x.com")

    assert gate.verify("user", "a@x.com", "111111") in (OtpStatus.MISMATCH, OtpStatus.EXPIRED)
    assert gate.verify("user", "a@x.com", "222222") == OtpStatus.VERIFIED


def test_never_requested_is_expired(gate):
    assert gate.verify("user", "nobody@x.com", "123456") == OtpStatus.EXPIRED


def test_scopes_do_not_share_codes(gate, codes):
    gate.issue("user", "a@x.com")

    assert gate.verify("seller", "a@x.com", "111111") == OtpStatus.EXPIRED
    assert gate.verify("user", "a@x.com", "111111") == OtpStatus.VERIFIED


def test_expired_code_is_rejected_and_reclaimed(codes):
    clock = Clock()
    store = InMemoryOtpStore()
    gate = OtpGate(store, ttl_seconds=300, now=clock)
    gate.issue("user", "a@x.com")

    clock.advance(301)

    assert gate.verify("user", "a@x.com", "111111") == OtpStatus.EXPIRED
    assert len(store) == 0


def test_code_valid_until_expiry_instant(codes):
    clock = Clock()
    gate = OtpGate(InMemoryOtpStore(), ttl_seconds=300, now=clock)
    gate.issue("user", "a@x.com")

    clock.advance(300)

    assert gate.verify("user", "a@x.com", "111111") == OtpStatus.VERIFIED


def test_redis_store_uses_native_ttl(codes):
    client = fakeredis.FakeRedis(decode_responses=True)
    gate = OtpGate(RedisOtpStore(client=client), ttl_seconds=300)

    gate.issue("seller", "Shop@x.com")

    key = OtpGate.key("seller", "shop@x.com")
    assert client.get(key) == "111111"
    assert 0 < client.ttl(key) <= 300


def test_concurrent_verification_succeeds_once(codes):
    gate = OtpGate(InMemoryOtpStore(), ttl_seconds=300)
    gate.issue("user", "a@x.com")
    results = []
    barrier = threading.Barrier(8)

    def attempt():
        barrier.wait()
        results.append(gate.verify("user", "a@x.com", "111111"))

    threads = [threading.Thread(target=attempt) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(OtpStatus.VERIFIED) == 1
    assert results.count(OtpStatus.EXPIRED) == 7
