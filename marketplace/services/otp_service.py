# marketplace/services/otp_service.py
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import redis

from marketplace.domain.errors import OtpStatus
from marketplace.utils.retry import redis_retry
from marketplace.utils.settings import OTP_TTL_SECONDS
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

OTP_MIN = 100000
OTP_MAX = 999999


@dataclass(frozen=True)
class OtpRecord:
    code: str
    expires_at: datetime


def generate_code() -> str:
    #jednostajnie z [100000, 999999]
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


class InMemoryOtpStore:
    """
    Kody trzymane w pamieci procesu, pod jednym mutexem.
    Wygasle wpisy sprzatane leniwie przy nastepnej weryfikacji danego klucza.
    """

    def __init__(self):
        self._records: dict[str, OtpRecord] = {}
        self._lock = threading.Lock()

    def put(self, key: str, record: OtpRecord, ttl: int) -> None:
        with self._lock:
            self._records[key] = record

    def consume(self, key: str, code: str, now: datetime) -> OtpStatus:
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return OtpStatus.EXPIRED

            if now > record.expires_at:
                del self._records[key]
                return OtpStatus.MISMATCH if record.code != code else OtpStatus.EXPIRED

            if record.code != code:
                return OtpStatus.MISMATCH

            del self._records[key]
            return OtpStatus.VERIFIED

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


#LUA porownaj i usun, atomowo
#  0 -> brak klucza (wygasl albo juz zuzyty)
# -1 -> inny kod
#  1 -> zgodny, klucz usuniety
_CONSUME_LUA = """
local current = redis.call('GET', KEYS[1])
if not current then
    return 0
end
if current ~= ARGV[1] then
    return -1
end
redis.call('DEL', KEYS[1])
return 1
"""

_CONSUME_RESULTS = {
    0: OtpStatus.EXPIRED,
    -1: OtpStatus.MISMATCH,
    1: OtpStatus.VERIFIED,
}


class RedisOtpStore:
    """
    -kody w redisie z natywnym TTL (SET EX), nadpisanie = nowy kod i nowy czas
    -weryfikacja i usuniecie jednym skryptem lua
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        if client is None:
            from marketplace.utils.settings import REDIS_URL

            client = redis.Redis.from_url(url or REDIS_URL, decode_responses=True)
        self.redis = client
        self._consume = self.redis.register_script(_CONSUME_LUA)

    @redis_retry()
    def put(self, key: str, record: OtpRecord, ttl: int) -> None:
        self.redis.set(name=key, value=record.code, ex=ttl)

    @redis_retry()
    def consume(self, key: str, code: str, now: datetime) -> OtpStatus:
        #wygasanie pilnuje redis, now niepotrzebne
        res = self._consume(keys=[key], args=[code])
        return _CONSUME_RESULTS[int(res)]


class OtpGate:
    """
    Jednorazowe kody do resetu hasla.
    Klucz to (scope, email) - konta kupujacych i sprzedawcow sa rozdzielone.

    NoPending -> Pending(code, expiry) -> Consumed | Expired
    Ponowne issue() nadpisuje kod i restartuje czas.
    """

    def __init__(
        self,
        store,
        ttl_seconds: int = OTP_TTL_SECONDS,
        now: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self._now = now or (lambda: datetime.now(timezone.utc))

    @staticmethod
    def key(scope: str, email: str) -> str:
        return f"otp:{scope}:{email.lower()}"

    def issue(self, scope: str, email: str) -> OtpRecord:
        record = OtpRecord(
            code=generate_code(),
            expires_at=self._now() + timedelta(seconds=self.ttl_seconds),
        )
        self.store.put(self.key(scope, email), record, self.ttl_seconds)
        logger.info(f"Wydano kod OTP dla {scope}:{email}, wazny do {record.expires_at.isoformat()}")
        return record

    def verify(self, scope: str, email: str, code: str) -> OtpStatus:
        status = self.store.consume(self.key(scope, email), str(code).strip(), self._now())
        logger.info(f"Weryfikacja OTP dla {scope}:{email}: {status.value}")
        return status
