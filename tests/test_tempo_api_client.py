import threading
import unittest

import requests

from tempo_tray.cache import TTLCache
from tempo_tray.data_sources import TempoApiClient
from tempo_tray.domain import RefreshRequest, TempoDayResponse, TempoNowResponse
from tempo_tray.exceptions import DecodeError, TransientFetchError

BASE = "https://api.example/api"


class DummyResp:
    def __init__(self, content, status_code=200):
        self.content = content
        self.status_code = status_code


class DummySession:
    def __init__(self, responses=None, error=None):
        self.responses = dict(responses or {})
        self.error = error
        self.calls = []
        self.closed = False

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.error is not None:
            raise self.error
        return self.responses[url]

    def close(self):
        self.closed = True


class FakeClock:
    def __init__(self):
        self.t = 0.0

    def __call__(self):
        return self.t


class TestTempoApiClient(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.cache = TTLCache(clock=self.clock)

    def _client(self, session):
        return TempoApiClient(self.cache, base_url=BASE + "/", timeout=3.0, cache_ttl=1800, session=session)

    def test_miss_fetches_decodes_and_caches(self):
        url = f"{BASE}/jourTempo/today"
        session = DummySession({url: DummyResp(b'{"codeJour":3}')})
        client = self._client(session)

        day = client.fetch_day(RefreshRequest.TODAY)

        self.assertIsInstance(day, TempoDayResponse)
        self.assertEqual(day.code_jour, 3)
        self.assertEqual(session.calls, [(url, 3.0)])
        entry = self.cache.peek(url)
        self.assertEqual(entry.raw_body, b'{"codeJour":3}')
        self.assertEqual(entry.expires_at, 1800)

    def test_hit_skips_network(self):
        url = f"{BASE}/now"
        self.cache.put(url, b'{"tarifKwh":0.1568,"libTarif":"HP Bleu"}', ttl=60)
        session = DummySession()
        now = self._client(session).fetch_now()
        self.assertIsInstance(now, TempoNowResponse)
        self.assertAlmostEqual(now.tarif_kwh, 0.1568)
        self.assertEqual(now.lib_tarif, "HP Bleu")
        self.assertEqual(session.calls, [])

    def test_corrupt_cache_entry_is_a_decode_error_not_a_miss(self):
        url = f"{BASE}/jourTempo/tomorrow"
        self.cache.put(url, b"not json", ttl=60)
        session = DummySession({url: DummyResp(b'{"codeJour":1}')})
        with self.assertRaises(DecodeError):
            self._client(session).fetch_day(RefreshRequest.TOMORROW)
        self.assertEqual(session.calls, [])

    def test_use_cache_false_bypasses_fresh_entry_and_rewrites_it(self):
        url = f"{BASE}/jourTempo/today"
        self.cache.put(url, b'{"codeJour":1}', ttl=60)
        session = DummySession({url: DummyResp(b'{"codeJour":2}')})
        day = self._client(session).fetch_day(RefreshRequest.TODAY, use_cache=False)
        self.assertEqual(day.code_jour, 2)
        self.assertEqual(self.cache.get(url), (b'{"codeJour":2}', True))

    def test_non_success_status_raises_and_does_not_cache(self):
        url = f"{BASE}/now"
        session = DummySession({url: DummyResp(b'{"tarifKwh":1}', status_code=503)})
        with self.assertRaises(TransientFetchError) as ctx:
            self._client(session).fetch_now()
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertIsNone(self.cache.peek(url))

    def test_timeout_raises_transient_error(self):
        session = DummySession(error=requests.Timeout("slow"))
        with self.assertRaises(TransientFetchError):
            self._client(session).fetch_now()
        self.assertEqual(len(self.cache), 0)

    def test_connection_error_raises_transient_error(self):
        session = DummySession(error=requests.ConnectionError("down"))
        with self.assertRaises(TransientFetchError):
            self._client(session).fetch_day(RefreshRequest.TODAY)

    def test_undecodable_network_payload_is_not_cached(self):
        url = f"{BASE}/jourTempo/today"
        session = DummySession({url: DummyResp(b'{"codeJour":')})
        with self.assertRaises(DecodeError):
            self._client(session).fetch_day(RefreshRequest.TODAY)
        self.assertIsNone(self.cache.peek(url))

    def test_fetch_uses_request_response_model(self):
        url = f"{BASE}/now"
        session = DummySession({url: DummyResp(b'{"tarifKwh":0.2,"libTarif":"HC"}')})
        result = self._client(session).fetch(RefreshRequest.NOW)
        self.assertIsInstance(result, TempoNowResponse)

    def test_each_thread_gets_its_own_session(self):
        url = f"{BASE}/now"
        created = []

        def factory():
            session = DummySession({url: DummyResp(b'{"tarifKwh":0.2}')})
            created.append(session)
            return session

        client = TempoApiClient(self.cache, base_url=BASE, session_factory=factory)

        def fetch_twice():
            client.fetch_now(use_cache=False)
            client.fetch_now(use_cache=False)

        threads = [threading.Thread(target=fetch_twice) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(len(created), 3)
        self.assertEqual([len(s.calls) for s in created], [2, 2, 2])
        client.close()
        self.assertTrue(all(s.closed for s in created))

    def test_injected_session_is_shared_and_closed(self):
        session = DummySession()
        client = self._client(session)
        seen = []
        t = threading.Thread(target=lambda: seen.append(client.session))
        t.start()
        t.join()
        self.assertIs(seen[0], session)
        self.assertIs(client.session, session)
        client.close()
        self.assertTrue(session.closed)

    def test_fetch_day_rejects_now_request(self):
        with self.assertRaises(ValueError):
            self._client(DummySession()).fetch_day(RefreshRequest.NOW)


if __name__ == "__main__":
    unittest.main()
