from datetime import datetime, timezone

import pytest
import requests

from backend.errors import UpstreamDataError, UpstreamUnavailableError
from backend.leaderboard import WagerRecord
from backend.periods import TimeWindow
from backend.upstream import JsonFetcher, RainbetProvider, Raw365Provider

UTC = timezone.utc
WINDOW = TimeWindow(datetime(2025, 11, 1, tzinfo=UTC), datetime(2025, 11, 30, 23, 59, 59, tzinfo=UTC))


class FakeResponse:
    def __init__(self, status=200, body=None, raw=None):
        self.status_code = status
        self.body = body
        self.raw = raw

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError('%s error' % self.status_code)

    def json(self):
        if self.raw is not None:
            raise ValueError('not json')
        return self.body


class FakeSession:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def test_fetcher_returns_json():
    session = FakeSession(FakeResponse(body={'ok': 1}))
    fetch = JsonFetcher(timeout=3, session=session)
    assert fetch('http://x', {'a': 1}) == {'ok': 1}
    assert session.calls == [('http://x', {'a': 1}, 3)]


def test_fetcher_retries_connection_errors():
    session = FakeSession(requests.ConnectionError('down'), requests.Timeout('slow'), FakeResponse(body=[]))
    fetch = JsonFetcher(retries=2, backoff=0, session=session)
    assert fetch('http://x') == []
    assert len(session.calls) == 3


def test_fetcher_gives_up_after_retries():
    session = FakeSession(*[requests.ConnectionError('down')] * 3)
    fetch = JsonFetcher(retries=2, backoff=0, session=session)
    with pytest.raises(UpstreamUnavailableError):
        fetch('http://x')
    assert len(session.calls) == 3


def test_fetcher_does_not_retry_http_errors():
    session = FakeSession(FakeResponse(status=400))
    fetch = JsonFetcher(retries=2, backoff=0, session=session)
    with pytest.raises(UpstreamUnavailableError):
        fetch('http://x')
    assert len(session.calls) == 1


def test_fetcher_non_json_body_is_bad_data():
    fetch = JsonFetcher(session=FakeSession(FakeResponse(raw='<html>')))
    with pytest.raises(UpstreamDataError):
        fetch('http://x')


def test_rainbet_params_and_parse():
    calls = []

    def fetch_json(url, params):
        calls.append((url, params))
        return {'affiliates': [{'username': 'alice', 'wagered_amount': '12.50'}]}

    provider = RainbetProvider('https://rainbet.test/affiliates', 'secret')
    records = provider.fetch(WINDOW, fetch_json)
    assert records == [WagerRecord('alice', 12.5)]
    assert calls == [('https://rainbet.test/affiliates', {
        'start_at': '2025-11-01', 'end_at': '2025-11-30', 'key': 'secret',
    })]


def test_raw365_params_and_parse():
    calls = []

    def fetch_json(url, params):
        calls.append(params)
        return {'results': [{'username': 'bob', 'wager': 0}]}

    provider = Raw365Provider('https://raw365.test/lb', 'k')
    assert provider.fetch(WINDOW, fetch_json) == [WagerRecord('bob', 0.0)]
    assert calls[0] == {'start': '2025-11-01T00:00:00.000Z', 'end': '2025-11-30T23:59:59.000Z', 'key': 'k'}
    assert provider.filter_non_positive
    assert not RainbetProvider.filter_non_positive


@pytest.mark.parametrize('payload', [
    {},
    {'affiliates': None},
    [],
    {'affiliates': [{'username': 'x'}]},
    {'affiliates': [{'username': 'x', 'wagered_amount': 'lots'}]},
    {'affiliates': [{'username': 'x', 'wagered_amount': 'NaN'}]},
    {'affiliates': [{'username': 'x', 'wagered_amount': 'inf'}]},
    {'affiliates': [{'username': 'x', 'wagered_amount': '1e400'}]},
    {'affiliates': [{'username': None, 'wagered_amount': '5'}]},
    {'affiliates': [{'username': 42, 'wagered_amount': '5'}]},
])
def test_malformed_payload(payload):
    provider = RainbetProvider('https://rainbet.test', 'k')
    with pytest.raises(UpstreamDataError):
        provider.fetch(WINDOW, lambda url, params: payload)


def test_missing_configuration():
    with pytest.raises(UpstreamUnavailableError):
        Raw365Provider('', 'k').fetch(WINDOW, lambda url, params: {})
    with pytest.raises(UpstreamUnavailableError):
        RainbetProvider('https://rainbet.test', '').fetch(WINDOW, lambda url, params: {})


def test_raw365_null_username_is_bad_data():
    provider = Raw365Provider('https://raw365.test/lb', 'k')
    with pytest.raises(UpstreamDataError):
        provider.fetch(WINDOW, lambda url, params: {'results': [{'username': None, 'wager': 5}]})


def test_fetcher_opens_a_session_per_call(monkeypatch):
    opened = []

    class CountingSession(FakeSession):
        def __init__(self):
            super().__init__(FakeResponse(body={'ok': 1}))
            opened.append(self)

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

    monkeypatch.setattr(requests, 'Session', CountingSession)
    fetch = JsonFetcher(timeout=3)
    assert fetch('http://x') == {'ok': 1}
    assert fetch('http://x') == {'ok': 1}
    assert len(opened) == 2
