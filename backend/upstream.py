"""Affiliate provider integrations.

A provider turns a window into request params and turns the JSON it gets
back into ``WagerRecord``s. The network call itself goes through a
``fetch_json(url, params)`` callable so the app can swap it out.
"""
import logging
import math
import time

import requests

from backend.errors import UpstreamDataError, UpstreamUnavailableError
from backend.leaderboard import WagerRecord
from backend.periods import isoformat_z

log = logging.getLogger(__name__)


class JsonFetcher:
    """GET a URL and decode its JSON body.

    Connection errors and timeouts are retried up to ``retries`` times;
    HTTP error statuses are not.
    """

    def __init__(self, timeout=10, retries=2, backoff=0.5, session=None):
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff
        # None: a fresh session per call
        self.session = session

    def _get(self, url, params):
        if self.session is not None:
            return self.session.get(url, params=params, timeout=self.timeout)
        with requests.Session() as session:
            return session.get(url, params=params, timeout=self.timeout)

    def __call__(self, url, params=None):
        attempt = 0
        while True:
            try:
                resp = self._get(url, params)
                break
            except (requests.ConnectionError, requests.Timeout) as exc:
                if attempt >= self.retries:
                    raise UpstreamUnavailableError('upstream unreachable: %s' % exc) from exc
                attempt += 1
                log.warning('upstream fetch failed (%s), retry %d/%d', exc, attempt, self.retries)
                time.sleep(self.backoff * attempt)
            except requests.RequestException as exc:
                raise UpstreamUnavailableError('upstream request failed: %s' % exc) from exc

        try:
            resp.raise_for_status()
        except requests.HTTPError as exc:
            raise UpstreamUnavailableError('upstream returned %s' % resp.status_code) from exc
        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamDataError('upstream returned a non-JSON body') from exc


def _records(payload, list_field, name_field, amount_field):
    if not isinstance(payload, dict) or not isinstance(payload.get(list_field), list):
        log.error('upstream payload has no %r list', list_field)
        raise UpstreamDataError('upstream payload is missing %r' % list_field)
    out = []
    for entry in payload[list_field]:
        try:
            name = entry[name_field]
            amount = float(entry[amount_field])
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamDataError('bad %r entry: %r' % (list_field, entry)) from exc
        if not isinstance(name, str) or not math.isfinite(amount):
            raise UpstreamDataError('bad %r entry: %r' % (list_field, entry))
        out.append(WagerRecord(name, amount))
    return out


class Provider:
    name = None
    url_setting = None
    key_setting = None
    filter_non_positive = False

    def __init__(self, base_url, api_key):
        self.base_url = base_url
        self.api_key = api_key

    @classmethod
    def from_config(cls, config):
        return cls(config.get(cls.url_setting), config.get(cls.key_setting))

    def params(self, window):
        raise NotImplementedError

    def parse(self, payload):
        raise NotImplementedError

    def fetch(self, window, fetch_json):
        if not self.base_url:
            raise UpstreamUnavailableError('%s is not configured' % self.url_setting)
        if not self.api_key:
            raise UpstreamUnavailableError('%s is not configured' % self.key_setting)
        params = dict(self.params(window), key=self.api_key)
        return self.parse(fetch_json(self.base_url, params))


class RainbetProvider(Provider):
    name = 'rainbet'
    url_setting = 'RAINBET_API_URL'
    key_setting = 'RAINBET_API_KEY'

    def params(self, window):
        return {
            'start_at': window.start.date().isoformat(),
            'end_at': window.end.date().isoformat(),
        }

    def parse(self, payload):
        # wagered_amount comes back as a numeric string
        return _records(payload, 'affiliates', 'username', 'wagered_amount')


class Raw365Provider(Provider):
    name = 'raw365'
    url_setting = 'RAW365_API_URL'
    key_setting = 'RAW365_API_KEY'
    filter_non_positive = True

    def params(self, window):
        return {'start': isoformat_z(window.start), 'end': isoformat_z(window.end)}

    def parse(self, payload):
        return _records(payload, 'results', 'username', 'wager')


PROVIDERS = {p.name: p for p in (RainbetProvider, Raw365Provider)}
