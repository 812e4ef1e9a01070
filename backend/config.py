import os

from dotenv import load_dotenv

load_dotenv()


def _int(name, default):
    return int(os.getenv(name, default))


def _float(name, default):
    return float(os.getenv(name, default))


class Config:
    PORT = _int('PORT', 5000)
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'

    # upstream http
    UPSTREAM_TIMEOUT = _float('UPSTREAM_TIMEOUT', 10)
    UPSTREAM_RETRIES = _int('UPSTREAM_RETRIES', 2)

    # provider A
    RAINBET_API_URL = os.getenv('RAINBET_API_URL', 'https://services.rainbet.com/v1/external/affiliates')
    RAINBET_API_KEY = os.getenv('RAINBET_API_KEY', '')

    # provider B, no public default
    RAW365_API_URL = os.getenv('RAW365_API_URL', '')
    RAW365_API_KEY = os.getenv('RAW365_API_KEY', '')
