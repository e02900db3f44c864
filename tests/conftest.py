"""Shared fixtures: a real Ed25519 key pair and signed Flask requests."""
import json
import os

os.environ.setdefault('LOCAL_DEV', '1')

import pytest  # noqa: E402
from flask import Request  # noqa: E402
from nacl.signing import SigningKey  # noqa: E402
from werkzeug.test import EnvironBuilder  # noqa: E402

TIMESTAMP = '1700000000'


@pytest.fixture
def signing_key():
    return SigningKey.generate()


@pytest.fixture
def public_key(signing_key):
    return signing_key.verify_key.encode().hex()


@pytest.fixture
def env(public_key):
    return {
        'DISCORD_PUBLIC_KEY': public_key,
        'DISCORD_APPLICATION_ID': '123456',
        'DISCORD_TOKEN': 'bot-token',
    }


def build_request(method='POST', body='', headers=None) -> Request:
    builder = EnvironBuilder(path='/', method=method, data=body, headers=headers or {})
    return Request(builder.get_environ())


@pytest.fixture
def signed_request(signing_key):
    """Build a POST request signed with the fixture key.

    Pass a dict to have it serialized, or a str to sign it verbatim.
    """
    def make(payload, timestamp=TIMESTAMP, signature=None):
        body = payload if isinstance(payload, str) else json.dumps(payload)
        if signature is None:
            signature = signing_key.sign(timestamp.encode() + body.encode()).signature.hex()
        return build_request('POST', body, {
            'Content-Type': 'application/json',
            'X-Signature-Ed25519': signature,
            'X-Signature-Timestamp': timestamp,
        })
    return make
