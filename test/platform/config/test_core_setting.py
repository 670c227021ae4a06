import pytest
from pydantic import ValidationError

from src.platform.config.core_setting import Settings
from src.platform.constant.path import BASE_DIR


ENV_EXAMPLE = BASE_DIR / '.env.example'


def test_defaults_are_consistent():
    loaded = Settings(_env_file=None)

    assert loaded.HOLD_TTL_SECONDS == 600
    assert loaded.AVAILABILITY_CACHE_TTL_SECONDS <= loaded.SWEEP_INTERVAL_SECONDS


@pytest.mark.parametrize(
    'overrides,message',
    [
        ({'HOLD_TTL_SECONDS': 0}, 'HOLD_TTL_SECONDS'),
        ({'SWEEP_INTERVAL_SECONDS': 0}, 'SWEEP_INTERVAL_SECONDS must be positive'),
        (
            {'SWEEP_INTERVAL_SECONDS': 2, 'AVAILABILITY_CACHE_TTL_SECONDS': 5},
            'AVAILABILITY_CACHE_TTL_SECONDS',
        ),
        ({'TRANSIENT_RETRY_ATTEMPTS': 0}, 'TRANSIENT_RETRY_ATTEMPTS'),
    ],
)
def test_rejects_inconsistent_timing(overrides, message):
    with pytest.raises(ValidationError, match=message):
        Settings(_env_file=None, **overrides)


def test_cors_origins_from_comma_separated_string():
    loaded = Settings(_env_file=None, BACKEND_CORS_ORIGINS='http://a.io, http://b.io')

    assert loaded.BACKEND_CORS_ORIGINS == ['http://a.io', 'http://b.io']


def test_shipped_env_example_loads():
    loaded = Settings(_env_file=ENV_EXAMPLE)

    assert loaded.BACKEND_CORS_ORIGINS == ['http://localhost:3000']
    assert loaded.HOLD_TTL_SECONDS == 600


@pytest.mark.parametrize(
    'raw,expected',
    [
        ('http://a.io,http://b.io', ['http://a.io', 'http://b.io']),
        ('["http://a.io", "http://b.io"]', ['http://a.io', 'http://b.io']),
        ('http://a.io,', ['http://a.io']),
    ],
)
def test_cors_origins_from_env_file(tmp_path, raw, expected):
    env_file = tmp_path / '.env'
    env_file.write_text(f'BACKEND_CORS_ORIGINS={raw}\n')

    assert Settings(_env_file=env_file).BACKEND_CORS_ORIGINS == expected
