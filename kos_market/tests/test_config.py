import pytest
from pydantic import ValidationError

from kos_market.core.config import Environment, Settings


def make_settings(**overrides) -> Settings:
    values = {
        "db_user": "kos",
        "db_password": "secret",
        "db_name": "kos_market",
        "db_host": "db.internal",
        "db_port": 6543,
    }
    values.update(overrides)
    return Settings(**values)


def test_database_url_targets_asyncpg():
    url = make_settings().database_url

    assert url.drivername == "postgresql+asyncpg"
    assert url.username == "kos"
    assert url.password == "secret"
    assert url.host == "db.internal"
    assert url.port == 6543
    assert url.database == "kos_market"


def test_production_flag():
    assert make_settings(render_env=Environment.PRODUCTION).is_production
    assert not make_settings(render_env=Environment.STAGING).is_production


def test_pair_writes_are_atomic_by_default():
    settings = make_settings()
    assert settings.atomic_pair_writes is True
    assert make_settings(atomic_pair_writes=False).atomic_pair_writes is False


@pytest.mark.parametrize("page_size", [0, 101])
def test_admin_page_size_bounds(page_size):
    with pytest.raises(ValidationError):
        make_settings(admin_page_size=page_size)
