"""Platform configuration and the create_platform command."""
from unittest.mock import patch

from couples_chat.models.chat import Platform
from couples_chat.scripts.create_platform import main
from couples_chat.services.platform import create_platform, get_platform_config


def test_unknown_platform_degrades_to_none(db):
    assert get_platform_config(db, "nope") is None


def test_get_platform_config(db):
    create_platform(db, "acme", "Acme Love", features=["Love Notes"], mission_statement="Love, every day.")

    config = get_platform_config(db, "acme")

    assert config.name == "Acme Love"
    assert config.assistant_name == "Acme Love AI"
    assert config.features == ["Love Notes"]
    assert config.mission_statement == "Love, every day."


def test_inactive_platform_is_ignored(db):
    platform = create_platform(db, "acme", "Acme Love")
    platform.is_active = False
    db.commit()

    assert get_platform_config(db, "acme") is None


@patch("couples_chat.services.platform.cache")
def test_cached_config_skips_the_store(mock_cache, db):
    mock_cache.get_json.return_value = {"id": "p1", "platform_key": "acme", "name": "Cached Love"}

    config = get_platform_config(db, "acme")

    assert config.name == "Cached Love"
    assert db.query(Platform).count() == 0


def test_create_platform_command(db, capsys):
    assert main(["acme", "Acme Love", "acme.example"]) == 0
    assert "Created platform 'acme'" in capsys.readouterr().out

    platform = db.query(Platform).one()
    assert platform.domain == "acme.example"
    assert platform.is_active is True

    assert main(["acme", "Acme Again"]) == 1
    assert "already exists" in capsys.readouterr().err


def test_create_platform_command_usage(capsys):
    assert main([]) == 2
    assert "Usage:" in capsys.readouterr().err
