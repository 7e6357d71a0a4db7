"""
Tests for the mint_token developer script.
"""

import json

import jwt
import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..', 'scripts'))

import mint_token  # noqa: E402
from shared.test_helpers import create_test_key_pair  # noqa: E402


@pytest.fixture
def key_pair():
    return create_test_key_pair()


@pytest.fixture
def weatherkit_env(monkeypatch, key_pair):
    """Populate the WeatherKit environment the script reads."""
    monkeypatch.setenv("WEATHERKIT_TEAM_ID", "TEAM123456")
    monkeypatch.setenv("WEATHERKIT_SERVICE_ID", "app.renfo.weather")
    monkeypatch.setenv("WEATHERKIT_KEY_ID", "KEY1234567")
    monkeypatch.setenv("WEATHERKIT_P8", key_pair.private_pem)
    monkeypatch.setenv("WEATHERKIT_TOKEN_TTL_SECONDS", "900")


def test_prints_token_json(weatherkit_env, key_pair, capsys):
    assert mint_token.main([]) == 0

    output = json.loads(capsys.readouterr().out)
    claims = jwt.decode(output["token"], key_pair.public_pem, algorithms=["ES256"], issuer="TEAM123456")
    assert output["kid"] == "KEY1234567"
    assert output["expires_at"] == claims["exp"]
    assert claims["exp"] - claims["iat"] == 900


def test_header_output_and_ttl_override(weatherkit_env, capsys):
    assert mint_token.main(["--header", "--ttl", "5"]) == 0

    line = capsys.readouterr().out.strip()
    assert line.startswith("Authorization: Bearer ")
    claims = jwt.decode(line.split(" ", 2)[2], options={"verify_signature": False})
    assert claims["exp"] - claims["iat"] == 300


def test_key_file(weatherkit_env, monkeypatch, key_pair, tmp_path, capsys):
    monkeypatch.setenv("WEATHERKIT_P8", "")
    key_file = tmp_path / "AuthKey.p8"
    key_file.write_text(key_pair.private_pem)

    assert mint_token.main(["--key-file", str(key_file)]) == 0
    assert json.loads(capsys.readouterr().out)["token"].count(".") == 2


def test_missing_configuration(weatherkit_env, monkeypatch, capsys):
    monkeypatch.setenv("WEATHERKIT_KEY_ID", "")

    assert mint_token.main([]) == 1
    assert "Missing required WeatherKit configuration" in capsys.readouterr().err


def test_bad_key(weatherkit_env, monkeypatch, capsys):
    monkeypatch.setenv("WEATHERKIT_P8", "AAAAAAAA")

    assert mint_token.main([]) == 1
    assert "not a valid PKCS8 private key" in capsys.readouterr().err
