import pytest

from app.core.config import Settings


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("*", ["*"]),
        ("https://portal.example.com", ["https://portal.example.com"]),
        ("https://a.example.com, https://b.example.com,", ["https://a.example.com", "https://b.example.com"]),
    ],
)
def test_cors_origins_from_env(monkeypatch, raw, expected) -> None:
    monkeypatch.setenv("CORS_ORIGINS", raw)
    assert Settings().cors_origin_list == expected


def test_defaults(monkeypatch) -> None:
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    monkeypatch.delenv("ATTENDANCE_SETTINGS_TTL_SECONDS", raising=False)
    loaded = Settings()
    assert loaded.cors_origin_list == ["*"]
    assert loaded.attendance_settings_ttl_seconds == 30
    assert loaded.attendance_timezone == "Asia/Kolkata"


def test_settings_ttl_from_env(monkeypatch) -> None:
    monkeypatch.setenv("ATTENDANCE_SETTINGS_TTL_SECONDS", "0")
    assert Settings().attendance_settings_ttl_seconds == 0
