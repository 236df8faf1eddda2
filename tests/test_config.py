from __future__ import annotations

import os

import pytest

from app.config import get_google_sheets_settings, get_normalization_settings
from db.config import load_env_files, normalize_postgres_url, resolve_database_url


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_google_sheets_settings.cache_clear()
    get_normalization_settings.cache_clear()
    yield
    get_google_sheets_settings.cache_clear()
    get_normalization_settings.cache_clear()


class TestAppSettings:
    def test_sheet_settings_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("GOOGLE_SHEETS_CSV_URL", "https://example.test/export.csv")
        monkeypatch.setenv("GOOGLE_SHEETS_TIMEOUT_SECONDS", "0.2")
        monkeypatch.setenv("KPI_BOOTSTRAP_FROM_SHEETS", "off")

        settings = get_google_sheets_settings()

        assert settings.csv_url == "https://example.test/export.csv"
        assert settings.timeout_seconds == 1.0
        assert settings.bootstrap_on_empty_read is False

    def test_invalid_numbers_fall_back(self, monkeypatch) -> None:
        monkeypatch.setenv("GOOGLE_SHEETS_TIMEOUT_SECONDS", "soon")
        assert get_google_sheets_settings().timeout_seconds == 30.0

    def test_normalization_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("PERIOD_MIN_LENGTH", "10")
        monkeypatch.setenv("PERIOD_MAX_LENGTH", "5")
        monkeypatch.setenv("PERCENT_RESCALE_IMPLAUSIBLE_MAX", "5000")
        monkeypatch.setenv("PERIOD_ALLOW_RANGE_FALLBACK", "false")

        settings = get_normalization_settings()

        assert settings.period_min_length == 10
        assert settings.period_max_length == 10
        assert settings.allow_range_fallback is False
        assert settings.thresholds.implausible_max == 5000
        assert settings.thresholds.fraction_max == 1.0


class TestDatabaseUrl:
    def test_normalize_postgres_url(self) -> None:
        assert normalize_postgres_url("postgres://u:p@h/db") == "postgresql+psycopg://u:p@h/db"
        assert normalize_postgres_url("postgresql://u:p@h/db") == "postgresql+psycopg://u:p@h/db"
        assert normalize_postgres_url("postgresql+psycopg://u:p@h/db") == "postgresql+psycopg://u:p@h/db"

    def test_priority(self, monkeypatch) -> None:
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("CLOUD_DATABASE_URL", "postgres://cloud/db")
        monkeypatch.setenv("LOCAL_DATABASE_URL", "postgres://local/db")
        assert resolve_database_url() == "postgresql+psycopg://cloud/db"

        monkeypatch.setenv("ENVIRONMENT", "local")
        assert resolve_database_url() == "postgresql+psycopg://local/db"

        monkeypatch.setenv("DATABASE_URL", "postgres://direct/db")
        assert resolve_database_url() == "postgresql+psycopg://direct/db"

    def test_missing_url(self, monkeypatch) -> None:
        for name in ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL"):
            monkeypatch.delenv(name, raising=False)
        with pytest.raises(RuntimeError):
            resolve_database_url()


def test_env_files_do_not_override_process_env(tmp_path, monkeypatch) -> None:
    (tmp_path / ".env").write_text(
        "# comment\nexport KPI_TEST_NEW='from-file'\nKPI_TEST_EXISTING=from-file\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("KPI_TEST_EXISTING", "from-env")
    monkeypatch.setenv("KPI_TEST_NEW", "placeholder")
    monkeypatch.delenv("KPI_TEST_NEW")

    load_env_files(tmp_path)

    assert os.environ["KPI_TEST_NEW"] == "from-file"
    assert os.environ["KPI_TEST_EXISTING"] == "from-env"
