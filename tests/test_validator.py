"""Tests for the top-level Validator and settings."""

from dataclasses import dataclass
from pathlib import Path

import pytest

from validata.config import DatabaseConfig, Settings
from validata.errors import RuleSyntaxError
from validata.lookup import SQLAlchemyLookup
from validata.messages import default_catalog
from validata.schema import rule_field
from validata.validator import Validator, validate


@dataclass
class SignUp:
    email: str = rule_field("email", "required|email", default="")
    age: int = rule_field("age", "required|min:18", default=0)


@dataclass
class Sloppy:
    name: str = rule_field("name", "required|frobnicate", default="")


# =============================================================================
# Settings
# =============================================================================


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("VALIDATA_LOCALE", "VALIDATA_STRICT_RULES", "VALIDATA_LOG_LEVEL",
                     "VALIDATA_LOCALE_DIR", "DATABASE_URL"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings.from_env()
        assert settings == Settings()
        assert settings.default_locale == "en"
        assert settings.database is None

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("VALIDATA_LOCALE", "fr")
        monkeypatch.setenv("VALIDATA_STRICT_RULES", "yes")
        monkeypatch.setenv("VALIDATA_LOG_LEVEL", "debug")
        monkeypatch.setenv("VALIDATA_LOCALE_DIR", str(tmp_path))
        monkeypatch.setenv("DATABASE_URL", "sqlite:///app.db")
        settings = Settings.from_env()
        assert settings.default_locale == "fr"
        assert settings.strict_rules is True
        assert settings.log_level == "DEBUG"
        assert settings.locale_dir == Path(tmp_path)
        assert settings.database == DatabaseConfig(url="sqlite:///app.db")

    def test_postgres_url_uses_psycopg(self):
        config = DatabaseConfig(url="postgresql://user:pw@db/app")
        assert config.sqlalchemy_url == "postgresql+psycopg://user:pw@db/app"

    def test_sqlite_url_unchanged(self):
        config = DatabaseConfig(url="sqlite:///app.db")
        assert config.sqlalchemy_url == "sqlite:///app.db"


# =============================================================================
# Validator
# =============================================================================


class TestValidator:
    @pytest.mark.asyncio
    async def test_validate(self):
        validator = Validator(settings=Settings())
        assert await validator.validate(SignUp(email="john.doe@gmail.com", age=30)) is None

    def test_validate_sync(self):
        validator = Validator(settings=Settings())
        result = validator.validate_sync(SignUp(email="john.doe@gmail.com", age=15), locale="fr")
        assert result == {"email": None, "age": "Le champ age doit être d'au moins 18."}

    def test_bundled_catalog_by_default(self):
        assert Validator(settings=Settings()).catalog is default_catalog()

    def test_default_locale_from_settings(self):
        validator = Validator(settings=Settings(default_locale="fr"))
        result = validator.validate_sync(SignUp(email="john.doe@gmail.com"))
        assert result["age"] == "Le champ age est requis."

    def test_locale_dir_from_settings(self, tmp_path):
        (tmp_path / "en.yaml").write_text('required: "Missing: {0}"\n', encoding="utf-8")
        validator = Validator(settings=Settings(locale_dir=tmp_path))
        result = validator.validate_sync(SignUp(age=20))
        assert result["email"] == "Missing: email"

    def test_lookup_built_from_database_settings(self, tmp_path):
        settings = Settings(database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'app.db'}"))
        validator = Validator(settings=settings)
        assert isinstance(validator.lookup, SQLAlchemyLookup)
        validator.lookup.dispose()

    def test_no_lookup_without_database(self):
        assert Validator(settings=Settings()).lookup is None

    def test_lax_rules_by_default(self):
        validator = Validator(settings=Settings())
        assert validator.validate_sync(Sloppy(name="x")) is None

    def test_strict_rules(self):
        validator = Validator(settings=Settings(strict_rules=True))
        with pytest.raises(RuleSyntaxError):
            validator.validate_sync(Sloppy(name="x"))


class TestModuleLevelValidate:
    @pytest.mark.asyncio
    async def test_uses_default_validator(self):
        result = await validate(SignUp(email="john.doe@gmail.com"), locale="en")
        assert result == {"email": None, "age": "The age field is required."}
