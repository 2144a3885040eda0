"""Tests for loading and saving the provider config list."""

import json

import pytest
from pydantic import ValidationError
from sqlalchemy import select

from holiday_calendar.models.setting import Setting
from holiday_calendar.schemas.provider_config import ProviderConfig, ProviderType
from holiday_calendar.services.provider_config_store import (
    PROVIDER_CONFIGS_KEY,
    default_provider_configs,
    load_provider_configs,
    save_provider_configs,
)


class TestProviderConfigStore:
    async def test_defaults_when_nothing_saved(self, db_session):
        configs = await load_provider_configs(db_session)

        assert [c.id for c in configs] == ["nager-us", "calendarific-us"]
        assert all(not c.enabled for c in configs)

    async def test_save_then_load(self, db_session):
        config = ProviderConfig(
            id="custom-eu",
            name="EU Holidays",
            type=ProviderType.CUSTOM,
            endpoint="https://example.test/{year}",
            response_path_to_holidays="data.items",
            category="company",
        )
        await save_provider_configs(db_session, [config])

        loaded = await load_provider_configs(db_session)
        assert loaded == [config]

    async def test_stored_as_camel_case_json(self, db_session):
        configs = default_provider_configs()
        await save_provider_configs(db_session, configs)

        setting = (await db_session.execute(
            select(Setting).where(Setting.key == PROVIDER_CONFIGS_KEY)
        )).scalar_one()
        stored = json.loads(setting.value)
        assert stored[1]["id"] == "calendarific-us"
        assert stored[1]["apiKey"] == ""
        assert stored[1]["typeFilter"] == "observance,national"
        assert "api_key" not in stored[1]

    async def test_save_overwrites(self, db_session):
        await save_provider_configs(db_session, default_provider_configs())
        await save_provider_configs(db_session, [])

        assert await load_provider_configs(db_session) == []

    async def test_reads_base_url_alias(self, db_session):
        db_session.add(Setting(key=PROVIDER_CONFIGS_KEY, value=json.dumps([{
            "id": "nager-gb",
            "name": "Nager GB",
            "type": "nager",
            "baseUrl": "https://date.nager.at/api/v3",
            "country": "GB",
            "enabled": True,
        }])))
        await db_session.flush()

        [config] = await load_provider_configs(db_session)
        assert config.endpoint == "https://date.nager.at/api/v3"
        assert config.category == "federal"

    async def test_corrupt_value_raises(self, db_session):
        db_session.add(Setting(key=PROVIDER_CONFIGS_KEY, value="{not json"))
        await db_session.flush()

        with pytest.raises(ValidationError):
            await load_provider_configs(db_session)
