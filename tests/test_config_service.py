"""Per-tenant slot capacity configuration."""
import pytest

from models import SlotConfig, db


class TestGetConfig:

    def test_missing_config_defaults_to_one_and_is_stored(self, config_service):
        config = config_service.get_config("new@clinic.com")

        assert config.slots_per_hour == 1
        stored = db.session.get(SlotConfig, "new@clinic.com")
        assert stored is not None
        assert stored.slots_per_hour == 1

    def test_second_read_returns_stored_value(self, config_service):
        config_service.get_config("clinic@example.com")
        # stored row wins over a changed default
        config_service.default_slots_per_hour = 7

        assert config_service.get_config("clinic@example.com").slots_per_hour == 1

    def test_global_config_when_no_tenant(self, config_service):
        config = config_service.get_config(None)
        assert config.tenant == "default"

    def test_tenant_key_is_normalized(self, config_service):
        config_service.set_config("Clinic@Example.com ", 4)
        assert config_service.get_config("clinic@example.com").slots_per_hour == 4


class TestSetConfig:

    def test_upsert_creates_then_updates(self, config_service):
        config_service.set_config("a@b.com", 3)
        config_service.set_config("a@b.com", 5)

        assert SlotConfig.query.filter_by(tenant="a@b.com").count() == 1
        assert config_service.get_config("a@b.com").slots_per_hour == 5

    @pytest.mark.parametrize("value", ["abc", None, 0, -2, "", True, "9" * 30, 2 ** 31])
    def test_unusable_values_fall_back_to_one(self, config_service, value):
        config = config_service.set_config("a@b.com", value)
        assert config.slots_per_hour == 1

    def test_numeric_strings_are_parsed(self, config_service):
        assert config_service.set_config("a@b.com", " 6 ").slots_per_hour == 6


class TestResolveCapacity:

    def test_request_value_wins(self, config_service):
        config_service.set_config("a@b.com", 5)
        assert config_service.resolve_capacity(2, "a@b.com") == 2

    def test_invalid_request_value_is_ignored(self, config_service):
        config_service.set_config("a@b.com", 5)
        assert config_service.resolve_capacity("lots", "a@b.com") == 5

    def test_global_then_default(self, config_service):
        assert config_service.resolve_capacity(None, "x@y.com") == 1
        config_service.set_config(None, 3)
        assert config_service.resolve_capacity(None, "x@y.com") == 3

    def test_resolving_does_not_create_configs(self, config_service):
        config_service.resolve_capacity(None, "x@y.com")
        assert SlotConfig.query.count() == 0
