import logging

from models.slot_config import DEFAULT_TENANT
from utils.validators import normalize_email, parse_positive_int

logger = logging.getLogger(__name__)


def tenant_key(tenant) -> str:
    return normalize_email(tenant) or DEFAULT_TENANT


class ConfigService:
    """Per-tenant slot capacity. Missing configs are created with the default on first read."""

    def __init__(self, repository, default_slots_per_hour: int = 1):
        self.repository = repository
        self.default_slots_per_hour = parse_positive_int(default_slots_per_hour) or 1

    def get_config(self, tenant=None):
        key = tenant_key(tenant)
        config = self.repository.get_config(key)
        if config is None:
            config = self.repository.insert_config_if_missing(key, self.default_slots_per_hour)
            logger.info("Created default slot config for %s", key)
        return config

    def set_config(self, tenant, slots_per_hour):
        key = tenant_key(tenant)
        value = parse_positive_int(slots_per_hour) or 1
        config = self.repository.upsert_config(key, value)
        logger.info("Slot config for %s set to %s per hour", key, value)
        return config

    def resolve_capacity(self, requested, tenant=None) -> int:
        """Request override, then the tenant's stored config, then the global one, then the default."""
        capacity = parse_positive_int(requested)
        if capacity is not None:
            return capacity

        key = tenant_key(tenant)
        for candidate in dict.fromkeys((key, DEFAULT_TENANT)):
            config = self.repository.get_config(candidate)
            if config is not None:
                return config.slots_per_hour
        return self.default_slots_per_hour
