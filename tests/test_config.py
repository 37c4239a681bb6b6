"""
Unit tests for configuration loading and the zone registry.
"""
import os

import pytest

from simple_ddns.config import ConfigManager
from simple_ddns.exceptions import ConfigError
from simple_ddns.records import RecordType
from simple_ddns.zones import ZoneRegistry, ZoneSubscription

CONFIG_TOML = """
[debug]
level = "debug"

[ddns.storage.sqlite]
db = "ddns.db"

[ddns.storage.public-ip-api.ipify]
check-period-mins = 5

[ddns.storage.public-ip-api.ipify.ipv4]
endpoint = "https://api.ipify.org"

[ddns.storage.public-ip-api.ipify.ipv6]
endpoint = "https://api6.ipify.org"

[[ddns.dns-server.aws]]
account = "personal"
credentials-file = "~/.aws/credentials"

[[ddns.dns-server.aws.zones]]
id = "Z1"
records = [
    { fqdn = "home.example.com", type = "A" },
    { fqdn = "home.example.com", type = "AAAA" },
]

[[ddns.dns-server.aws.zones]]
id = "Z2"
records = [
    { fqdn = "home.example.org", type = "A" },
    { fqdn = "home.example.com", type = "A" },
]

[[ddns.dns-server.aws]]
account = "work"
credentials-file = "/etc/simpleddns/work-credentials"
profile = "dns"

[[ddns.dns-server.aws.zones]]
id = "Z9"
records = [{ fqdn = "office.example.net", type = "aaaa" }]
"""


@pytest.fixture
def config(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(CONFIG_TOML)
    return ConfigManager(str(path))


class TestConfigManager:

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            ConfigManager(str(tmp_path / "nope.toml"))

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[ddns\nbroken = ")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            ConfigManager(str(path))

    def test_log_level_normalized(self, config):
        assert config.log_level == "DEBUG"

    def test_decode_typed_values(self, config):
        assert config.decode_str("ddns.storage.sqlite.db") == "ddns.db"
        assert config.decode_int("ddns.storage.public-ip-api.ipify.check-period-mins") == 5
        assert config.decode_float("ddns.storage.public-ip-api.ipify.check-period-mins") == 5.0

    def test_decode_missing_path(self, config):
        with pytest.raises(ConfigError, match="Missing configuration key"):
            config.decode_str("ddns.storage.postgres.dsn")

    def test_decode_default(self, config):
        assert config.decode_int("ddns.storage.public-ip-api.ipify.timeout", 10) == 10

    def test_decode_optional_str(self, config):
        assert config.decode_optional_str("ddns.storage.public-ip-api.ipify.ipv4.endpoint") == "https://api.ipify.org"
        assert config.decode_optional_str("ddns.storage.public-ip-api.ipify.ipv5.endpoint") is None

        with pytest.raises(ConfigError, match="must be a string"):
            config.decode_optional_str("ddns.storage.public-ip-api.ipify.check-period-mins")

    def test_decode_wrong_type(self, config):
        with pytest.raises(ConfigError, match="must be an integer"):
            config.decode_int("ddns.storage.sqlite.db")

    def test_bool_is_not_an_integer(self):
        config = ConfigManager.from_dict({"daemon": {"interval": True}})

        with pytest.raises(ConfigError):
            config.decode_int("daemon.interval")

    def test_decode_record(self, config):
        endpoint = config.decode_record("ddns.storage.public-ip-api.ipify.ipv6", lambda data: data["endpoint"])

        assert endpoint == "https://api6.ipify.org"

    def test_decode_record_factory_error(self, config):
        with pytest.raises(ConfigError, match="Invalid configuration"):
            config.decode_record("ddns.storage.public-ip-api.ipify.ipv4", lambda data: data["url"])

    def test_resolve_relative_path(self, config, tmp_path):
        assert config.resolve_path("ddns.db") == os.path.join(str(tmp_path), "ddns.db")
        assert config.resolve_path("/var/lib/ddns.db") == "/var/lib/ddns.db"


class TestZoneRegistry:

    def test_load_all_accounts(self, config):
        registries = ZoneRegistry.load_all(config)

        assert [registry.account for registry in registries] == ["personal", "work"]

    def test_account_zones(self, config):
        registry = ZoneRegistry.from_config(config, "personal")

        assert registry.credentials_file == "~/.aws/credentials"
        assert registry.profile is None
        assert registry.zones == (
            ZoneSubscription("Z1", (("home.example.com", RecordType.A), ("home.example.com", RecordType.AAAA))),
            ZoneSubscription("Z2", (("home.example.org", RecordType.A), ("home.example.com", RecordType.A))),
        )

    def test_record_type_case_insensitive(self, config):
        registry = ZoneRegistry.from_config(config, "work")

        assert registry.zones[0].records == (("office.example.net", RecordType.AAAA),)
        assert registry.profile == "dns"

    def test_unknown_account(self, config):
        with pytest.raises(ConfigError, match="doesn't exist"):
            ZoneRegistry.from_config(config, "missing")

    def test_managed_keys_deduplicated_in_order(self, config):
        registry = ZoneRegistry.from_config(config, "personal")

        assert registry.managed_keys() == [
            ("home.example.com", RecordType.A),
            ("home.example.com", RecordType.AAAA),
            ("home.example.org", RecordType.A),
        ]

    def test_unsupported_record_type(self):
        config = ConfigManager.from_dict({"ddns": {"dns-server": {"aws": [
            {"account": "personal", "zones": [{"id": "Z1", "records": [{"fqdn": "mail.example.com", "type": "MX"}]}]}
        ]}}})

        with pytest.raises(ConfigError, match="Unsupported record type"):
            ZoneRegistry.load_all(config)

    def test_missing_account_name(self):
        config = ConfigManager.from_dict({"ddns": {"dns-server": {"aws": [{"zones": []}]}}})

        with pytest.raises(ConfigError):
            ZoneRegistry.load_all(config)
