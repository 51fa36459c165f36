import pytest

from icmp_prober import get_project_root, load_config
from icmp_prober.prober.config import (
    DEFAULT_TIMEOUT,
    IPProtocol,
    ModuleConfig,
    load_module_config,
)


class TestIPProtocol:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("ip4", IPProtocol.IPV4),
            ("IPv4", IPProtocol.IPV4),
            ("4", IPProtocol.IPV4),
            ("ip6", IPProtocol.IPV6),
            ("ipv6", IPProtocol.IPV6),
            ("any", IPProtocol.ANY),
            ("", IPProtocol.ANY),
            (None, IPProtocol.ANY),
        ],
    )
    def test_from_config(self, value, expected):
        assert IPProtocol.from_config(value) is expected

    def test_unknown_value(self):
        with pytest.raises(ValueError, match="Unknown preferred IP protocol"):
            IPProtocol.from_config("ipx")


class TestModuleConfig:
    def test_defaults(self):
        module = ModuleConfig()
        assert module.name == "icmp"
        assert module.prober == "icmp"
        assert module.timeout == DEFAULT_TIMEOUT
        assert module.preferred_ip_protocol is IPProtocol.IPV6

    def test_from_dict(self):
        module = ModuleConfig.from_dict(
            "ping4",
            {"prober": "icmp", "timeout": 2, "icmp": {"preferred_ip_protocol": "ip4"}},
        )
        assert module == ModuleConfig(
            name="ping4",
            prober="icmp",
            timeout=2.0,
            preferred_ip_protocol=IPProtocol.IPV4,
        )

    def test_from_dict_without_icmp_section(self):
        module = ModuleConfig.from_dict("ping", {"prober": "icmp", "timeout": 1.5})
        assert module.preferred_ip_protocol is IPProtocol.IPV6

    def test_missing_keys(self):
        with pytest.raises(RuntimeError, match="Missing required keys in 'ping': timeout"):
            ModuleConfig.from_dict("ping", {"prober": "icmp"})

    def test_unsupported_prober(self):
        with pytest.raises(RuntimeError, match="unsupported prober 'http'"):
            ModuleConfig.from_dict("web", {"prober": "http", "timeout": 1})

    @pytest.mark.parametrize("timeout", [0, -1, "soon", None])
    def test_invalid_timeout(self, timeout):
        with pytest.raises(RuntimeError, match="timeout"):
            ModuleConfig.from_dict("ping", {"prober": "icmp", "timeout": timeout})

    def test_invalid_protocol(self):
        with pytest.raises(RuntimeError, match="Unknown preferred IP protocol"):
            ModuleConfig.from_dict(
                "ping",
                {"prober": "icmp", "timeout": 1, "icmp": {"preferred_ip_protocol": "ip5"}},
            )


class TestLoadModuleConfig:
    def test_missing_modules_section(self):
        with pytest.raises(RuntimeError, match="Missing section 'modules'"):
            load_module_config("icmp", {})

    def test_missing_module(self):
        with pytest.raises(RuntimeError, match="Missing required keys in 'modules': icmp"):
            load_module_config("icmp", {"modules": {"other": {}}})

    def test_project_config_modules(self):
        config = load_config(get_project_root() / "config" / "config.yaml")

        module = load_module_config("icmp_ipv4", config)

        assert module.name == "icmp_ipv4"
        assert module.timeout == 2.0
        assert module.preferred_ip_protocol is IPProtocol.IPV4
        assert load_module_config("icmp", config).preferred_ip_protocol is IPProtocol.IPV6
        assert load_module_config("icmp_any", config).preferred_ip_protocol is IPProtocol.ANY
