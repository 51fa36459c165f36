"""
Probe module configuration.

A module is a named set of probe settings loaded from the project
`config.yaml`:

    modules:
      icmp:
        prober: icmp
        timeout: 5.0
        icmp:
          preferred_ip_protocol: ip6
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from icmp_prober.utils.config_utils import validate_config_keys

DEFAULT_TIMEOUT = 5.0


class IPProtocol(Enum):
    """
    IP version preference used when resolving a probe target.

    Attributes:
        ANY: Use whatever address the system resolver returns first
        IPV4: Prefer an IPv4 address, fall back to IPv6
        IPV6: Prefer an IPv6 address, fall back to IPv4
    """

    ANY = "any"
    IPV4 = "ip4"
    IPV6 = "ip6"

    @classmethod
    def from_config(cls, value: str | None) -> "IPProtocol":
        """
        Parse a configured protocol preference.

        Args:
            value: One of "ip4"/"ipv4"/"4", "ip6"/"ipv6"/"6", "any" or empty

        Returns:
            IPProtocol: The matching preference

        Raises:
            ValueError: If the value is not a known preference
        """
        if value is None:
            return cls.ANY
        normalized = str(value).strip().lower()
        if normalized in ("", "any"):
            return cls.ANY
        if normalized in ("ip4", "ipv4", "4"):
            return cls.IPV4
        if normalized in ("ip6", "ipv6", "6"):
            return cls.IPV6
        raise ValueError(f"Unknown preferred IP protocol: {value!r}")


@dataclass(frozen=True)
class ModuleConfig:
    """Settings for one probe module."""

    name: str = "icmp"
    prober: str = "icmp"
    timeout: float = DEFAULT_TIMEOUT
    preferred_ip_protocol: IPProtocol = IPProtocol.IPV6

    @classmethod
    def from_dict(cls, name: str, section: Dict[str, Any]) -> "ModuleConfig":
        """
        Build a module config from its YAML section.

        Args:
            name: Module name
            section: The module mapping, with `prober`, `timeout` and an optional `icmp` section

        Returns:
            ModuleConfig: Validated module settings

        Raises:
            RuntimeError: If required keys are missing or values are invalid
        """
        validate_config_keys({name: section}, name, ("prober", "timeout"))

        if section["prober"] != "icmp":
            raise RuntimeError(
                f"Configuration error: module '{name}' uses unsupported prober "
                f"{section['prober']!r}"
            )

        try:
            timeout = float(section["timeout"])
        except (TypeError, ValueError):
            raise RuntimeError(
                f"Configuration error: module '{name}' has invalid timeout "
                f"{section['timeout']!r}"
            )
        if timeout <= 0:
            raise RuntimeError(
                f"Configuration error: module '{name}' timeout must be positive"
            )

        icmp_section = section.get("icmp") or {}
        try:
            preference = IPProtocol.from_config(
                icmp_section.get("preferred_ip_protocol", IPProtocol.IPV6.value)
            )
        except ValueError as e:
            raise RuntimeError(f"Configuration error: module '{name}': {e}")

        return cls(
            name=name,
            prober=section["prober"],
            timeout=timeout,
            preferred_ip_protocol=preference,
        )


def load_module_config(name: str, config: Dict[str, Any]) -> ModuleConfig:
    """
    Pick a module out of a loaded project config.

    Args:
        name: Module name under the `modules` section
        config: Configuration dictionary, as returned by `load_config`

    Returns:
        ModuleConfig: The module settings

    Raises:
        RuntimeError: If the module is missing or invalid
    """
    validate_config_keys(config, "modules", (name,))
    return ModuleConfig.from_dict(name, config["modules"][name])
