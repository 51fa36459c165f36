"""
ICMP Probe CLI

Sends one ICMP echo request and exits with 0 if the target answered before
the timeout, 1 otherwise. Raw sockets need root or CAP_NET_RAW:

    sudo icmp-probe 192.0.2.1 -t 0.5
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from icmp_prober import get_config_path, load_config
from icmp_prober.prober.config import IPProtocol, ModuleConfig, load_module_config
from icmp_prober.prober.probe import ICMPProber
from icmp_prober.utils.init_pkg_logger import init_pkg_logger

logger = logging.getLogger("icmp_probe")


def get_logger() -> logging.Logger:
    """
    Get the CLI logger.

    Uses the package logger when the project logger config is available,
    otherwise a stdout logger independent of it.
    """
    try:
        get_config_path(config_name="logger_config.yaml")
    except FileNotFoundError:
        if not logger.handlers:
            logger.setLevel(logging.INFO)
            handler = logging.StreamHandler(sys.stdout)
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        return logger
    return init_pkg_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Probe a target with a single ICMP echo request",
    )
    parser.add_argument("target", help="Host name or IP address to probe")
    parser.add_argument(
        "-m",
        "--module",
        default="icmp",
        help="Module name from the config file (default: icmp)",
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="PATH",
        default=None,
        help="Path to the modules config file; by default, config/config.yaml",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=None,
        metavar="SEC",
        help="Probe timeout in seconds, overrides the module timeout",
    )
    family = parser.add_mutually_exclusive_group()
    family.add_argument(
        "-4", dest="protocol", action="store_const", const=IPProtocol.IPV4,
        help="Prefer IPv4",
    )
    family.add_argument(
        "-6", dest="protocol", action="store_const", const=IPProtocol.IPV6,
        help="Prefer IPv6",
    )
    return parser


def get_module(
    name: str, config_path: str | None, logger: logging.Logger = logger
) -> ModuleConfig:
    """
    Load the probe module, falling back to the defaults when no config file exists.

    Raises:
        RuntimeError: If the config file exists but the module is missing or invalid
    """
    try:
        path = Path(config_path) if config_path else get_config_path()
    except FileNotFoundError:
        logger.info(f"No config file found, using default module {name!r}")
        return ModuleConfig(name=name)
    return load_module_config(name, load_config(path))


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logger = get_logger()

    try:
        module = get_module(args.module, args.config, logger)
    except RuntimeError as e:
        logger.error(str(e))
        return 2

    if args.protocol is not None:
        module = replace(module, preferred_ip_protocol=args.protocol)

    if args.timeout is not None and args.timeout <= 0:
        logger.error("Timeout must be positive")
        return 2

    prober = ICMPProber(module=module, logger=logger)
    return 0 if prober.probe(args.target, timeout=args.timeout) else 1


if __name__ == "__main__":
    sys.exit(main())
