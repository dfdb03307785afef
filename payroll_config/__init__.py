"""
payroll_config -- single public entrypoint for payroll configuration.

Responsibility:
    Provides the ONLY way to obtain payroll policy at runtime through
    ``get_active_config()``.  Engines never read configuration; services
    obtain a ``PayrollConfig`` here and pass plain policy values down.

Architecture position:
    Configuration -- YAML-driven policy.  Sits above ``payroll_kernel``
    and below ``payroll_services``.  Neither the kernel nor the engines
    import from ``payroll_config``.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``KeyError`` / ``ValueError`` -- schema or value validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``PAYROLL_CONFIG_TRACE`` log entry with the config id, version and
    checksum, tying each report to the policy that produced it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from payroll_config.loader import load_yaml_file, parse_payroll_config
from payroll_config.schema import PayrollConfig

_logger = logging.getLogger("payroll_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "washington.yaml"


def get_active_config(path: Path | str | None = None) -> PayrollConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: YAML policy file.  Defaults to the packaged Washington
            State policy.

    Returns:
        A validated, frozen ``PayrollConfig``.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config = parse_payroll_config(load_yaml_file(config_path))

    _logger.info(
        "PAYROLL_CONFIG_TRACE",
        extra={
            "trace_type": "PAYROLL_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "jurisdiction": config.jurisdiction,
            "source": str(config_path),
        },
    )
    return config


__all__ = ["DEFAULT_CONFIG_PATH", "PayrollConfig", "get_active_config"]
