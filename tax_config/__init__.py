"""
Tax Configuration Package.

YAML loading for the determination module settings and for file-based
catalogs of classification codes, business types, and tax configurations.

Usage:
    from tax_config import load_config

    config = load_config()                 # packaged defaults.yaml
    config = load_config("deploy/tax.yaml")
"""

from tax_config.loader import (
    DEFAULTS_PATH,
    Catalog,
    compute_checksum,
    load_catalog,
    load_config,
    load_yaml_file,
    parse_tax_configuration,
)

__all__ = [
    "Catalog",
    "DEFAULTS_PATH",
    "compute_checksum",
    "load_catalog",
    "load_config",
    "load_yaml_file",
    "parse_tax_configuration",
]
