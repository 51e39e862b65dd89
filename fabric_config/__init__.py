"""
fabric_config -- runtime settings.

Settings come from one YAML file (see ``fabric_config/settings.example.yaml``)
named by argument or by the ``FABRIC_ERP_CONFIG`` environment variable.  The
kernel and engines never import this package; services and scripts receive
the values they need as constructor arguments.
"""

from fabric_config.loader import CONFIG_ENV_VAR, Settings, load_settings

__all__ = ["CONFIG_ENV_VAR", "Settings", "load_settings"]
