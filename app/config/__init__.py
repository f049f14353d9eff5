from .settings import CONFIG_PATH, Config, config, ensure_config_file, load_config

__all__ = ["CONFIG_PATH", "Config", "config", "ensure_config_file", "load_config"]
