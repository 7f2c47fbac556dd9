# gdp_decomposer_src/config_utils.py

import logging

from config import ConfigurationError, get_config

logger = logging.getLogger(__name__)

# Set by initialize_config(); while None, callers get their code defaults
config_manager = None


def initialize_config(override_path=None):
    """
    Load the YAML configuration into the module-level manager.

    Parameters
    ----------
    override_path : str or Path, optional
        YAML file merged over ``config/defaults.yaml``. Passing a path always
        reloads; otherwise an already loaded manager is kept.

    Returns
    -------
    ConfigurationManager or None
        None when the configuration could not be read; every lookup then
        falls back to the default passed at the call site.
    """
    global config_manager
    if config_manager is None or override_path is not None:
        try:
            config_manager = get_config(override_path)
            problems = config_manager.validate_configuration()
            if problems:
                logger.warning("Configuration validation warnings: %s", problems)
        except ConfigurationError as e:
            logger.error("Failed to initialize configuration: %s. Using defaults.", e)
            config_manager = None
    return config_manager


def get_config_value(key_path: str, default=None, args=None, cli_param=None):
    """
    Resolve one setting by dot-separated ``key_path``.

    A non-None CLI attribute ``args.<cli_param>`` wins, then the loaded
    configuration, then ``default``.
    """
    if args is not None and cli_param and hasattr(args, cli_param):
        cli_value = getattr(args, cli_param)
        if cli_value is not None:
            return cli_value

    if config_manager is not None:
        value = config_manager.get(key_path, default)
        if value is not None:
            return value

    return default
