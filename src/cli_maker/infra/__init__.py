"""Infrastructure layer — external system integration.

This layer wraps all interaction with the file system, the raw
terminal, and ``cryptography``.  Every raw third-party exception is
caught here and either re-raised as a
:class:`~cli_maker.exceptions.CliMakerError` subclass or downgraded per
the configuration store's best-effort read policy.

Rules
-----
* No imports from ``cli``.
* No Rich rendering.
"""

from cli_maker.infra.config_store import (
    ConfigStore,
    config_path,
    get_config_value,
    get_raw_config,
    load_config,
    rotate_passphrase,
    save_steps,
)
from cli_maker.infra.terminal import ConsoleTerminal

__all__: list[str] = [
    "ConfigStore",
    "ConsoleTerminal",
    "config_path",
    "get_config_value",
    "get_raw_config",
    "load_config",
    "rotate_passphrase",
    "save_steps",
]
