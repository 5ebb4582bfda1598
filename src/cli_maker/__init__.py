"""cli-maker — build interactive command-line tools.

Resolves an argument vector to a command in a nested command tree,
validates typed parameters, prompts for whatever is missing and keeps
per-tool configuration (with encrypted secrets) under ``~/.cli-maker``.
"""

import logging

from cli_maker.cli.app import CLI
from cli_maker.cli.prompts import PromptEngine, hidden_prompt, prompt
from cli_maker.cli.setup_command import (
    create_rotate_passphrase_command,
    create_setup_command,
)
from cli_maker.core.models import (
    CLIOptions,
    CommandNode,
    ParamSpec,
    ParamType,
    SetupStep,
)
from cli_maker.core.registry import CommandRegistry
from cli_maker.core.validator import validate
from cli_maker.exceptions import CliMakerError
from cli_maker.infra.config_store import (
    ConfigStore,
    get_config_value,
    get_raw_config,
    load_config,
    rotate_passphrase,
    save_steps,
)
from cli_maker.version import __version__

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__: list[str] = [
    "CLI",
    "CLIOptions",
    "CliMakerError",
    "CommandNode",
    "CommandRegistry",
    "ConfigStore",
    "ParamSpec",
    "ParamType",
    "PromptEngine",
    "SetupStep",
    "__version__",
    "create_rotate_passphrase_command",
    "create_setup_command",
    "get_config_value",
    "get_raw_config",
    "hidden_prompt",
    "load_config",
    "prompt",
    "rotate_passphrase",
    "save_steps",
    "validate",
]
