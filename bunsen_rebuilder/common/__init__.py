"""
Common modules: configuration, environment checks, logging, shell execution
"""

from .config_loader import ConfigLoader, load_config
from .environment import EnvironmentValidator
from .errors import (
    FormatError,
    NetworkError,
    ParseError,
    PreconditionError,
    RebuilderError,
    StateError,
    ToolError,
)
from .logging_utils import get_log_file, setup_logging
from .shell_executor import ShellExecutor

__all__ = [
    'ConfigLoader',
    'load_config',
    'EnvironmentValidator',
    'RebuilderError',
    'NetworkError',
    'ParseError',
    'FormatError',
    'ToolError',
    'StateError',
    'PreconditionError',
    'get_log_file',
    'setup_logging',
    'ShellExecutor',
]
