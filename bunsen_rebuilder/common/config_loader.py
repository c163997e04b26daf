"""
Config Loader Module - Handles configuration loading and validation
"""

import os
import logging
from pathlib import Path

import yaml

from bunsen_rebuilder import config as config_module
from bunsen_rebuilder.common.errors import PreconditionError

logger = logging.getLogger(__name__)

DEFAULT_OVERRIDES_FILE = Path(__file__).resolve().parent.parent / "overrides.yaml"


class ConfigLoader:
    """Handles configuration loading and validation"""

    @staticmethod
    def load_environment_config():
        """Load configuration overrides from environment variables"""
        return {
            'local_repo_dir': os.getenv('BUNSEN_REBUILDER_LOCAL_REPO'),
            'build_output_dir': os.getenv('BUNSEN_REBUILDER_BUILD_DIR'),
            'package_glob': os.getenv('BUNSEN_REBUILDER_PACKAGE_GLOB'),
            'overrides_file': os.getenv('BUNSEN_REBUILDER_OVERRIDES'),
            'debug_mode': os.getenv('BUNSEN_REBUILDER_DEBUG', 'false').lower() in ('1', 'true', 'yes'),
        }

    @staticmethod
    def load_from_python_config():
        """Build the base configuration dictionary from config.py"""
        return {
            'changelog_url': config_module.CHANGELOG_URL,
            'source_archive_url': config_module.SOURCE_ARCHIVE_URL,
            'connectivity_url': config_module.CONNECTIVITY_URL,
            'http_timeout': config_module.HTTP_TIMEOUT,
            'local_repo_dir': config_module.LOCAL_REPO_DIR,
            'build_output_dir': config_module.BUILD_OUTPUT_DIR,
            'log_dir': config_module.LOG_DIR,
            'overrides_file': config_module.OVERRIDES_FILE,
            'sources_list': config_module.SOURCES_LIST,
            'package_glob': config_module.PACKAGE_GLOB,
            'source_format': config_module.SOURCE_FORMAT,
            'build_timeout': config_module.BUILD_TIMEOUT,
            'depends_timeout': config_module.DEPENDS_TIMEOUT,
            'apt_timeout': config_module.APT_TIMEOUT,
            'required_build_tools': list(config_module.REQUIRED_BUILD_TOOLS),
            'debug_mode': False,
        }

    @staticmethod
    def load_overrides(extra_file=None):
        """
        Load the package -> repository mapping.

        The shipped overrides.yaml is read first; entries from the operator's
        file (if it exists) replace or extend it.

        Returns:
            Dictionary mapping package name to repository id

        Raises:
            PreconditionError: if a mapping file is not a flat name: name mapping
        """
        overrides = ConfigLoader._read_mapping(DEFAULT_OVERRIDES_FILE)

        if extra_file:
            extra_path = Path(extra_file).expanduser()
            if extra_path.exists():
                extra = ConfigLoader._read_mapping(extra_path)
                logger.info(f"OVERRIDES_LOADED file={extra_path} count={len(extra)}")
                overrides.update(extra)
            else:
                logger.debug(f"OVERRIDES_ABSENT file={extra_path}")

        return overrides

    @staticmethod
    def _read_mapping(path: Path):
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise PreconditionError(f"Invalid YAML in {path}", diagnostic=str(e)) from e
        except OSError as e:
            raise PreconditionError(f"Cannot read {path}", diagnostic=str(e)) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise PreconditionError(f"{path} must contain a mapping of package: repository")

        mapping = {}
        for package, repository in data.items():
            if not isinstance(package, str) or not isinstance(repository, str):
                raise PreconditionError(
                    f"{path}: entry {package!r}: {repository!r} is not a name: name pair"
                )
            mapping[package.strip()] = repository.strip()
        return mapping


def load_config():
    """
    Merge config.py defaults with environment overrides.

    Directory values become Paths with ~ expanded.
    """
    config_dict = ConfigLoader.load_from_python_config()

    for key, value in ConfigLoader.load_environment_config().items():
        if key == 'debug_mode':
            config_dict['debug_mode'] = config_dict['debug_mode'] or value
        elif value:
            config_dict[key] = value

    for key in ('local_repo_dir', 'build_output_dir', 'log_dir'):
        config_dict[key] = Path(config_dict[key]).expanduser()
    config_dict['sources_list'] = Path(config_dict['sources_list'])

    config_dict['overrides'] = ConfigLoader.load_overrides(config_dict['overrides_file'])
    return config_dict
