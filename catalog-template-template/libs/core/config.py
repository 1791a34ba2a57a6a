"""
Configuration Management

Resolves run configuration for the catalog template generator and loads the
YAML files of a package directory.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

try:
    import yaml
except ImportError:
    raise ImportError("PyYAML is required. Install with: pip install PyYAML")

from .constants import EnvironmentVariables, ErrorMessages, FileConstants, KPMConstants, RunDefaults
from .exceptions import ConfigurationError, FileOperationError
from .utils import read_text_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunConfig:
    """Explicit configuration threaded through a generator run"""

    package_dir: Path
    registry_namespace: str
    kpm_binary: str = KPMConstants.DEFAULT_BINARY
    workers: int = RunDefaults.WORKERS
    build_catalogs: bool = True
    debug: bool = False

    def __post_init__(self):
        if not self.registry_namespace:
            raise ConfigurationError(ErrorMessages.ConfigError.MISSING_REGISTRY_NAMESPACE)
        if self.workers < 1:
            raise ConfigurationError(
                ErrorMessages.ConfigError.INVALID_WORKERS.format(workers=self.workers)
            )

    @classmethod
    def from_args(cls, args, environ: Optional[Mapping[str, str]] = None) -> 'RunConfig':
        """
        Build a RunConfig from parsed CLI arguments and the environment.

        Flags take precedence over environment variables. This is the only
        place the environment is consulted.

        Args:
            args: argparse namespace from the CLI parser
            environ: Environment mapping (defaults to os.environ)

        Returns:
            RunConfig: Validated configuration

        Raises:
            ConfigurationError: If the registry namespace is unset or a value is invalid
        """
        if environ is None:
            environ = os.environ

        registry_namespace = environ.get(EnvironmentVariables.REGISTRY_NAMESPACE, "")
        if args.registry_namespace is not None:
            registry_namespace = args.registry_namespace

        kpm_binary = (
            args.kpm_binary
            or environ.get(EnvironmentVariables.KPM_BINARY)
            or KPMConstants.DEFAULT_BINARY
        )

        return cls(
            package_dir=Path(args.package_dir),
            registry_namespace=registry_namespace,
            kpm_binary=kpm_binary,
            workers=args.workers,
            build_catalogs=not args.templates_only,
            debug=args.debug,
        )


class PackageLayout:
    """Paths of the package directory contract"""

    def __init__(self, package_dir: Path):
        self.package_dir = Path(package_dir)

    @property
    def template_file(self) -> Path:
        return self.package_dir / FileConstants.TEMPLATE_FILE

    @property
    def values_file(self) -> Path:
        return self.package_dir / FileConstants.VALUES_FILE

    @property
    def output_dir(self) -> Path:
        return self.package_dir / FileConstants.OUTPUT_DIR_NAME

    def catalog_version_dir(self, catalog_version) -> Path:
        """Output directory for one catalog version, named from its canonical spelling"""
        return self.output_dir / FileConstants.CATALOG_VERSION_DIR_TEMPLATE.format(
            catalog_version=catalog_version.canonical
        )

    def rendered_template_file(self, catalog_version) -> Path:
        return self.catalog_version_dir(catalog_version) / FileConstants.RENDERED_TEMPLATE_FILE

    def catalog_file(self, catalog_version) -> Path:
        return self.catalog_version_dir(catalog_version) / FileConstants.CATALOG_FILE

    @staticmethod
    def release_config_file(bundle_dir: Path) -> Path:
        return Path(bundle_dir) / FileConstants.RELEASE_CONFIG_FILE

    def bundle_dirs(self) -> List[Path]:
        """
        List bundle source directories in name order

        Every immediate sub-directory except the output directory is a bundle.

        Raises:
            FileOperationError: If the package directory cannot be listed
        """
        try:
            entries = sorted(self.package_dir.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise FileOperationError(f"could not read package directory {self.package_dir}: {e}") from e

        return [
            entry for entry in entries
            if entry.is_dir() and entry.name != FileConstants.OUTPUT_DIR_NAME
        ]

    def validate(self) -> None:
        """
        Check that the package directory and its required files exist

        Raises:
            ConfigurationError: If anything required is missing
        """
        if not self.package_dir.is_dir():
            raise ConfigurationError(
                ErrorMessages.ConfigError.PACKAGE_DIR_NOT_FOUND.format(package_dir=self.package_dir)
            )
        for required in (self.template_file, self.values_file):
            if not required.is_file():
                raise ConfigurationError(
                    ErrorMessages.ConfigError.REQUIRED_FILE_MISSING.format(path=required)
                )


def load_yaml_file(path: Path) -> Any:
    """
    Load a YAML document with safe_load

    Args:
        path: Path to the YAML file

    Returns:
        The decoded document (None for an empty file)

    Raises:
        FileOperationError: If the file cannot be read
        ConfigurationError: If the file is not valid YAML
    """
    content = read_text_file(path)
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e


def load_yaml_mapping(path: Path, error_template: str) -> Dict[str, Any]:
    """
    Load a YAML document that must be a mapping; an empty document is {}

    Raises:
        ConfigurationError: If the document is not a mapping
    """
    data = load_yaml_file(path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(error_template.format(path=path, type_name=type(data).__name__))
    logger.debug(f"Loaded {path}")
    return data
