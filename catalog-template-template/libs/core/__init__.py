"""
Core Libraries

Shared functionality and utilities for the catalog template generator.
"""

from .config import RunConfig, PackageLayout, load_yaml_file, load_yaml_mapping
from .constants import (
    KPMConstants, OLMConstants, FileConstants, EnvironmentVariables,
    RunDefaults, ErrorMessages
)
from .exceptions import (
    CatalogTemplateError, ConfigurationError, FormatError, ExternalToolError,
    VersionError, TemplateError, TemplateDataError, FileOperationError
)
from .protocols import BundleBuilder
from .utils import setup_logging, write_file_atomic, clear_directory, read_text_file

__all__ = [
    # Configuration
    'RunConfig',
    'PackageLayout',
    'load_yaml_file',
    'load_yaml_mapping',
    # Constants
    'KPMConstants',
    'OLMConstants',
    'FileConstants',
    'EnvironmentVariables',
    'RunDefaults',
    'ErrorMessages',
    # Exceptions
    'CatalogTemplateError',
    'ConfigurationError',
    'FormatError',
    'ExternalToolError',
    'VersionError',
    'TemplateError',
    'TemplateDataError',
    'FileOperationError',
    # Protocols
    'BundleBuilder',
    # Utilities
    'setup_logging',
    'write_file_atomic',
    'clear_directory',
    'read_text_file'
]
