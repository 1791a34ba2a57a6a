"""
Catalog Template Template Library

Generates versioned file-based catalog templates for an operator package.
"""

__version__ = "1.0.0"

# Core libraries
from .core import (
    RunConfig, PackageLayout,
    CatalogTemplateError, ConfigurationError, FormatError, ExternalToolError,
    VersionError, TemplateError, TemplateDataError, FileOperationError,
    BundleBuilder
)

# Catalog libraries
from .catalog import (
    CatalogVersion, parse_catalog_version, Bundle, CatalogRelation, build_relation,
    TemplateData, FBCTemplate, assemble_template_data
)

# KPM libraries
from .kpm import KPMClient

# Main application and help
from .help_manager import HelpManager
from .main_app import CatalogTemplateGenerator, create_generator, main

__all__ = [
    # Core
    'RunConfig',
    'PackageLayout',
    'CatalogTemplateError',
    'ConfigurationError',
    'FormatError',
    'ExternalToolError',
    'VersionError',
    'TemplateError',
    'TemplateDataError',
    'FileOperationError',
    'BundleBuilder',
    # Catalog
    'CatalogVersion',
    'parse_catalog_version',
    'Bundle',
    'CatalogRelation',
    'build_relation',
    'TemplateData',
    'FBCTemplate',
    'assemble_template_data',
    # KPM
    'KPMClient',
    # Main
    'HelpManager',
    'CatalogTemplateGenerator',
    'create_generator',
    'main'
]
