"""
Catalog Libraries

Catalog version model, bundle descriptors, and the bundle to catalog version
grouping that feeds FBC templates.
"""

from .versions import CatalogVersion, parse_catalog_version, parse_catalog_versions, sort_catalog_versions
from .bundle import Bundle, load_release_config, extract_package_version, bundle_from_descriptor, fetch_bundle
from .relation import CatalogRelation, build_relation, sort_bundles
from .template import TemplateData, FBCTemplate, load_template_values, assemble_template_data

__all__ = [
    'CatalogVersion',
    'parse_catalog_version',
    'parse_catalog_versions',
    'sort_catalog_versions',
    'Bundle',
    'load_release_config',
    'extract_package_version',
    'bundle_from_descriptor',
    'fetch_bundle',
    'CatalogRelation',
    'build_relation',
    'sort_bundles',
    'TemplateData',
    'FBCTemplate',
    'load_template_values',
    'assemble_template_data'
]
