"""
Bundle Descriptors

Turns a bundle source directory into a Bundle: reads the bundle's release
config, asks the builder for its rendered descriptor and extracts identity
and version metadata from it.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, List

import semver

from ..core.config import PackageLayout, load_yaml_mapping
from ..core.constants import ErrorMessages, FileConstants, OLMConstants
from ..core.exceptions import ConfigurationError, ExternalToolError, VersionError
from ..core.protocols import BundleBuilder
from .versions import CatalogVersion, parse_catalog_versions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bundle:
    """A single built bundle revision"""

    package: str
    name: str
    version: semver.Version
    image: str
    catalog_versions: FrozenSet[CatalogVersion] = frozenset()
    source_dir: Path = field(default=None, compare=False)
    kpm_file: Path = field(default=None, compare=False)


def load_release_config(bundle_dir: Path) -> List[CatalogVersion]:
    """
    Read the catalog versions a bundle should be released into

    Args:
        bundle_dir: Bundle source directory

    Returns:
        List[CatalogVersion]: Distinct versions in release-config order; empty
        when the key is absent

    Raises:
        FileOperationError: If release-config.yaml cannot be read
        ConfigurationError: If the file is not a mapping or the key is not a list
        FormatError: If any entry is not a valid catalog version
    """
    path = PackageLayout.release_config_file(bundle_dir)
    release_config = load_yaml_mapping(path, ErrorMessages.ConfigError.RELEASE_CONFIG_NOT_MAPPING)

    values = release_config.get(FileConstants.CATALOG_VERSIONS_KEY)
    if values is None:
        return []
    if not isinstance(values, list):
        raise ConfigurationError(
            ErrorMessages.ConfigError.CATALOG_VERSIONS_NOT_LIST.format(
                key=FileConstants.CATALOG_VERSIONS_KEY, path=path, type_name=type(values).__name__
            )
        )
    return parse_catalog_versions(values)


def extract_package_version(descriptor: Dict[str, Any]) -> semver.Version:
    """
    Find the olm.package property of a rendered bundle and parse its version

    Raises:
        VersionError: If the property or its version is missing, or not valid semver
    """
    name = descriptor.get(OLMConstants.NAME_KEY, "")

    for prop in descriptor.get(OLMConstants.PROPERTIES_KEY) or []:
        if not isinstance(prop, dict):
            continue
        if prop.get(OLMConstants.PROPERTY_TYPE_KEY) != OLMConstants.PropertyType.PACKAGE:
            continue

        value = prop.get(OLMConstants.PROPERTY_VALUE_KEY)
        version = value.get(OLMConstants.VERSION_KEY) if isinstance(value, dict) else None
        if not version:
            raise VersionError(ErrorMessages.VersionError.MISSING_VERSION.format(name=name))

        try:
            return semver.Version.parse(version)
        except (ValueError, TypeError) as e:
            raise VersionError(
                ErrorMessages.VersionError.INVALID_SEMVER.format(name=name, version=version, error=e)
            ) from e

    raise VersionError(ErrorMessages.VersionError.MISSING_PACKAGE_PROPERTY.format(name=name))


def bundle_from_descriptor(descriptor: Dict[str, Any], catalog_versions: List[CatalogVersion],
                           source_dir: Path = None, kpm_file: Path = None) -> Bundle:
    """Build a Bundle from a rendered descriptor and its release config"""
    if not isinstance(descriptor, dict):
        raise ExternalToolError(
            f"bundle descriptor must be a JSON object, got {type(descriptor).__name__}"
        )

    return Bundle(
        package=descriptor.get(OLMConstants.PACKAGE_KEY, ""),
        name=descriptor.get(OLMConstants.NAME_KEY, ""),
        version=extract_package_version(descriptor),
        image=descriptor.get(OLMConstants.IMAGE_KEY, ""),
        catalog_versions=frozenset(catalog_versions),
        source_dir=source_dir,
        kpm_file=kpm_file,
    )


def fetch_bundle(bundle_dir: Path, registry_namespace: str, builder: BundleBuilder) -> Bundle:
    """
    Build, render and describe one bundle directory

    The release config is validated before the builder runs, so a malformed
    catalog version fails without invoking kpm.

    Args:
        bundle_dir: Bundle source directory
        registry_namespace: Registry namespace the bundle image is pushed under
        builder: External builder/renderer

    Returns:
        Bundle: The described bundle
    """
    catalog_versions = load_release_config(bundle_dir)
    descriptor, kpm_file = builder.build_and_render_bundle(bundle_dir, registry_namespace)
    bundle = bundle_from_descriptor(descriptor, catalog_versions, source_dir=bundle_dir, kpm_file=kpm_file)

    logger.info(
        f"Described bundle {bundle.name} ({bundle.version}) for catalog versions: "
        f"{', '.join(v.canonical for v in catalog_versions) or '<none>'}"
    )
    return bundle
