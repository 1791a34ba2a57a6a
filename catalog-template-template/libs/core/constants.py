"""
Constants Module

Centralized constants for the catalog template generator to eliminate magic
strings and improve maintainability.
"""

from enum import Enum


class BaseStrEnum(str, Enum):
    """Base enum class that inherits from str"""

    def __str__(self) -> str:
        """Return the enum value as string"""
        return self.value

    def __repr__(self) -> str:
        """Return a detailed representation of the enum"""
        return f"{self.__class__.__name__}.{self.name}"


class KPMConstants:
    """kpm builder/renderer constants"""

    DEFAULT_BINARY = "kpm"
    SPEC_API_VERSION = "specs.kpm.io/v1"

    # Timeout constants (seconds)
    BUILD_TIMEOUT = 600
    RENDER_TIMEOUT = 300

    # Catalog build settings
    CATALOG_TAG_TEMPLATE = "localhost/catalog:{catalog_version}"
    MIGRATION_LEVEL = "bundle-object-to-csv-metadata"
    CACHE_FORMAT = "pogreb.v1"

    WORK_DIR_PREFIX = "ctt-kpmfiles-"

    class SpecKind(BaseStrEnum):
        """kpm spec kinds"""
        BUNDLE = "Bundle"
        CATALOG = "Catalog"

    class SourceType(BaseStrEnum):
        """Catalog source types understood by kpm"""
        FBC_TEMPLATE = "fbcTemplate"

    class Subcommand(BaseStrEnum):
        """kpm subcommands"""
        BUILD = "build"
        RENDER = "render"


class OLMConstants:
    """Operator Lifecycle Manager descriptor constants"""

    class PropertyType(BaseStrEnum):
        """Bundle property types"""
        PACKAGE = "olm.package"

    # Keys of the rendered bundle descriptor
    PACKAGE_KEY = "package"
    NAME_KEY = "name"
    IMAGE_KEY = "image"
    PROPERTIES_KEY = "properties"
    PROPERTY_TYPE_KEY = "type"
    PROPERTY_VALUE_KEY = "value"
    VERSION_KEY = "version"


class FileConstants:
    """File and directory related constants"""

    # Package directory contract
    TEMPLATE_FILE = "fbc-template.yaml.tmpl"
    VALUES_FILE = "fbc-template.values.yaml"
    RELEASE_CONFIG_FILE = "release-config.yaml"
    OUTPUT_DIR_NAME = "catalogs"

    # Release config keys
    CATALOG_VERSIONS_KEY = "catalogVersions"

    # Per catalog version output
    CATALOG_VERSION_DIR_TEMPLATE = "v{catalog_version}"
    RENDERED_TEMPLATE_FILE = "fbc-template.yaml"
    CATALOG_FILE = "catalog.json"

    # kpm working files
    BUNDLE_SPEC_TEMPLATE = "{name}.bundle.kpmspec.yaml"
    BUNDLE_KPM_TEMPLATE = "{name}.bundle.kpm"
    CATALOG_SPEC_TEMPLATE = "{catalog_version}.catalog.kpmspec.yaml"
    CATALOG_KPM_TEMPLATE = "catalog-{catalog_version}.catalog.kpm"


class EnvironmentVariables:
    """Environment variables consulted at the entry point"""

    REGISTRY_NAMESPACE = "CTT_REGISTRY_NAMESPACE"
    KPM_BINARY = "CTT_KPM_BINARY"


class RunDefaults:
    """Defaults for a generator run"""

    WORKERS = 4


class ErrorMessages:
    """Centralized error message templates"""

    class ConfigError(BaseStrEnum):
        """Configuration-related error message templates"""
        MISSING_REGISTRY_NAMESPACE = (
            "registry namespace must be set with --registry-namespace flag "
            "or CTT_REGISTRY_NAMESPACE environment variable"
        )
        INVALID_WORKERS = "--workers must be at least 1, got {workers}"
        PACKAGE_DIR_NOT_FOUND = "Package directory not found: {package_dir}"
        REQUIRED_FILE_MISSING = "Required file not found: {path}"
        VALUES_NOT_MAPPING = "Template values in {path} must be a mapping, got {type_name}"
        RELEASE_CONFIG_NOT_MAPPING = "Release config {path} must be a mapping, got {type_name}"
        CATALOG_VERSIONS_NOT_LIST = "{key} in {path} must be a list, got {type_name}"

    class FormatError(BaseStrEnum):
        """Catalog version format error message templates"""
        WRONG_ARITY = "invalid catalog version {value!r}, expected '<major>.<minor>'"
        LEADING_ZERO = (
            "invalid catalog version {value!r}, leading zeroes in version numbers "
            "are not permitted"
        )
        NOT_INTEGER = "invalid catalog version {part_name} version {part!r}, expected integer"
        NEGATIVE = "invalid catalog version {part_name} version {part!r}, cannot be negative"
        NOT_STRING = (
            "invalid catalog version {value!r}, expected a string; quote the value "
            "in the release config (e.g. \"4.10\")"
        )

    class VersionError(BaseStrEnum):
        """Bundle version error message templates"""
        MISSING_PACKAGE_PROPERTY = "bundle {name!r} has no olm.package property"
        MISSING_VERSION = "olm.package property of bundle {name!r} has no version"
        INVALID_SEMVER = "bundle {name!r} has invalid semantic version {version!r}: {error}"

    class KPMError(BaseStrEnum):
        """kpm tool error message templates"""
        BINARY_NOT_FOUND = (
            "kpm binary {binary!r} not found. Install kpm and ensure it's in your PATH, "
            "or point --kpm-binary / CTT_KPM_BINARY at it"
        )
        COMMAND_FAILED = "exec: {command}: exit status {returncode}"
        COMMAND_TIMED_OUT = "exec: {command}: timed out after {timeout} seconds"
        INVALID_JSON = "could not parse kpm render output for {source}: {error}"
