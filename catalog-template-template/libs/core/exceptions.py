"""
Custom Exceptions

Defines custom exception classes for the catalog template generator.
"""


class CatalogTemplateError(Exception):
    """Base exception class for catalog template generator errors"""
    pass


class ConfigurationError(CatalogTemplateError):
    """Raised when configuration is invalid or missing"""
    pass


class FormatError(CatalogTemplateError):
    """Raised when a catalog version string is malformed"""
    pass


class ExternalToolError(CatalogTemplateError):
    """Raised when a kpm invocation fails or produces unusable output"""

    def __init__(self, message: str, command: str = None, output: str = None):
        self.command = command
        self.output = output
        if output:
            message = f"{message}\nCommand output:\n{output}"
        super().__init__(message)


class VersionError(CatalogTemplateError):
    """Raised when a bundle has no package version or it is not valid semver"""
    pass


class TemplateError(CatalogTemplateError):
    """Raised when the FBC template fails to parse or render"""
    pass


class TemplateDataError(TemplateError):
    """Raised when the data handed to the template is inconsistent"""
    pass


class FileOperationError(CatalogTemplateError):
    """Raised when reading or writing package files fails"""
    pass
