"""
Protocols and Interfaces

Defines protocols (interfaces) for dependency injection and type hints.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Protocol, Tuple

if TYPE_CHECKING:
    from ..catalog.versions import CatalogVersion


class BundleBuilder(Protocol):
    """Protocol for the external bundle/catalog builder and renderer"""

    def build_and_render_bundle(self, bundle_dir: Path, registry_namespace: str) -> Tuple[Dict[str, Any], Path]:
        """Build a bundle from its source directory; return the rendered descriptor and the built .kpm file"""
        ...

    def build_and_render_catalog(self, catalog_version: 'CatalogVersion', template_file: Path) -> bytes:
        """Build a catalog from a rendered FBC template and return the rendered catalog"""
        ...
