"""
Bundle / Catalog Version Relation

Inverts every bundle's catalog version set into an explicitly ordered
aggregate: a sorted sequence of distinct catalog versions, and for each of
them the bundles released into it, sorted by semantic version.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List

from .bundle import Bundle
from .versions import CatalogVersion, sort_catalog_versions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogRelation:
    """Read-only many-to-many relation between bundles and catalog versions"""

    catalog_versions: List[CatalogVersion]
    bundles_by_catalog_version: Dict[CatalogVersion, List[Bundle]]

    def bundles_for(self, catalog_version: CatalogVersion) -> List[Bundle]:
        return self.bundles_by_catalog_version.get(catalog_version, [])


def sort_bundles(bundles: Iterable[Bundle]) -> List[Bundle]:
    """Stable ascending sort by semver precedence; equal versions keep their order"""
    return sorted(bundles, key=lambda b: b.version)


def build_relation(bundles: List[Bundle]) -> CatalogRelation:
    """
    Group bundles by catalog version

    Bundles without any catalog version are left out of every bucket without
    error.

    Args:
        bundles: All bundles of the package, in a deterministic order

    Returns:
        CatalogRelation: Sorted catalog versions and their sorted buckets
    """
    buckets: Dict[CatalogVersion, List[Bundle]] = {}

    for bundle in bundles:
        if not bundle.catalog_versions:
            logger.debug(f"Bundle {bundle.name} has no catalog versions, excluding it from every catalog")
            continue
        # catalog_versions is a set, so a bundle lands in each bucket at most once
        for catalog_version in bundle.catalog_versions:
            buckets.setdefault(catalog_version, []).append(bundle)

    catalog_versions = sort_catalog_versions(buckets.keys())
    bundles_by_catalog_version = {
        catalog_version: sort_bundles(buckets[catalog_version])
        for catalog_version in catalog_versions
    }

    return CatalogRelation(
        catalog_versions=catalog_versions,
        bundles_by_catalog_version=bundles_by_catalog_version,
    )
