#!/usr/bin/env python3
"""
Shared Test Constants

Common constants, package-directory builders and a fake kpm builder used
across all test suites.
"""

import json
import sys
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml


class CommonTestConstants:
    """Constants shared across all test suites"""

    REGISTRY_NAMESPACE = "quay.io/operatorhubio"
    PACKAGE_NAME = "example-operator"
    FAKE_CATALOG = b'{"schema":"olm.package","name":"example-operator"}\n'
    FAKE_WORK_DIR = Path("/tmp/ctt-kpmfiles-test")


class CatalogTestConstants(CommonTestConstants):
    """Constants for catalog version parsing and grouping tests"""

    VALID_VERSIONS = ["0.0", "0.1", "4.9", "4.10", "4.17", "10.0", "123.456"]
    INVALID_VERSIONS = ["4", "4.x", "04.1", "4.01", "-1.2", "1.-2", "1.2.3", "", "4.", ".4", " 4.1", "4.1_0"]


class WorkflowTestConstants(CommonTestConstants):
    """Constants for end-to-end generator tests"""

    TEMPLATE = (
        "schema: olm.template.basic\n"
        "catalog: {{ catalog_version }}\n"
        "entries:\n"
        "  - schema: olm.package\n"
        "    name: {{ values.packageName }}\n"
        "{% for bundle in bundles %}"
        "  - schema: olm.bundle\n"
        "    name: {{ bundle.name }}\n"
        "    image: {{ bundle.image }}\n"
        "    version: {{ bundle.version }}\n"
        "{% endfor %}"
    )
    VALUES = {"packageName": CommonTestConstants.PACKAGE_NAME}


class TestUtilities:
    """
    Shared test utility methods for all test suites.

    Builds package directories on disk and descriptors in the shape kpm
    renders them.
    """

    @staticmethod
    def setup_test_path():
        """Setup Python path for test imports"""
        package_root = Path(__file__).parent.parent / "catalog-template-template"
        if str(package_root) not in sys.path:
            sys.path.insert(0, str(package_root))

    @staticmethod
    def make_descriptor(name: str, version: Optional[str], package: str = CommonTestConstants.PACKAGE_NAME,
                        image: Optional[str] = None) -> Dict[str, Any]:
        """Build a rendered olm.bundle descriptor; version None omits olm.package"""
        properties = [{"type": "olm.gvk", "value": {"group": "example.com", "kind": "Example", "version": "v1"}}]
        if version is not None:
            properties.append({"type": "olm.package", "value": {"packageName": package, "version": version}})
        return {
            "schema": "olm.bundle",
            "name": name,
            "package": package,
            "image": image or f"{CommonTestConstants.REGISTRY_NAMESPACE}/{package}-bundle:v{version}",
            "properties": properties,
        }

    @staticmethod
    def write_bundle(package_dir: Path, dir_name: str, catalog_versions: Optional[List[str]]) -> Path:
        """Create a bundle directory with its release-config.yaml"""
        bundle_dir = Path(package_dir) / dir_name
        bundle_dir.mkdir(parents=True, exist_ok=True)
        release_config = {} if catalog_versions is None else {"catalogVersions": catalog_versions}
        (bundle_dir / "release-config.yaml").write_text(yaml.safe_dump(release_config))
        return bundle_dir

    @staticmethod
    def write_package(package_dir: Path, template: str = WorkflowTestConstants.TEMPLATE,
                      values: Optional[Dict[str, Any]] = None) -> Path:
        """Create the package-level template and values files"""
        package_dir = Path(package_dir)
        package_dir.mkdir(parents=True, exist_ok=True)
        (package_dir / "fbc-template.yaml.tmpl").write_text(template)
        (package_dir / "fbc-template.values.yaml").write_text(
            yaml.safe_dump(WorkflowTestConstants.VALUES if values is None else values)
        )
        return package_dir


class FakeBundleBuilder:
    """
    In-memory stand-in for KPMClient.

    Descriptors are looked up by bundle directory name; a missing entry or an
    exception instance in ``failures`` makes the call raise.
    """

    def __init__(self, descriptors: Dict[str, Dict[str, Any]], failures: Optional[Dict[str, Exception]] = None,
                 catalog: bytes = CommonTestConstants.FAKE_CATALOG):
        self.descriptors = descriptors
        self.failures = failures or {}
        self.catalog = catalog
        self.bundle_calls = []
        self.catalog_calls = []
        self._lock = threading.Lock()

    def build_and_render_bundle(self, bundle_dir: Path, registry_namespace: str) -> Tuple[Dict[str, Any], Path]:
        name = Path(bundle_dir).name
        with self._lock:
            self.bundle_calls.append((name, registry_namespace))
        if name in self.failures:
            raise self.failures[name]
        # Round-trip through JSON like the real renderer output
        descriptor = json.loads(json.dumps(self.descriptors[name]))
        return descriptor, CommonTestConstants.FAKE_WORK_DIR / f"{name}.bundle.kpm"

    def build_and_render_catalog(self, catalog_version, template_file: Path) -> bytes:
        with self._lock:
            self.catalog_calls.append((catalog_version.canonical, Path(template_file).read_text()))
        if catalog_version.canonical in self.failures:
            raise self.failures[catalog_version.canonical]
        return self.catalog
