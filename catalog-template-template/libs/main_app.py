"""
Main Application

Orchestrates a generator run: describe every bundle of a package, group the
bundles per catalog version, render one FBC template per catalog version and
optionally build each into a catalog.
"""

import argparse
import logging
import sys
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Dict, List, Optional

from .catalog import (
    Bundle, CatalogRelation, CatalogVersion, FBCTemplate, TemplateData,
    assemble_template_data, build_relation, fetch_bundle, load_template_values
)
from .core import RunConfig, PackageLayout, setup_logging, write_file_atomic, clear_directory
from .core.constants import EnvironmentVariables, RunDefaults
from .core.exceptions import CatalogTemplateError
from .core.protocols import BundleBuilder
from .help_manager import HelpManager
from .kpm import KPMClient

logger = logging.getLogger(__name__)


class CatalogTemplateGenerator:
    """Main application orchestrator for FBC template generation"""

    def __init__(self, config: RunConfig, builder: Optional[BundleBuilder] = None):
        """
        Initialize the generator with dependency injection

        Args:
            config: Explicit run configuration
            builder: Bundle/catalog builder (defaults to a KPMClient created per run)
        """
        self.config = config
        self.layout = PackageLayout(config.package_dir)
        self.builder = builder

    def run(self) -> Dict[CatalogVersion, Path]:
        """
        Generate FBC templates (and catalogs) for every catalog version

        Inputs are validated and the template is parsed before the output
        directory is cleared. Any error aborts the run.

        Returns:
            Dict mapping each catalog version to its output directory, in
            catalog version order

        Raises:
            CatalogTemplateError: On the first failure
        """
        self.layout.validate()
        template = FBCTemplate.from_file(self.layout.template_file)
        values = load_template_values(self.layout.values_file)
        bundle_dirs = self.layout.bundle_dirs()

        clear_directory(self.layout.output_dir)

        if self.builder is not None:
            return self._run_with_builder(self.builder, bundle_dirs, template, values)

        with KPMClient(self.config.kpm_binary) as builder:
            return self._run_with_builder(builder, bundle_dirs, template, values)

    def _run_with_builder(self, builder: BundleBuilder, bundle_dirs: List[Path],
                          template: FBCTemplate, values: Dict) -> Dict[CatalogVersion, Path]:
        bundles = self.fetch_bundles(builder, bundle_dirs)
        relation = build_relation(bundles)

        if not relation.catalog_versions:
            logger.warning(f"No bundle in {self.layout.package_dir} targets any catalog version, nothing to generate")
            return {}

        logger.info(
            f"Generating {len(relation.catalog_versions)} catalog version(s) from {len(bundles)} bundle(s): "
            f"{', '.join(v.canonical for v in relation.catalog_versions)}"
        )
        return self.generate_catalogs(builder, relation, template, values)

    def fetch_bundles(self, builder: BundleBuilder, bundle_dirs: List[Path]) -> List[Bundle]:
        """
        Describe every bundle directory on a bounded pool

        The first failure cancels the fetches that have not started and is
        raised once the running ones finish. Results keep directory order.

        Args:
            builder: Bundle/catalog builder
            bundle_dirs: Bundle directories in name order

        Returns:
            List[Bundle]: One bundle per directory, in directory order
        """
        if not bundle_dirs:
            return []

        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            futures = [
                executor.submit(self._fetch_bundle, builder, bundle_dir)
                for bundle_dir in bundle_dirs
            ]
            done, not_done = wait(futures, return_when=FIRST_EXCEPTION)

            for future in not_done:
                future.cancel()

            for future in futures:
                if future in done and future.exception() is not None:
                    raise future.exception()

        return [future.result() for future in futures]

    def _fetch_bundle(self, builder: BundleBuilder, bundle_dir: Path) -> Bundle:
        try:
            return fetch_bundle(bundle_dir, self.config.registry_namespace, builder)
        except CatalogTemplateError as e:
            raise _with_context(e, f"could not build bundle {bundle_dir}") from e

    def generate_catalogs(self, builder: BundleBuilder, relation: CatalogRelation,
                          template: FBCTemplate, values: Dict) -> Dict[CatalogVersion, Path]:
        """
        Render (and build) every catalog version on a bounded pool

        Every failure is logged; the failure of the lowest catalog version is
        raised after all catalog versions have finished.
        """
        records = list(assemble_template_data(relation, values))

        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            futures = [
                executor.submit(self._generate_catalog, builder, template, data)
                for data in records
            ]

        failures = []
        results = {}
        for data, future in zip(records, futures):
            error = future.exception()
            if error is not None:
                logger.error(f"Catalog version {data.catalog_version} failed: {error}")
                failures.append(error)
                continue
            results[data.catalog_version] = future.result()

        if failures:
            if len(failures) > 1:
                logger.error(f"{len(failures)} of {len(records)} catalog versions failed")
            raise failures[0]

        return results

    def _generate_catalog(self, builder: BundleBuilder, template: FBCTemplate, data: TemplateData) -> Path:
        catalog_version = data.catalog_version
        try:
            template_file = write_file_atomic(
                self.layout.rendered_template_file(catalog_version),
                template.render(data),
            )
            logger.info(f"Wrote FBC template for {catalog_version} with {len(data.bundles)} bundle(s): {template_file}")

            if self.config.build_catalogs:
                catalog = builder.build_and_render_catalog(catalog_version, template_file)
                catalog_file = write_file_atomic(self.layout.catalog_file(catalog_version), catalog)
                logger.info(f"Wrote catalog for {catalog_version}: {catalog_file}")
        except CatalogTemplateError as e:
            raise _with_context(e, f"could not build catalog {catalog_version}") from e

        return self.layout.catalog_version_dir(catalog_version)


def _with_context(error: CatalogTemplateError, context: str) -> CatalogTemplateError:
    """Prefix an error message, keeping its type and attributes (e.g. command output)"""
    wrapped = type(error)(f"{context}: {error}")
    wrapped.__dict__.update(error.__dict__)
    return wrapped


# Factory function for easy creation
def create_generator(config: RunConfig, builder: Optional[BundleBuilder] = None) -> CatalogTemplateGenerator:
    """
    Factory function to create a CatalogTemplateGenerator

    Args:
        config: Run configuration
        builder: Optional builder override (tests pass a fake)

    Returns:
        CatalogTemplateGenerator: Configured generator
    """
    return CatalogTemplateGenerator(config, builder=builder)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser"""
    parser = argparse.ArgumentParser(
        prog='catalog-template-template',
        description=(
            'Generate one FBC template (and catalog) per catalog version '
            'from the bundles of an operator package directory'
        ),
    )
    parser.add_argument(
        'package_dir', nargs='?', metavar='packageDir',
        help='Package directory containing one sub-directory per bundle'
    )
    parser.add_argument(
        '--registry-namespace',
        help=(
            'The registry namespace (e.g. quay.io/operatorhubio); '
            f'defaults to ${EnvironmentVariables.REGISTRY_NAMESPACE}'
        )
    )
    parser.add_argument(
        '--kpm-binary',
        help=f'kpm binary to run; defaults to ${EnvironmentVariables.KPM_BINARY} or kpm on PATH'
    )
    parser.add_argument(
        '--workers', type=int, default=RunDefaults.WORKERS,
        help='Maximum concurrent kpm invocations (default: %(default)s)'
    )
    parser.add_argument(
        '--templates-only', action='store_true',
        help='Only render FBC templates, skip building catalogs'
    )
    parser.add_argument(
        '--debug', action='store_true', help='Enable debug logging'
    )
    parser.add_argument(
        '--examples', action='store_true', help='Show usage examples and exit'
    )
    return parser


def handle_early_exit_flags(args) -> bool:
    """Handle early-exit flags like --examples. Returns True if output was shown; exits 1 without packageDir."""
    help_manager = HelpManager()
    if args.examples:
        help_manager.show_examples()
        return True
    if not args.package_dir:
        help_manager.show_help()
        sys.exit(1)
    return False


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point"""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if handle_early_exit_flags(args):
        return

    setup_logging(args.debug)

    try:
        config = RunConfig.from_args(args)
        generator = create_generator(config)
        generator.run()
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        sys.exit(1)
    except CatalogTemplateError as e:
        logger.error(str(e))
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
