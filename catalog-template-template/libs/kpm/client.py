"""
KPM Client

Handles low-level kpm binary operations: building and rendering bundles and
catalogs.
"""

import json
import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..core.constants import ErrorMessages, FileConstants, KPMConstants
from ..core.exceptions import ExternalToolError, FileOperationError

logger = logging.getLogger(__name__)


class KPMClient:
    """Low-level client for kpm binary operations"""

    def __init__(self, kpm_binary: str = KPMConstants.DEFAULT_BINARY, work_dir: Optional[Path] = None):
        """
        Initialize kpm client

        Args:
            kpm_binary: Name or path of the kpm binary
            work_dir: Directory for spec and .kpm files (a temporary directory
                owned by the client when omitted)
        """
        self.kpm_binary = kpm_binary
        self._kpm_path = None
        self._owns_work_dir = work_dir is None
        self.work_dir = Path(work_dir) if work_dir else Path(tempfile.mkdtemp(prefix=KPMConstants.WORK_DIR_PREFIX))

    def __enter__(self) -> 'KPMClient':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Remove the working directory if the client created it"""
        if self._owns_work_dir and self.work_dir.exists():
            shutil.rmtree(self.work_dir, ignore_errors=True)
            logger.debug(f"Removed kpm working directory {self.work_dir}")

    def _find_kpm_binary(self) -> str:
        """
        Find kpm binary

        Returns:
            str: Path to kpm binary

        Raises:
            ExternalToolError: If kpm binary not found
        """
        if self._kpm_path:
            return self._kpm_path

        found = shutil.which(self.kpm_binary)
        if not found:
            raise ExternalToolError(ErrorMessages.KPMError.BINARY_NOT_FOUND.format(binary=self.kpm_binary))

        self._kpm_path = found
        logger.debug(f"Found kpm binary at: {self._kpm_path}")
        return self._kpm_path

    def _run_kpm_command(self, args: List[str], timeout: int) -> subprocess.CompletedProcess:
        """
        Run kpm with the given arguments

        Args:
            args: Arguments after the binary name
            timeout: Timeout in seconds

        Returns:
            subprocess.CompletedProcess: Result with stdout/stderr as bytes

        Raises:
            ExternalToolError: If kpm cannot be started, times out or exits non-zero
        """
        cmd = [self._find_kpm_binary()] + args
        command = ' '.join(['kpm'] + args)
        logger.debug(f"Running kpm command: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, capture_output=True, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            raise ExternalToolError(
                ErrorMessages.KPMError.COMMAND_TIMED_OUT.format(command=command, timeout=timeout),
                command=command,
                output=_combined_output(e.stdout, e.stderr),
            ) from e
        except OSError as e:
            raise ExternalToolError(f"exec: {command}: {e}", command=command) from e

        if result.returncode != 0:
            raise ExternalToolError(
                ErrorMessages.KPMError.COMMAND_FAILED.format(command=command, returncode=result.returncode),
                command=command,
                output=_combined_output(result.stdout, result.stderr),
            )

        return result

    def _write_spec(self, path: Path, spec: Dict[str, Any]) -> Path:
        try:
            with open(path, 'w') as f:
                yaml.safe_dump(spec, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise FileOperationError(f"could not write kpm spec {path}: {e}") from e
        return path

    def build_bundle(self, bundle_dir: Path, registry_namespace: str) -> Path:
        """
        Build a bundle .kpm file from a bundle source directory

        Returns:
            Path: The built .kpm file
        """
        bundle_root = Path(bundle_dir).resolve()
        spec_file = self._write_spec(
            self.work_dir / FileConstants.BUNDLE_SPEC_TEMPLATE.format(name=bundle_root.name),
            {
                'apiVersion': KPMConstants.SPEC_API_VERSION,
                'kind': str(KPMConstants.SpecKind.BUNDLE),
                'bundleRoot': str(bundle_root),
                'registryNamespace': registry_namespace,
            },
        )
        kpm_file = self.work_dir / FileConstants.BUNDLE_KPM_TEMPLATE.format(name=bundle_root.name)

        self._run_kpm_command(
            [str(KPMConstants.Subcommand.BUILD), 'bundle', str(spec_file), f"--output={kpm_file}"],
            timeout=KPMConstants.BUILD_TIMEOUT,
        )
        logger.debug(f"Built bundle {bundle_root.name} into {kpm_file}")
        return kpm_file

    def render(self, kpm_file: Path) -> bytes:
        """Render a .kpm file and return its stdout"""
        result = self._run_kpm_command(
            [str(KPMConstants.Subcommand.RENDER), str(kpm_file)],
            timeout=KPMConstants.RENDER_TIMEOUT,
        )
        return result.stdout

    def build_and_render_bundle(self, bundle_dir: Path, registry_namespace: str) -> Tuple[Dict[str, Any], Path]:
        """
        Build a bundle and decode its rendered descriptor

        Args:
            bundle_dir: Bundle source directory
            registry_namespace: Registry namespace (e.g. quay.io/operatorhubio)

        Returns:
            Tuple of the rendered olm.bundle descriptor and the built .kpm file,
            which stays in the working directory until the client is closed

        Raises:
            ExternalToolError: If kpm fails or its output is not a JSON object
        """
        kpm_file = self.build_bundle(bundle_dir, registry_namespace)
        output = self.render(kpm_file)

        try:
            descriptor = json.loads(output)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ExternalToolError(
                ErrorMessages.KPMError.INVALID_JSON.format(source=kpm_file.name, error=e),
                output=_combined_output(output, b''),
            ) from e

        if not isinstance(descriptor, dict):
            raise ExternalToolError(
                ErrorMessages.KPMError.INVALID_JSON.format(
                    source=kpm_file.name, error=f"expected an object, got {type(descriptor).__name__}"
                )
            )
        return descriptor, kpm_file

    def build_catalog(self, catalog_version, template_file: Path) -> Path:
        """
        Build a catalog .kpm file from a rendered FBC template

        Returns:
            Path: The built .kpm file
        """
        canonical = catalog_version.canonical
        spec_file = self._write_spec(
            self.work_dir / FileConstants.CATALOG_SPEC_TEMPLATE.format(catalog_version=canonical),
            {
                'apiVersion': KPMConstants.SPEC_API_VERSION,
                'kind': str(KPMConstants.SpecKind.CATALOG),
                'tag': KPMConstants.CATALOG_TAG_TEMPLATE.format(catalog_version=canonical),
                'migrationLevel': KPMConstants.MIGRATION_LEVEL,
                'cacheFormat': KPMConstants.CACHE_FORMAT,
                'source': {
                    'sourceType': str(KPMConstants.SourceType.FBC_TEMPLATE),
                    'fbcTemplate': {
                        'templateFile': str(Path(template_file).resolve()),
                    },
                },
            },
        )

        self._run_kpm_command(
            [str(KPMConstants.Subcommand.BUILD), 'catalog', str(spec_file), f"--output={self.work_dir}"],
            timeout=KPMConstants.BUILD_TIMEOUT,
        )
        kpm_file = self.work_dir / FileConstants.CATALOG_KPM_TEMPLATE.format(catalog_version=canonical)
        logger.debug(f"Built catalog {canonical} into {kpm_file}")
        return kpm_file

    def build_and_render_catalog(self, catalog_version, template_file: Path) -> bytes:
        """
        Build a catalog for one catalog version and return the rendered catalog

        Raises:
            ExternalToolError: If kpm fails
        """
        kpm_file = self.build_catalog(catalog_version, template_file)
        return self.render(kpm_file)


def _combined_output(stdout: Optional[bytes], stderr: Optional[bytes]) -> str:
    """Decode captured stdout and stderr into one diagnostic string"""
    parts = []
    for stream in (stdout, stderr):
        if not stream:
            continue
        if isinstance(stream, bytes):
            stream = stream.decode('utf-8', errors='replace')
        parts.append(stream)
    return ''.join(parts)
