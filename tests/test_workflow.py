#!/usr/bin/env python3
"""
Complete Workflow Test Suite

Tests a full generator run against package directories on disk, with the
kpm builder replaced by an in-memory fake:
1. bundles are described and grouped per catalog version
2. one FBC template (and catalog) is written per catalog version
3. failures abort the run without leaving output behind
4. CLI configuration resolution (flag vs environment)
"""

import argparse
from pathlib import Path

import pytest
import yaml

from test_constants import FakeBundleBuilder, TestUtilities, WorkflowTestConstants
TestUtilities.setup_test_path()

from libs.catalog import parse_catalog_version  # noqa: E402
from libs.core import RunConfig  # noqa: E402
from libs.core.exceptions import (  # noqa: E402
    ConfigurationError, ExternalToolError, FileOperationError, FormatError, TemplateError, VersionError
)
from libs.main_app import create_argument_parser, create_generator, main  # noqa: E402


def make_config(package_dir: Path, **overrides) -> RunConfig:
    settings = {
        "package_dir": package_dir,
        "registry_namespace": WorkflowTestConstants.REGISTRY_NAMESPACE,
        "workers": 2,
    }
    settings.update(overrides)
    return RunConfig(**settings)


@pytest.fixture
def package(tmp_path):
    """Package with B1 (1.0.0, 4.16), B2 (1.2.0, 4.16+4.17), B3 (0.9.0, 4.17) and an unreleased bundle"""
    package_dir = TestUtilities.write_package(tmp_path / "example-operator")
    TestUtilities.write_bundle(package_dir, "b1", ["4.16"])
    TestUtilities.write_bundle(package_dir, "b2", ["4.16", "4.17"])
    TestUtilities.write_bundle(package_dir, "b3", ["4.17"])
    TestUtilities.write_bundle(package_dir, "unreleased", [])

    builder = FakeBundleBuilder({
        "b1": TestUtilities.make_descriptor("example.v1.0.0", "1.0.0"),
        "b2": TestUtilities.make_descriptor("example.v1.2.0", "1.2.0"),
        "b3": TestUtilities.make_descriptor("example.v0.9.0", "0.9.0"),
        "unreleased": TestUtilities.make_descriptor("example.v2.0.0", "2.0.0"),
    })
    return package_dir, builder


def rendered_bundle_names(path: Path):
    document = yaml.safe_load(path.read_text())
    return [entry["name"] for entry in document["entries"] if entry["schema"] == "olm.bundle"]


class TestGeneratorRun:
    """Successful runs"""

    def test_templates_and_catalogs_written(self, package):
        package_dir, builder = package

        results = create_generator(make_config(package_dir), builder=builder).run()

        assert [v.canonical for v in results] == ["4.16", "4.17"]
        output_dir = package_dir / "catalogs"
        assert sorted(p.name for p in output_dir.iterdir()) == ["v4.16", "v4.17"]

        assert rendered_bundle_names(output_dir / "v4.16" / "fbc-template.yaml") == [
            "example.v1.0.0", "example.v1.2.0"
        ]
        assert rendered_bundle_names(output_dir / "v4.17" / "fbc-template.yaml") == [
            "example.v0.9.0", "example.v1.2.0"
        ]
        for version_dir in ("v4.16", "v4.17"):
            assert (output_dir / version_dir / "catalog.json").read_bytes() == builder.catalog

    def test_every_bundle_built_with_namespace(self, package):
        package_dir, builder = package
        create_generator(make_config(package_dir), builder=builder).run()
        assert sorted(builder.bundle_calls) == [
            (name, WorkflowTestConstants.REGISTRY_NAMESPACE) for name in ("b1", "b2", "b3", "unreleased")
        ]

    def test_catalog_built_from_rendered_template(self, package):
        package_dir, builder = package
        create_generator(make_config(package_dir), builder=builder).run()

        built = dict(builder.catalog_calls)
        assert set(built) == {"4.16", "4.17"}
        assert built["4.16"] == (package_dir / "catalogs" / "v4.16" / "fbc-template.yaml").read_text()

    def test_templates_only(self, package):
        package_dir, builder = package
        create_generator(make_config(package_dir, build_catalogs=False), builder=builder).run()

        assert builder.catalog_calls == []
        assert (package_dir / "catalogs" / "v4.16" / "fbc-template.yaml").is_file()
        assert not (package_dir / "catalogs" / "v4.16" / "catalog.json").exists()

    def test_rerun_is_byte_identical(self, package):
        package_dir, builder = package
        output = package_dir / "catalogs" / "v4.17" / "fbc-template.yaml"

        create_generator(make_config(package_dir, workers=1), builder=builder).run()
        first = output.read_bytes()
        create_generator(make_config(package_dir, workers=4), builder=builder).run()

        assert output.read_bytes() == first

    def test_previous_output_cleared(self, package):
        package_dir, builder = package
        stale = package_dir / "catalogs" / "v4.1" / "fbc-template.yaml"
        stale.parent.mkdir(parents=True)
        stale.write_text("stale")

        create_generator(make_config(package_dir), builder=builder).run()

        assert not stale.parent.exists()
        assert "catalogs" not in [name for name, _ in builder.bundle_calls]

    def test_canonical_spelling_used_for_paths(self, tmp_path):
        package_dir = TestUtilities.write_package(tmp_path / "pkg")
        TestUtilities.write_bundle(package_dir, "b1", ["+4.9"])
        builder = FakeBundleBuilder({"b1": TestUtilities.make_descriptor("example.v1.0.0", "1.0.0")})

        results = create_generator(make_config(package_dir), builder=builder).run()

        assert list(results) == [parse_catalog_version("4.9")]
        assert (package_dir / "catalogs" / "v+4.9" / "fbc-template.yaml").is_file()

    def test_no_catalog_versions(self, tmp_path):
        package_dir = TestUtilities.write_package(tmp_path / "pkg")
        TestUtilities.write_bundle(package_dir, "b1", [])
        builder = FakeBundleBuilder({"b1": TestUtilities.make_descriptor("example.v1.0.0", "1.0.0")})

        assert create_generator(make_config(package_dir), builder=builder).run() == {}
        assert builder.catalog_calls == []

    def test_hidden_directory_is_a_bundle(self, package):
        package_dir, builder = package
        TestUtilities.write_bundle(package_dir, ".staging", ["4.16"])
        builder.descriptors[".staging"] = TestUtilities.make_descriptor("example.v1.1.0", "1.1.0")

        create_generator(make_config(package_dir), builder=builder).run()

        assert (".staging", WorkflowTestConstants.REGISTRY_NAMESPACE) in builder.bundle_calls
        assert rendered_bundle_names(package_dir / "catalogs" / "v4.16" / "fbc-template.yaml") == [
            "example.v1.0.0", "example.v1.1.0", "example.v1.2.0"
        ]

    def test_kpm_file_rendered(self, tmp_path):
        template = "{% for bundle in bundles %}{{ bundle.kpm_file }}\n{% endfor %}"
        package_dir = TestUtilities.write_package(tmp_path / "pkg", template=template)
        TestUtilities.write_bundle(package_dir, "b1", ["4.16"])
        builder = FakeBundleBuilder({"b1": TestUtilities.make_descriptor("example.v1.0.0", "1.0.0")})

        create_generator(make_config(package_dir), builder=builder).run()

        rendered = (package_dir / "catalogs" / "v4.16" / "fbc-template.yaml").read_text()
        assert rendered == f"{WorkflowTestConstants.FAKE_WORK_DIR / 'b1.bundle.kpm'}\n"

    def test_no_leftover_temporary_files(self, package):
        package_dir, builder = package
        create_generator(make_config(package_dir), builder=builder).run()
        leftovers = [p for p in (package_dir / "catalogs").rglob("*") if p.name.endswith(".tmp")]
        assert leftovers == []


class TestGeneratorFailures:
    """Failures abort the run and leave no catalog output"""

    def test_three_component_catalog_version(self, package):
        package_dir, builder = package
        TestUtilities.write_bundle(package_dir, "b4", ["4.1.2"])

        with pytest.raises(FormatError, match="could not build bundle"):
            create_generator(make_config(package_dir), builder=builder).run()

        assert not (package_dir / "catalogs").exists()

    def test_missing_package_property(self, package):
        package_dir, builder = package
        TestUtilities.write_bundle(package_dir, "b4", ["4.16"])
        builder.descriptors["b4"] = TestUtilities.make_descriptor("example.v1.3.0", None)

        with pytest.raises(VersionError):
            create_generator(make_config(package_dir), builder=builder).run()

        assert not (package_dir / "catalogs").exists()

    def test_builder_failure(self, package):
        package_dir, builder = package
        builder.failures["b2"] = ExternalToolError("exec: kpm build bundle: exit status 1", output="boom")

        with pytest.raises(ExternalToolError, match="boom") as excinfo:
            create_generator(make_config(package_dir), builder=builder).run()

        assert "could not build bundle" in str(excinfo.value)
        assert excinfo.value.output == "boom"
        assert not (package_dir / "catalogs").exists()

    def test_catalog_build_failure_reported(self, package):
        package_dir, builder = package
        builder.failures["4.17"] = ExternalToolError("exec: kpm build catalog: exit status 1")

        with pytest.raises(ExternalToolError, match="could not build catalog 4.17"):
            create_generator(make_config(package_dir), builder=builder).run()

        assert (package_dir / "catalogs" / "v4.16" / "catalog.json").is_file()
        assert not (package_dir / "catalogs" / "v4.17" / "catalog.json").exists()

    def test_template_syntax_error_before_clearing_output(self, package):
        package_dir, builder = package
        (package_dir / "fbc-template.yaml.tmpl").write_text("{% if %}")
        previous = package_dir / "catalogs" / "v4.16" / "fbc-template.yaml"
        previous.parent.mkdir(parents=True)
        previous.write_text("previous")

        with pytest.raises(TemplateError):
            create_generator(make_config(package_dir), builder=builder).run()

        assert previous.read_text() == "previous"
        assert builder.bundle_calls == []

    def test_template_render_error(self, package):
        package_dir, builder = package
        (package_dir / "fbc-template.yaml.tmpl").write_text("{{ values.notThere }}\n")

        with pytest.raises(TemplateError, match="could not execute template"):
            create_generator(make_config(package_dir), builder=builder).run()

    def test_missing_values_file(self, package):
        package_dir, builder = package
        (package_dir / "fbc-template.values.yaml").unlink()

        with pytest.raises(ConfigurationError, match="fbc-template.values.yaml"):
            create_generator(make_config(package_dir), builder=builder).run()

    def test_temporary_file_creation_failure(self, package, monkeypatch):
        package_dir, builder = package

        def refuse(*args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr("libs.core.utils.tempfile.mkstemp", refuse)

        with pytest.raises(FileOperationError, match="could not write output file"):
            create_generator(make_config(package_dir), builder=builder).run()

    def test_missing_package_dir(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Package directory not found"):
            create_generator(make_config(tmp_path / "missing"), builder=FakeBundleBuilder({})).run()


class TestRunConfiguration:
    """CLI arguments and environment resolution"""

    def parse(self, *argv) -> argparse.Namespace:
        return create_argument_parser().parse_args(list(argv))

    def test_flag_wins_over_environment(self, tmp_path):
        args = self.parse(str(tmp_path), "--registry-namespace", "quay.io/flag")
        config = RunConfig.from_args(args, environ={"CTT_REGISTRY_NAMESPACE": "quay.io/env"})
        assert config.registry_namespace == "quay.io/flag"

    def test_environment_fallback(self, tmp_path):
        config = RunConfig.from_args(self.parse(str(tmp_path)), environ={"CTT_REGISTRY_NAMESPACE": "quay.io/env"})
        assert config.registry_namespace == "quay.io/env"
        assert config.package_dir == Path(tmp_path)
        assert config.build_catalogs is True
        assert config.kpm_binary == "kpm"

    def test_missing_namespace(self, tmp_path):
        with pytest.raises(ConfigurationError, match="registry namespace must be set"):
            RunConfig.from_args(self.parse(str(tmp_path)), environ={})

    def test_empty_flag_does_not_fall_back(self, tmp_path):
        args = self.parse(str(tmp_path), "--registry-namespace", "")
        with pytest.raises(ConfigurationError):
            RunConfig.from_args(args, environ={"CTT_REGISTRY_NAMESPACE": "quay.io/env"})

    def test_kpm_binary_and_flags(self, tmp_path):
        args = self.parse(str(tmp_path), "--registry-namespace", "ns", "--templates-only", "--workers", "8")
        config = RunConfig.from_args(args, environ={"CTT_KPM_BINARY": "/opt/kpm"})
        assert config.kpm_binary == "/opt/kpm"
        assert config.workers == 8
        assert config.build_catalogs is False

    def test_invalid_workers(self, tmp_path):
        args = self.parse(str(tmp_path), "--registry-namespace", "ns", "--workers", "0")
        with pytest.raises(ConfigurationError, match="--workers"):
            RunConfig.from_args(args, environ={})

    def test_main_exits_without_namespace(self, tmp_path, monkeypatch):
        monkeypatch.delenv("CTT_REGISTRY_NAMESPACE", raising=False)
        # Keep pytest's own log capture handlers on the root logger
        monkeypatch.setattr("libs.main_app.setup_logging", lambda debug=False: None)
        package_dir = TestUtilities.write_package(tmp_path / "pkg")

        with pytest.raises(SystemExit) as excinfo:
            main([str(package_dir)])

        assert excinfo.value.code == 1
        assert not (package_dir / "catalogs").exists()

    def test_main_without_package_dir(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main([])

        assert excinfo.value.code == 1
        assert "USAGE:" in capsys.readouterr().out

    def test_main_examples(self, capsys):
        main(["--examples"])
        assert "--registry-namespace" in capsys.readouterr().out
