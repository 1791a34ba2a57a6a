"""
FBC Template Data

Assembles the per catalog version data handed to the FBC template and renders
it with Jinja2.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List

import jinja2
import yaml

from ..core.config import load_yaml_mapping
from ..core.constants import ErrorMessages, FileConstants
from ..core.exceptions import TemplateDataError, TemplateError
from ..core.utils import read_text_file
from .bundle import Bundle
from .relation import CatalogRelation
from .versions import CatalogVersion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateData:
    """Everything one FBC template render can see"""

    catalog_version: CatalogVersion
    bundles: List[Bundle]
    values: Dict[str, Any]

    def as_context(self) -> Dict[str, Any]:
        return {
            'catalog_version': self.catalog_version,
            'bundles': self.bundles,
            'values': self.values,
        }


def load_template_values(path: Path) -> Dict[str, Any]:
    """Load fbc-template.values.yaml; an empty file yields an empty mapping"""
    return load_yaml_mapping(path, ErrorMessages.ConfigError.VALUES_NOT_MAPPING)


def assemble_template_data(relation: CatalogRelation, values: Dict[str, Any]) -> Iterator[TemplateData]:
    """
    Yield the template data of every catalog version in sorted order

    The values mapping is shared by every record and must not be modified.

    Raises:
        TemplateDataError: If a catalog version of the relation has no bucket
    """
    for catalog_version in relation.catalog_versions:
        if catalog_version not in relation.bundles_by_catalog_version:
            raise TemplateDataError(f"no bundles recorded for catalog version {catalog_version}")
        yield TemplateData(
            catalog_version=catalog_version,
            bundles=relation.bundles_by_catalog_version[catalog_version],
            values=values,
        )


def _to_yaml(value: Any) -> str:
    return yaml.safe_dump(value, default_flow_style=False, sort_keys=False).rstrip('\n')


def _to_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


def _quote(value: Any) -> str:
    return json.dumps(str(value))


TEMPLATE_FILTERS = {
    'to_yaml': _to_yaml,
    'to_json': _to_json,
    'quote': _quote,
}


def create_environment() -> jinja2.Environment:
    """Jinja2 environment for FBC templates: strict, plain text, newline preserving"""
    environment = jinja2.Environment(
        undefined=jinja2.StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )
    environment.filters.update(TEMPLATE_FILTERS)
    return environment


class FBCTemplate:
    """A parsed FBC template source"""

    def __init__(self, source: str, name: str = FileConstants.TEMPLATE_FILE):
        """
        Parse a template source

        Args:
            source: Jinja2 template text
            name: Name used in error messages

        Raises:
            TemplateError: If the source does not parse
        """
        self.name = name
        try:
            self._template = create_environment().from_string(source)
        except jinja2.TemplateSyntaxError as e:
            raise TemplateError(f"could not parse template from {name}: line {e.lineno}: {e.message}") from e

    @classmethod
    def from_file(cls, path: Path) -> 'FBCTemplate':
        return cls(read_text_file(path), name=str(path))

    def render(self, data: TemplateData) -> str:
        """
        Render the template for one catalog version

        Raises:
            TemplateError: If rendering fails
        """
        try:
            return self._template.render(data.as_context())
        except Exception as e:
            raise TemplateError(f"could not execute template {self.name} "
                                f"for catalog version {data.catalog_version}: {e}") from e
