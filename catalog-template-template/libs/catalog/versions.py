"""
Catalog Versions

Parsing, validation and ordering of catalog release-line identifiers
("<major>.<minor>", e.g. "4.17").
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List

from ..core.constants import ErrorMessages
from ..core.exceptions import FormatError

# Optionally signed run of ASCII digits. int() alone would also accept
# whitespace and "_" separators.
_INTEGER_PATTERN = re.compile(r'[+-]?[0-9]+')


@dataclass(frozen=True, order=True)
class CatalogVersion:
    """
    A catalog release line.

    Equality, hashing and ordering use (major, minor) only. ``canonical`` keeps
    the spelling from the release config so output paths match it exactly.
    """

    major: int
    minor: int
    canonical: str = field(compare=False)

    def __str__(self) -> str:
        return self.canonical


def _parse_component(part: str, part_name: str) -> int:
    if not _INTEGER_PATTERN.fullmatch(part):
        raise FormatError(ErrorMessages.FormatError.NOT_INTEGER.format(part_name=part_name, part=part))
    number = int(part)
    if number < 0:
        raise FormatError(ErrorMessages.FormatError.NEGATIVE.format(part_name=part_name, part=part))
    return number


def parse_catalog_version(value: str) -> CatalogVersion:
    """
    Parse a "<major>.<minor>" catalog version string

    Args:
        value: Catalog version as written in a release config

    Returns:
        CatalogVersion: Parsed version with ``canonical`` set to ``value``

    Raises:
        FormatError: On wrong arity, leading zeros, non-integer or negative components
    """
    if not isinstance(value, str):
        raise FormatError(ErrorMessages.FormatError.NOT_STRING.format(value=value))

    parts = value.split('.')
    if len(parts) != 2:
        raise FormatError(ErrorMessages.FormatError.WRONG_ARITY.format(value=value))

    for part in parts:
        if len(part) > 1 and part.startswith('0'):
            raise FormatError(ErrorMessages.FormatError.LEADING_ZERO.format(value=value))

    major = _parse_component(parts[0], 'major')
    minor = _parse_component(parts[1], 'minor')

    return CatalogVersion(major=major, minor=minor, canonical=value)


def parse_catalog_versions(values: Iterable[str]) -> List[CatalogVersion]:
    """Parse a sequence of catalog versions, dropping duplicates (first spelling wins)"""
    seen = set()
    versions = []
    for value in values:
        version = parse_catalog_version(value)
        if version in seen:
            continue
        seen.add(version)
        versions.append(version)
    return versions


def sort_catalog_versions(versions: Iterable[CatalogVersion]) -> List[CatalogVersion]:
    """Sort catalog versions numerically by (major, minor), so 4.9 precedes 4.10"""
    return sorted(versions, key=lambda v: (v.major, v.minor))
