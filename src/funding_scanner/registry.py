"""Funder pattern registry plus per-funder grant-number rules.

The registry is plain data (``configs/patterns/funders.yaml``) loaded into an
ordered tuple of immutable :class:`FunderPattern` records. Registry order is
the pattern evaluation order, and therefore decides which of two overlapping
matches of equal priority survives.

Funder-specific validation and normalization live in the ``VALIDATORS`` and
``NORMALIZERS`` mappings, keyed by funder id. Funders without an entry accept
any grant number and keep it as captured.
"""

import logging
import re
from collections.abc import Callable
from datetime import datetime
from functools import lru_cache

from pydantic import ValidationError

from funding_scanner.config_loader import load_funder_patterns
from funding_scanner.exceptions import RegistryError
from funding_scanner.models import FunderPattern

logger = logging.getLogger(__name__)

MIN_GRANT_NUMBER_LENGTH = 3

DOE_OFFICE_CODES = ("SC", "EE", "FE", "NE", "OE", "EM", "AR", "CE")
NSF_DIRECTORATE_CODES = ("PHY", "AST", "DMR", "CHE", "DMS", "MPS", "ENG", "BIO")

_QUANTISED_RE = re.compile(r"^\d{8}[A-Z]{3}\d{6}$")
_NSF_AWARD_RE = re.compile(r"^[A-Z]{3,4}\d{7}$")
_NSF_LETTERS_RE = re.compile(r"^([A-Z]{3,4})(\d{7})$")
_ERC_RE = re.compile(r"^\d{6,9}$")


def _leading_year(grant_number: str) -> int | None:
    head = grant_number[:4]
    if not head.isdigit():
        return None
    return int(head)


def validate_nsfc(grant_number: str) -> bool:
    # First character: 1-8 department, U joint fund, 9 major program
    if not 8 <= len(grant_number) <= 11:
        return False
    first = grant_number[0]
    if first in ("U", "9"):
        return True
    return first in "12345678"


def validate_most(grant_number: str) -> bool:
    year = _leading_year(grant_number)
    if year is None:
        return False
    return 2016 <= year <= datetime.now().year + 1


def validate_most_legacy(grant_number: str) -> bool:
    # 973 and 863 programs ran 2001-2017
    year = _leading_year(grant_number)
    if year is None:
        return False
    return 2001 <= year <= 2017


def validate_doe(grant_number: str) -> bool:
    # Checked as normalized, so "de-sc0012704" is accepted
    grant_number = grant_number.upper()
    if grant_number.startswith("DE-"):
        return True
    if _QUANTISED_RE.match(grant_number):
        return True
    return grant_number[:2] in DOE_OFFICE_CODES


def validate_nsf(grant_number: str) -> bool:
    compact = grant_number.replace("-", "")
    if any(compact[:3].startswith(code) for code in NSF_DIRECTORATE_CODES):
        return True
    return bool(_NSF_AWARD_RE.match(compact))


def validate_erc(grant_number: str) -> bool:
    return bool(_ERC_RE.match(grant_number))


def normalize_nsf(grant_number: str) -> str:
    """PHY2310429 -> PHY-2310429"""
    match = _NSF_LETTERS_RE.match(grant_number)
    if match:
        return f"{match.group(1)}-{match.group(2)}"
    return grant_number


def normalize_doe(grant_number: str) -> str:
    return grant_number.upper()


def normalize_junta_andalucia(grant_number: str) -> str:
    """P18-FR 5057 / P18-FR- 5057 -> P18-FR-5057"""
    return re.sub(r"-+", "-", re.sub(r"\s+", "-", grant_number))


VALIDATORS: dict[str, Callable[[str], bool]] = {
    "NSFC": validate_nsfc,
    "MoST": validate_most,
    "MoST-973": validate_most_legacy,
    "MoST-863": validate_most_legacy,
    "DOE": validate_doe,
    "NSF": validate_nsf,
    "ERC": validate_erc,
}

NORMALIZERS: dict[str, Callable[[str], str]] = {
    "NSF": normalize_nsf,
    "DOE": normalize_doe,
    "JuntaAndalucia": normalize_junta_andalucia,
}


def validate_grant_number(funder_id: str, grant_number: str) -> bool:
    if not grant_number or len(grant_number) < MIN_GRANT_NUMBER_LENGTH:
        return False

    validator = VALIDATORS.get(funder_id)
    if validator is None:
        return True
    return validator(grant_number)


def normalize_grant_number(funder_id: str, grant_number: str) -> str:
    normalizer = NORMALIZERS.get(funder_id)
    if normalizer is None:
        return grant_number
    return normalizer(grant_number)


def build_registry(records: list[dict]) -> tuple[FunderPattern, ...]:
    """Validate raw registry records and compile their patterns.

    Args:
        records: Funder records as read from the YAML registry

    Returns:
        Funders in registry order

    Raises:
        RegistryError: A record is malformed, a regex does not compile or an
            id is used twice
    """
    funders: list[FunderPattern] = []
    seen_ids: set[str] = set()

    for position, record in enumerate(records):
        if not isinstance(record, dict):
            raise RegistryError(f"Registry entry #{position} is not a mapping")

        funder_id = record.get("id", f"#{position}")
        try:
            funder = FunderPattern(**record)
        except (ValidationError, TypeError) as e:
            raise RegistryError(f"Invalid registry entry {funder_id}: {e}") from e

        if funder.id in seen_ids:
            raise RegistryError(f"Duplicate funder id in registry: {funder.id}")
        if not funder.patterns:
            raise RegistryError(f"Funder {funder.id} has no patterns")

        seen_ids.add(funder.id)
        funders.append(funder)

    return tuple(funders)


@lru_cache(maxsize=8)
def load_registry(
    patterns_file: str | None = None, custom_config_dir: str | None = None
) -> tuple[FunderPattern, ...]:
    records = load_funder_patterns(patterns_file, custom_config_dir)
    registry = build_registry(records)
    logger.debug(f"Loaded {len(registry)} funders into the registry")
    return registry


def get_registry() -> tuple[FunderPattern, ...]:
    """Default registry, loaded once per process."""
    return load_registry()


def get_funder(funder_id: str, registry: tuple[FunderPattern, ...] | None = None) -> FunderPattern | None:
    for funder in registry or get_registry():
        if funder.id == funder_id:
            return funder
    return None
