"""Compliance packages - predefined requirement bundles with boolean overrides.

A package is the coarser alternative to the full questionnaire: every rule
has a base level and at most one override keyed on a boolean flag. There is
no tri-state logic and no interaction between rules.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from backend.compliance.catalog.documents import (
    A1_CERTIFICATE,
    BG_MEMBERSHIP,
    COMMERCIAL_REGISTER_EXTRACT,
    CRAFT_REGISTER,
    DATA_PROCESSING_AGREEMENT,
    HEALTH_FUND_CLEARANCE,
    LIABILITY_INSURANCE,
    SAFETY_INSTRUCTION,
    SOKA_BAU,
    TAX_CLEARANCE,
    TAX_EXEMPTION_CERTIFICATE,
    TRADE_REGISTRATION,
)
from backend.compliance.errors import UnknownPackage
from backend.compliance.models.common import RequirementLevel, RequirementLevelMap
from backend.compliance.models.facts import ConditionalFlags

FlagName = Literal[
    "has_employees",
    "provides_construction_services",
    "is_soka_pflicht",
    "provides_abroad",
    "processes_personal_data",
]


class ConditionalRequirement(BaseModel):
    """Single-flag override for a package rule."""

    model_config = ConfigDict(frozen=True)

    flag: FlagName
    when_true: RequirementLevel
    when_false: RequirementLevel | None = None


class PackageRule(BaseModel):
    """Requirement rule for one document type inside a package."""

    model_config = ConfigDict(frozen=True)

    document_type: str
    base_requirement: RequirementLevel
    condition: ConditionalRequirement | None = None
    tooltip: str | None = None

    def resolve(self, flags: ConditionalFlags) -> RequirementLevel:
        """Resolve this rule's level against boolean flags."""
        if self.condition is None:
            return self.base_requirement
        if getattr(flags, self.condition.flag):
            return self.condition.when_true
        return self.condition.when_false or self.base_requirement


class CompliancePackage(BaseModel):
    """Named, ordered bundle of package rules."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    rules: tuple[PackageRule, ...] = Field(default_factory=tuple)


def _always(code: str, level: RequirementLevel, tooltip: str | None = None) -> PackageRule:
    return PackageRule(document_type=code, base_requirement=level, tooltip=tooltip)


def _when(code: str, flag: FlagName, tooltip: str) -> PackageRule:
    """Hidden by default, required when the flag is set."""
    return PackageRule(
        document_type=code,
        base_requirement=RequirementLevel.hidden,
        condition=ConditionalRequirement(
            flag=flag,
            when_true=RequirementLevel.required,
            when_false=RequirementLevel.hidden,
        ),
        tooltip=tooltip,
    )


_REQUIRED = RequirementLevel.required
_OPTIONAL = RequirementLevel.optional

COMPLIANCE_PACKAGES: tuple[CompliancePackage, ...] = (
    CompliancePackage(
        id="handwerk_basis",
        name="Handwerk - Basis",
        description="Grundpaket für Handwerksbetriebe ohne Bauleistungen",
        rules=(
            _always(TRADE_REGISTRATION, _REQUIRED, "Immer erforderlich"),
            _always(CRAFT_REGISTER, _OPTIONAL),
            _when(BG_MEMBERSHIP, "has_employees", "Pflicht bei Mitarbeitenden"),
            _when(HEALTH_FUND_CLEARANCE, "has_employees", "Pflicht bei Mitarbeitenden"),
            _when(DATA_PROCESSING_AGREEMENT, "processes_personal_data", "Pflicht bei Datenverarbeitung"),
            _always(LIABILITY_INSURANCE, _OPTIONAL),
            _always(TAX_CLEARANCE, _OPTIONAL),
            _always(SAFETY_INSTRUCTION, _OPTIONAL),
        ),
    ),
    CompliancePackage(
        id="bau_standard",
        name="Bau - Standard",
        description="Standardpaket für Baubetriebe mit erweiterten Anforderungen",
        rules=(
            _always(TRADE_REGISTRATION, _REQUIRED, "Immer erforderlich"),
            _when(TAX_EXEMPTION_CERTIFICATE, "provides_construction_services", "Pflicht bei Bauleistungen"),
            _always(CRAFT_REGISTER, _OPTIONAL),
            _when(BG_MEMBERSHIP, "has_employees", "Pflicht bei Mitarbeitenden"),
            _when(HEALTH_FUND_CLEARANCE, "has_employees", "Pflicht bei Mitarbeitenden"),
            _when(SOKA_BAU, "is_soka_pflicht", "Pflicht bei SOKA-Pflichtigkeit"),
            _when(DATA_PROCESSING_AGREEMENT, "processes_personal_data", "Pflicht bei Datenverarbeitung"),
            _always(LIABILITY_INSURANCE, _OPTIONAL),
            _always(TAX_CLEARANCE, _OPTIONAL),
            _always(SAFETY_INSTRUCTION, _OPTIONAL),
            _always(COMMERCIAL_REGISTER_EXTRACT, _OPTIONAL),
        ),
    ),
    CompliancePackage(
        id="ausland_plus",
        name="Einsatz im Ausland - Plus",
        description="Erweiterte Anforderungen für internationale Projekte",
        rules=(
            _always(TRADE_REGISTRATION, _REQUIRED, "Immer erforderlich"),
            _when(TAX_EXEMPTION_CERTIFICATE, "provides_construction_services", "Pflicht bei Bauleistungen"),
            _always(CRAFT_REGISTER, _OPTIONAL),
            _when(BG_MEMBERSHIP, "has_employees", "Pflicht bei Mitarbeitenden"),
            _when(HEALTH_FUND_CLEARANCE, "has_employees", "Pflicht bei Mitarbeitenden"),
            _when(SOKA_BAU, "is_soka_pflicht", "Pflicht bei SOKA-Pflichtigkeit"),
            _when(A1_CERTIFICATE, "provides_abroad", "Pflicht bei Entsendung"),
            _when(DATA_PROCESSING_AGREEMENT, "processes_personal_data", "Pflicht bei Datenverarbeitung"),
            _always(LIABILITY_INSURANCE, _OPTIONAL),
            _always(TAX_CLEARANCE, _OPTIONAL),
            _always(SAFETY_INSTRUCTION, _OPTIONAL),
            _always(COMMERCIAL_REGISTER_EXTRACT, _OPTIONAL),
        ),
    ),
)

_PACKAGES_BY_ID = {pkg.id: pkg for pkg in COMPLIANCE_PACKAGES}


def list_packages() -> list[CompliancePackage]:
    """All packages in definition order."""
    return list(COMPLIANCE_PACKAGES)


def get_package(package_id: str) -> CompliancePackage:
    """Look up a package by id.

    Raises:
        UnknownPackage: If no package has this id
    """
    try:
        return _PACKAGES_BY_ID[package_id]
    except KeyError:
        raise UnknownPackage(package_id) from None


def resolve_package(package_id: str, flags: ConditionalFlags) -> RequirementLevelMap:
    """Resolve a package's rules against boolean flags.

    Args:
        package_id: Package to resolve
        flags: Boolean conditional flags

    Returns:
        Map of document code to level for every rule in the package
    """
    package = get_package(package_id)
    return {rule.document_type: rule.resolve(flags) for rule in package.rules}
