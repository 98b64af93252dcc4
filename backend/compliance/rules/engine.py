"""Rule engine - derives requirement levels from subcontractor business facts."""

from collections.abc import Mapping

from backend.compliance.catalog.documents import (
    A1_CERTIFICATE,
    BG_MEMBERSHIP,
    COMMERCIAL_REGISTER_EXTRACT,
    DATA_PROCESSING_AGREEMENT,
    HEALTH_FUND_CLEARANCE,
    LIABILITY_INSURANCE,
    SAFETY_INSTRUCTION,
    SOKA_BAU,
    TAX_EXEMPTION_CERTIFICATE,
    TRADE_REGISTRATION,
)
from backend.compliance.models.common import (
    Answer,
    RequirementLevel,
    RequirementLevelMap,
    RequirementStatus,
)
from backend.compliance.models.facts import BusinessFacts, OrgFlags

REQUIRED = RequirementLevel.required
OPTIONAL = RequirementLevel.optional
HIDDEN = RequirementLevel.hidden

# Statuses in which a required document still counts as outstanding
OUTSTANDING_STATUSES = frozenset(
    {RequirementStatus.missing, RequirementStatus.rejected, RequirementStatus.expired}
)


def _three_way(answer: Answer, *, yes: RequirementLevel, no: RequirementLevel) -> RequirementLevel:
    """Map a tri-state answer to a level; unknown always maps to optional."""
    if answer == Answer.yes:
        return yes
    if answer == Answer.no:
        return no
    return OPTIONAL


def derive_requirements(
    facts: BusinessFacts, org_flags: OrgFlags | None = None
) -> RequirementLevelMap:
    """Derive the requirement level of every document type from business facts.

    This is a pure function with no I/O or side effects; identical inputs
    always yield identical maps.

    Args:
        facts: Questionnaire answers about the subcontractor
        org_flags: Organizational flags (defaults to no flags set)

    Returns:
        Map of document code to level. Codes absent from the map are hidden.

    Cross-rule interactions:
        - Construction work with unknown employees escalates BG membership
          from optional to required
        - No construction work with employees demotes the safety instruction
          from required to optional
    """
    org_flags = org_flags or OrgFlags()
    levels: RequirementLevelMap = {}

    # Base documents
    levels[TRADE_REGISTRATION] = REQUIRED
    levels[LIABILITY_INSURANCE] = REQUIRED
    levels[COMMERCIAL_REGISTER_EXTRACT] = REQUIRED if org_flags.hr_registered else HIDDEN

    # Employees
    employees = facts.has_employees
    construction = facts.does_construction_work

    if employees == Answer.yes:
        levels[BG_MEMBERSHIP] = REQUIRED
        levels[HEALTH_FUND_CLEARANCE] = OPTIONAL
        levels[SAFETY_INSTRUCTION] = REQUIRED if construction == Answer.yes else OPTIONAL
    elif employees == Answer.no:
        levels[BG_MEMBERSHIP] = HIDDEN
        levels[HEALTH_FUND_CLEARANCE] = HIDDEN
        levels[SAFETY_INSTRUCTION] = HIDDEN
    else:
        levels[BG_MEMBERSHIP] = OPTIONAL
        levels[HEALTH_FUND_CLEARANCE] = OPTIONAL
        levels[SAFETY_INSTRUCTION] = OPTIONAL

    # Construction work
    if construction == Answer.yes:
        levels[TAX_EXEMPTION_CERTIFICATE] = REQUIRED
        if employees == Answer.unknown:
            levels[BG_MEMBERSHIP] = REQUIRED
    elif construction == Answer.no:
        levels[TAX_EXEMPTION_CERTIFICATE] = OPTIONAL
        if employees == Answer.yes:
            levels[SAFETY_INSTRUCTION] = OPTIONAL
    else:
        levels[TAX_EXEMPTION_CERTIFICATE] = OPTIONAL

    # SOKA-BAU is gated on construction work
    if construction == Answer.yes:
        levels[SOKA_BAU] = _three_way(facts.soka_bau_subject, yes=REQUIRED, no=HIDDEN)
    else:
        levels[SOKA_BAU] = HIDDEN

    levels[A1_CERTIFICATE] = _three_way(facts.sends_abroad, yes=REQUIRED, no=HIDDEN)
    levels[DATA_PROCESSING_AGREEMENT] = _three_way(
        facts.processes_personal_data, yes=REQUIRED, no=HIDDEN
    )

    return levels


def level_of(levels: Mapping[str, RequirementLevel], code: str) -> RequirementLevel:
    """Look up a level, treating absent codes as hidden."""
    return levels.get(code, HIDDEN)


def is_document_uncertain(
    code: str, facts: BusinessFacts, levels: Mapping[str, RequirementLevel]
) -> bool:
    """Check whether a document is optional only because an answer is unknown.

    Such documents get flagged for follow-up. A document that is optional
    for any other reason (e.g. a definite answer) is not uncertain.
    """
    if level_of(levels, code) != OPTIONAL:
        return False

    if code in (BG_MEMBERSHIP, HEALTH_FUND_CLEARANCE, SAFETY_INSTRUCTION):
        return facts.has_employees == Answer.unknown
    if code == TAX_EXEMPTION_CERTIFICATE:
        return facts.does_construction_work == Answer.unknown
    if code == SOKA_BAU:
        return (
            facts.does_construction_work == Answer.yes
            and facts.soka_bau_subject == Answer.unknown
        )
    if code == A1_CERTIFICATE:
        return facts.sends_abroad == Answer.unknown
    if code == DATA_PROCESSING_AGREEMENT:
        return facts.processes_personal_data == Answer.unknown
    return False


def missing_required_documents(
    levels: Mapping[str, RequirementLevel],
    statuses: Mapping[str, RequirementStatus],
) -> list[str]:
    """List required documents that are still outstanding.

    Args:
        levels: Derived requirement levels
        statuses: Current requirement status per document code

    Returns:
        Required codes with no requirement or one that is missing, rejected
        or expired, in level-map order
    """
    missing: list[str] = []
    for code, level in levels.items():
        if level != REQUIRED:
            continue
        status = statuses.get(code)
        if status is None or status in OUTSTANDING_STATUSES:
            missing.append(code)
    return missing
