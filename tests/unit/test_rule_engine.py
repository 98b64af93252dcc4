"""Unit tests for requirement derivation from business facts."""

import itertools

import pytest

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
from backend.compliance.models import (
    Answer,
    BusinessFacts,
    OrgFlags,
    RequirementLevel,
    RequirementStatus,
)
from backend.compliance.rules.engine import (
    derive_requirements,
    is_document_uncertain,
    level_of,
    missing_required_documents,
)

REQUIRED = RequirementLevel.required
OPTIONAL = RequirementLevel.optional
HIDDEN = RequirementLevel.hidden

ALL_ANSWERS = list(Answer)


def _all_facts() -> list[BusinessFacts]:
    return [
        BusinessFacts(
            has_employees=e,
            does_construction_work=c,
            soka_bau_subject=s,
            sends_abroad=a,
            processes_personal_data=p,
        )
        for e, c, s, a, p in itertools.product(ALL_ANSWERS, repeat=5)
    ]


def test_derivation_is_deterministic() -> None:
    """Test that identical inputs always yield identical maps."""
    for facts in _all_facts():
        assert derive_requirements(facts) == derive_requirements(facts)


def test_base_documents_always_required() -> None:
    """Test that trade registration and liability insurance do not depend on answers."""
    for facts in _all_facts():
        levels = derive_requirements(facts)
        assert levels[TRADE_REGISTRATION] == REQUIRED
        assert levels[LIABILITY_INSURANCE] == REQUIRED


def test_commercial_register_follows_org_flag() -> None:
    """Test that the register extract is required only for HR-registered companies."""
    facts = BusinessFacts()

    assert level_of(derive_requirements(facts), COMMERCIAL_REGISTER_EXTRACT) == HIDDEN
    assert (
        derive_requirements(facts, OrgFlags(hr_registered=True))[COMMERCIAL_REGISTER_EXTRACT]
        == REQUIRED
    )


@pytest.mark.parametrize(
    "employees,expected",
    [
        (Answer.yes, {BG_MEMBERSHIP: REQUIRED, HEALTH_FUND_CLEARANCE: OPTIONAL}),
        (Answer.no, {BG_MEMBERSHIP: HIDDEN, HEALTH_FUND_CLEARANCE: HIDDEN, SAFETY_INSTRUCTION: HIDDEN}),
        (
            Answer.unknown,
            {BG_MEMBERSHIP: OPTIONAL, HEALTH_FUND_CLEARANCE: OPTIONAL, SAFETY_INSTRUCTION: OPTIONAL},
        ),
    ],
)
def test_employee_rule(employees: Answer, expected: dict[str, RequirementLevel]) -> None:
    """Test employee-dependent documents without construction work answered."""
    levels = derive_requirements(BusinessFacts(has_employees=employees))

    for code, level in expected.items():
        assert level_of(levels, code) == level


def test_construction_with_unknown_employees_escalates_bg_membership() -> None:
    """Test that BG membership becomes required when construction is yes and employees unknown."""
    levels = derive_requirements(
        BusinessFacts(has_employees=Answer.unknown, does_construction_work=Answer.yes)
    )

    assert levels[BG_MEMBERSHIP] == REQUIRED
    assert levels[HEALTH_FUND_CLEARANCE] == OPTIONAL


def test_no_construction_with_employees_demotes_safety_instruction() -> None:
    """Test that safety instruction is optional for non-construction employers."""
    levels = derive_requirements(
        BusinessFacts(has_employees=Answer.yes, does_construction_work=Answer.no)
    )

    assert levels[SAFETY_INSTRUCTION] == OPTIONAL
    assert levels[BG_MEMBERSHIP] == REQUIRED


def test_construction_employer_requires_safety_instruction() -> None:
    """Test that employees plus construction work makes safety instruction required."""
    levels = derive_requirements(
        BusinessFacts(has_employees=Answer.yes, does_construction_work=Answer.yes)
    )

    assert levels[SAFETY_INSTRUCTION] == REQUIRED


@pytest.mark.parametrize(
    "construction,expected",
    [(Answer.yes, REQUIRED), (Answer.no, OPTIONAL), (Answer.unknown, OPTIONAL)],
)
def test_tax_exemption_certificate(construction: Answer, expected: RequirementLevel) -> None:
    """Test tax exemption certificate level per construction answer."""
    levels = derive_requirements(BusinessFacts(does_construction_work=construction))
    assert levels[TAX_EXEMPTION_CERTIFICATE] == expected


def test_fund_document_hidden_without_construction_work() -> None:
    """Test that the fund answer is ignored unless construction work is yes."""
    for facts in _all_facts():
        if facts.does_construction_work != Answer.yes:
            assert level_of(derive_requirements(facts), SOKA_BAU) == HIDDEN


@pytest.mark.parametrize(
    "subject,expected",
    [(Answer.yes, REQUIRED), (Answer.no, HIDDEN), (Answer.unknown, OPTIONAL)],
)
def test_fund_document_evaluated_for_construction(subject: Answer, expected: RequirementLevel) -> None:
    """Test fund document level when construction work is yes."""
    levels = derive_requirements(
        BusinessFacts(does_construction_work=Answer.yes, soka_bau_subject=subject)
    )
    assert level_of(levels, SOKA_BAU) == expected


@pytest.mark.parametrize(
    "code,field",
    [(A1_CERTIFICATE, "sends_abroad"), (DATA_PROCESSING_AGREEMENT, "processes_personal_data")],
)
def test_simple_three_way_rules(code: str, field: str) -> None:
    """Test yes/no/unknown mapping to required/hidden/optional."""
    assert derive_requirements(BusinessFacts(**{field: Answer.yes}))[code] == REQUIRED
    assert level_of(derive_requirements(BusinessFacts(**{field: Answer.no})), code) == HIDDEN
    assert derive_requirements(BusinessFacts(**{field: Answer.unknown}))[code] == OPTIONAL


def test_construction_employer_scenario() -> None:
    """Test the full construction employer scenario."""
    levels = derive_requirements(
        BusinessFacts(
            has_employees=Answer.yes,
            does_construction_work=Answer.yes,
            soka_bau_subject=Answer.no,
            sends_abroad=Answer.no,
            processes_personal_data=Answer.no,
        )
    )

    required = {code for code, level in levels.items() if level == REQUIRED}
    assert required == {
        TRADE_REGISTRATION,
        LIABILITY_INSURANCE,
        TAX_EXEMPTION_CERTIFICATE,
        BG_MEMBERSHIP,
        SAFETY_INSTRUCTION,
    }
    for code in (SOKA_BAU, A1_CERTIFICATE, DATA_PROCESSING_AGREEMENT):
        assert level_of(levels, code) == HIDDEN


def test_uncertainty_only_for_unknown_answers() -> None:
    """Test that optional-by-unknown is flagged and optional-by-answer is not."""
    unknown = BusinessFacts()
    levels = derive_requirements(unknown)
    assert is_document_uncertain(BG_MEMBERSHIP, unknown, levels)
    assert is_document_uncertain(A1_CERTIFICATE, unknown, levels)
    assert not is_document_uncertain(TRADE_REGISTRATION, unknown, levels)
    assert not is_document_uncertain(SOKA_BAU, unknown, levels)

    answered = BusinessFacts(has_employees=Answer.yes, does_construction_work=Answer.no)
    levels = derive_requirements(answered)
    assert levels[HEALTH_FUND_CLEARANCE] == OPTIONAL
    assert not is_document_uncertain(HEALTH_FUND_CLEARANCE, answered, levels)
    assert not is_document_uncertain(SAFETY_INSTRUCTION, answered, levels)
    assert not is_document_uncertain(TAX_EXEMPTION_CERTIFICATE, answered, levels)


def test_missing_required_documents() -> None:
    """Test that missing, rejected, expired and absent required documents are outstanding."""
    levels = {
        TRADE_REGISTRATION: REQUIRED,
        LIABILITY_INSURANCE: REQUIRED,
        BG_MEMBERSHIP: REQUIRED,
        TAX_EXEMPTION_CERTIFICATE: REQUIRED,
        SAFETY_INSTRUCTION: REQUIRED,
        A1_CERTIFICATE: OPTIONAL,
    }
    statuses = {
        TRADE_REGISTRATION: RequirementStatus.valid,
        LIABILITY_INSURANCE: RequirementStatus.rejected,
        BG_MEMBERSHIP: RequirementStatus.expired,
        SAFETY_INSTRUCTION: RequirementStatus.in_review,
        A1_CERTIFICATE: RequirementStatus.missing,
    }

    assert missing_required_documents(levels, statuses) == [
        LIABILITY_INSURANCE,
        BG_MEMBERSHIP,
        TAX_EXEMPTION_CERTIFICATE,
    ]
