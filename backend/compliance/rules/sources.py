"""Requirement sources - one interface over questionnaire and package evaluation."""

from typing import Protocol

from backend.compliance.models.common import RequirementLevelMap
from backend.compliance.models.facts import BusinessFacts, ConditionalFlags, OrgFlags
from backend.compliance.rules.engine import derive_requirements, is_document_uncertain
from backend.compliance.rules.packages import resolve_package


class RequirementSource(Protocol):
    """Anything that can produce a requirement-level map."""

    name: str

    def levels(self) -> RequirementLevelMap:
        """Evaluate the source.

        Returns:
            Map of document code to level (absent codes are hidden)
        """
        ...

    def is_uncertain(self, code: str) -> bool:
        """Whether a document's optional level stems from an unknown answer."""
        ...


class QuestionnaireSource:
    """Requirement source backed by the full tri-state questionnaire."""

    name = "questionnaire"

    def __init__(self, facts: BusinessFacts, org_flags: OrgFlags | None = None) -> None:
        self._facts = facts
        self._org_flags = org_flags or OrgFlags()

    def levels(self) -> RequirementLevelMap:
        return derive_requirements(self._facts, self._org_flags)

    def is_uncertain(self, code: str) -> bool:
        return is_document_uncertain(code, self._facts, self.levels())


class PackageSource:
    """Requirement source backed by a predefined compliance package."""

    def __init__(self, package_id: str, flags: ConditionalFlags) -> None:
        self._package_id = package_id
        self._flags = flags
        self.name = f"package:{package_id}"

    def levels(self) -> RequirementLevelMap:
        return resolve_package(self._package_id, self._flags)

    def is_uncertain(self, code: str) -> bool:
        # Packages only know booleans; optional levels are package defaults.
        return False
