"""Business facts - the inputs to requirement derivation."""

from pydantic import BaseModel, ConfigDict

from backend.compliance.models.common import Answer


class BusinessFacts(BaseModel):
    """Questionnaire answers about a subcontractor.

    soka_bau_subject is only meaningful when does_construction_work is yes.
    """

    model_config = ConfigDict(frozen=True)

    has_employees: Answer = Answer.unknown
    does_construction_work: Answer = Answer.unknown
    soka_bau_subject: Answer = Answer.unknown
    sends_abroad: Answer = Answer.unknown
    processes_personal_data: Answer = Answer.unknown


class OrgFlags(BaseModel):
    """Organizational flags about a subcontractor."""

    model_config = ConfigDict(frozen=True)

    hr_registered: bool = False


class ConditionalFlags(BaseModel):
    """Boolean flags evaluated by compliance packages."""

    model_config = ConfigDict(frozen=True)

    has_employees: bool = False
    provides_construction_services: bool = False
    is_soka_pflicht: bool = False
    provides_abroad: bool = False
    processes_personal_data: bool = False
