"""Document catalog - the static set of document types the engine knows."""

from collections.abc import Iterable, Mapping

from backend.compliance.errors import UnknownDocumentType
from backend.compliance.models.catalog import DocumentType, EndOfYear, FixedDays, NoExpiry

TRADE_REGISTRATION = "trade_registration"
LIABILITY_INSURANCE = "liability_insurance"
COMMERCIAL_REGISTER_EXTRACT = "commercial_register_extract"
BG_MEMBERSHIP = "bg_membership"
HEALTH_FUND_CLEARANCE = "health_fund_clearance"
SAFETY_INSTRUCTION = "safety_instruction"
TAX_EXEMPTION_CERTIFICATE = "tax_exemption_certificate"
SOKA_BAU = "soka_bau"
A1_CERTIFICATE = "a1_certificate"
DATA_PROCESSING_AGREEMENT = "data_processing_agreement"
CRAFT_REGISTER = "craft_register"
TAX_CLEARANCE = "tax_clearance"


DOCUMENT_TYPES: tuple[DocumentType, ...] = (
    DocumentType(code=TRADE_REGISTRATION, label="Gewerbeanmeldung", validity=NoExpiry()),
    DocumentType(
        code=LIABILITY_INSURANCE, label="Betriebshaftpflicht", validity=FixedDays(days=365)
    ),
    DocumentType(
        code=COMMERCIAL_REGISTER_EXTRACT, label="Handelsregisterauszug", validity=NoExpiry()
    ),
    DocumentType(
        code=BG_MEMBERSHIP,
        label="Berufsgenossenschaft - Mitgliedschaft",
        validity=NoExpiry(),
    ),
    DocumentType(
        code=HEALTH_FUND_CLEARANCE,
        label="Unbedenklichkeitsbescheinigung - Krankenkasse",
        validity=FixedDays(days=365),
    ),
    DocumentType(
        code=SAFETY_INSTRUCTION, label="Sicherheitsunterweisung", validity=FixedDays(days=365)
    ),
    DocumentType(
        code=TAX_EXEMPTION_CERTIFICATE,
        label="Freistellungsbescheinigung (§48b EStG)",
        validity=EndOfYear(),
    ),
    DocumentType(code=SOKA_BAU, label="SOKA-BAU Teilnahmebescheinigung", validity=EndOfYear()),
    DocumentType(
        code=A1_CERTIFICATE, label="A1-Bescheinigung (bei Entsendung)", validity=FixedDays(days=180)
    ),
    DocumentType(
        code=DATA_PROCESSING_AGREEMENT,
        label="Auftragsverarbeitungsvertrag (AVV)",
        validity=NoExpiry(),
    ),
    DocumentType(code=CRAFT_REGISTER, label="Handwerksrolle", validity=NoExpiry()),
    DocumentType(
        code=TAX_CLEARANCE,
        label="Unbedenklichkeitsbescheinigung - Finanzamt",
        validity=FixedDays(days=180),
    ),
)


class DocumentCatalog:
    """Read-only lookup over document types, keyed by code."""

    def __init__(self, document_types: Iterable[DocumentType]) -> None:
        self._types: Mapping[str, DocumentType] = {dt.code: dt for dt in document_types}

    def get(self, code: str) -> DocumentType:
        """Look up a document type.

        Raises:
            UnknownDocumentType: If the code is not in the catalog
        """
        try:
            return self._types[code]
        except KeyError:
            raise UnknownDocumentType(code) from None

    def __contains__(self, code: object) -> bool:
        return code in self._types

    def codes(self) -> list[str]:
        """All known document codes in catalog order."""
        return list(self._types)

    def all(self) -> list[DocumentType]:
        return list(self._types.values())


DEFAULT_CATALOG = DocumentCatalog(DOCUMENT_TYPES)


def get_document_type(code: str) -> DocumentType:
    """Look up a document type in the default catalog."""
    return DEFAULT_CATALOG.get(code)
