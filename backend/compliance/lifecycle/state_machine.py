"""Requirement lifecycle state machine.

The transition table is the single source of truth: allowed actions and
audit trigger texts are both derived from it, so the lookups cannot drift
apart.

The lifecycle is cyclical; documents must be renewed periodically, so there
is no absorbing terminal state.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from backend.compliance.catalog.documents import DEFAULT_CATALOG, DocumentCatalog
from backend.compliance.catalog.validity import compute_valid_to
from backend.compliance.errors import InvalidTransition, MissingRequiredContext
from backend.compliance.models.common import RequirementStatus
from backend.compliance.models.requirement import Requirement, TransitionContext

S = RequirementStatus


class Driver(str, Enum):
    """What causes a transition."""

    event = "event"  # uploads, reviews, admin resets
    time = "time"  # scheduling trigger


@dataclass(frozen=True)
class Transition:
    """One edge of the lifecycle graph."""

    from_status: RequirementStatus
    to_status: RequirementStatus
    trigger: str
    driver: Driver
    actions: tuple[str, ...] = ()


TRANSITIONS: tuple[Transition, ...] = (
    Transition(S.missing, S.submitted, "Public upload completed", Driver.event, ("request_upload", "upload")),
    Transition(S.submitted, S.in_review, "Reviewer opened document", Driver.event, ("review",)),
    Transition(S.submitted, S.missing, "Reset by admin", Driver.event, ("reset",)),
    Transition(S.in_review, S.valid, "Document approved by reviewer", Driver.event, ("approve",)),
    Transition(S.in_review, S.rejected, "Document rejected by reviewer", Driver.event, ("reject",)),
    Transition(S.valid, S.expiring, "Document approaching expiry date", Driver.time),
    Transition(S.valid, S.expired, "Document has expired", Driver.time),
    Transition(S.expiring, S.expired, "Document has expired", Driver.time),
    Transition(S.expiring, S.valid, "Document renewed before expiry", Driver.event, ("request_renewal", "renew")),
    Transition(S.expired, S.missing, "Reset for new upload", Driver.event, ("request_upload",)),
    Transition(S.rejected, S.missing, "Reset for correction", Driver.event, ("request_correction",)),
)

_EDGES: dict[tuple[RequirementStatus, RequirementStatus], Transition] = {
    (t.from_status, t.to_status): t for t in TRANSITIONS
}

# States with a document on file expose it; the others expose their details.
_DOCUMENT_ON_FILE = frozenset({S.submitted, S.in_review, S.valid, S.expiring})

_STATE_DESCRIPTIONS: dict[RequirementStatus, str] = {
    S.missing: "Document is missing and must be uploaded",
    S.submitted: "Document was submitted and awaits review",
    S.in_review: "Document is currently being reviewed",
    S.valid: "Document is valid and approved",
    S.expiring: "Document expires soon and must be renewed",
    S.expired: "Document has expired",
    S.rejected: "Document was rejected and must be corrected",
}


def _derive_allowed_actions() -> dict[RequirementStatus, tuple[str, ...]]:
    """Build the per-state action lookup from the transition table.

    A state permits:
    - the actions labelling its own outgoing event edges
    - the actions of event edges that lead back to it from a state it
      reaches by time alone (e.g. valid may renew ahead of expiring)
    - one read action
    """
    allowed: dict[RequirementStatus, tuple[str, ...]] = {}
    for state in RequirementStatus:
        actions: list[str] = []

        for t in TRANSITIONS:
            if t.from_status == state and t.driver == Driver.event:
                actions.extend(t.actions)

        time_successors = {
            t.to_status for t in TRANSITIONS if t.from_status == state and t.driver == Driver.time
        }
        for t in TRANSITIONS:
            if t.from_status in time_successors and t.to_status == state and t.driver == Driver.event:
                actions.extend(t.actions)

        actions.append("view_document" if state in _DOCUMENT_ON_FILE else "view_details")
        allowed[state] = tuple(dict.fromkeys(actions))
    return allowed


ALLOWED_ACTIONS = _derive_allowed_actions()


def is_valid_transition(from_status: RequirementStatus, to_status: RequirementStatus) -> bool:
    """Check whether (from, to) is in the transition table."""
    return (from_status, to_status) in _EDGES


def get_transition(from_status: RequirementStatus, to_status: RequirementStatus) -> Transition:
    """Look up an edge.

    Raises:
        InvalidTransition: If the pair is not in the table
    """
    try:
        return _EDGES[(from_status, to_status)]
    except KeyError:
        raise InvalidTransition(from_status.value, to_status.value) from None


def next_states(state: RequirementStatus) -> list[RequirementStatus]:
    """States reachable from state in one step."""
    return [t.to_status for t in TRANSITIONS if t.from_status == state]


def transition_trigger(from_status: RequirementStatus, to_status: RequirementStatus) -> str:
    """Human-readable trigger text for the audit trail.

    Raises:
        InvalidTransition: If the pair is not in the table
    """
    return get_transition(from_status, to_status).trigger


def allowed_actions(state: RequirementStatus) -> tuple[str, ...]:
    """User actions permitted in a state."""
    return ALLOWED_ACTIONS[state]


def is_action_allowed(state: RequirementStatus, action: str) -> bool:
    return action in ALLOWED_ACTIONS[state]


def state_description(state: RequirementStatus) -> str:
    return _STATE_DESCRIPTIONS[state]


def validate_transition(
    requirement: Requirement, to_status: RequirementStatus, context: TransitionContext
) -> Transition:
    """Validate a transition without applying it.

    Raises:
        InvalidTransition: If the pair is not in the table
        MissingRequiredContext: If an upload lacks its document, approval
            lacks valid_from or rejection lacks a reason
    """
    transition = get_transition(requirement.status, to_status)

    if to_status == S.submitted and context.document is None:
        raise MissingRequiredContext("document", "document is required for an upload")

    if to_status == S.valid and context.valid_from is None:
        raise MissingRequiredContext("valid_from", "valid_from is required for approval")

    if to_status == S.rejected and not (context.rejection_reason or "").strip():
        raise MissingRequiredContext("rejection_reason", "rejection_reason is required")

    return transition


def transition_requirement(
    requirement: Requirement,
    to_status: RequirementStatus,
    context: TransitionContext,
    now: datetime,
    catalog: DocumentCatalog = DEFAULT_CATALOG,
) -> Requirement:
    """Apply a validated transition and return the updated requirement.

    Pure: the input requirement is never mutated. Every field that depends
    on the status is recomputed together with it, so a transition is never
    half-applied.

    Raises:
        InvalidTransition: If the pair is not in the table
        MissingRequiredContext: If required context is absent
        UnknownDocumentType: If approval references a code outside the catalog
    """
    validate_transition(requirement, to_status, context)

    documents = list(requirement.documents)
    if to_status == S.submitted and context.document is not None:
        documents.append(context.document)

    valid_from = None
    valid_to = None
    if to_status == S.valid:
        document_type = catalog.get(requirement.document_type)
        valid_from = context.valid_from
        valid_to = compute_valid_to(document_type.validity, valid_from)
        window = {"valid_from": valid_from, "valid_to": valid_to}
        if requirement.status == S.in_review:
            if documents:
                documents[-1] = documents[-1].model_copy(update=window)
        elif context.document is not None:
            # Renewal: earlier submissions keep the window they were approved for.
            documents.append(context.document.model_copy(update=window))
    elif to_status == S.expiring:
        valid_from = requirement.valid_from
        valid_to = requirement.valid_to

    rejection_reason = None
    if to_status == S.rejected:
        rejection_reason = (context.rejection_reason or "").strip()

    return requirement.model_copy(
        update={
            "status": to_status,
            "valid_from": valid_from,
            "valid_to": valid_to,
            "rejection_reason": rejection_reason,
            "documents": documents,
            "version": requirement.version + 1,
            "updated_at": now,
        }
    )
