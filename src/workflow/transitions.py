# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application status transition table and transition authority.

Everything here is pure and read-only, so it is safe to call from any number
of concurrent requests.

ELIGIBLE -> ON_HOLD -> ELIGIBLE is the only cycle in the table: it lets an
administrator park an application and release it again. Every other path
moves forward until one of the terminal statuses is reached.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from src.models.enums import ActorType, ApplicationStatus
from src.rbac.permissions import (
    APPLICATIONS_APPROVE,
    APPLICATIONS_REJECT,
    APPLICATIONS_REVIEW,
    APPLICATIONS_VERIFY,
)

S = ApplicationStatus

STATUS_TRANSITIONS: Mapping[ApplicationStatus, frozenset[ApplicationStatus]] = MappingProxyType(
    {
        S.DRAFT: frozenset({S.SUBMITTED, S.WITHDRAWN}),
        S.SUBMITTED: frozenset({S.ELIGIBLE, S.NOT_ELIGIBLE, S.WITHDRAWN}),
        S.ELIGIBLE: frozenset(
            {S.ON_HOLD, S.PROVISIONAL_SELECTED, S.SELECTED_IN_OTHER_POST, S.REJECTED}
        ),
        S.NOT_ELIGIBLE: frozenset({S.REJECTED}),
        S.ON_HOLD: frozenset(
            {S.ELIGIBLE, S.PROVISIONAL_SELECTED, S.SELECTED_IN_OTHER_POST, S.REJECTED}
        ),
        S.PROVISIONAL_SELECTED: frozenset({S.SELECTED, S.SELECTED_IN_OTHER_POST, S.REJECTED}),
        S.SELECTED: frozenset(),
        S.SELECTED_IN_OTHER_POST: frozenset(),
        S.REJECTED: frozenset(),
        S.WITHDRAWN: frozenset(),
    }
)

# The owning applicant may no longer edit the application in these statuses
LOCKED_STATUSES: frozenset[ApplicationStatus] = frozenset(set(ApplicationStatus) - {S.DRAFT})

INITIAL_STATUS = S.DRAFT


@dataclass(frozen=True)
class TransitionAuthority:
    """Who may move an application into a status.

    ``owner_only`` restricts applicants to their own applications.
    ``permission`` is required from admins; None means admins may not take
    the edge at all.
    """

    actor_types: frozenset[ActorType]
    permission: str | None = None
    owner_only: bool = True


_APPLICANT_OR_SYSTEM = TransitionAuthority(
    actor_types=frozenset({ActorType.APPLICANT, ActorType.SYSTEM})
)


def _admin_or_system(permission: str) -> TransitionAuthority:
    return TransitionAuthority(
        actor_types=frozenset({ActorType.ADMIN, ActorType.SYSTEM}),
        permission=permission,
    )


TRANSITION_AUTHORITY: Mapping[ApplicationStatus, TransitionAuthority] = MappingProxyType(
    {
        S.SUBMITTED: _APPLICANT_OR_SYSTEM,
        S.WITHDRAWN: _APPLICANT_OR_SYSTEM,
        S.ELIGIBLE: _admin_or_system(APPLICATIONS_VERIFY),
        S.NOT_ELIGIBLE: _admin_or_system(APPLICATIONS_VERIFY),
        S.ON_HOLD: _admin_or_system(APPLICATIONS_REVIEW),
        S.PROVISIONAL_SELECTED: _admin_or_system(APPLICATIONS_APPROVE),
        S.SELECTED: _admin_or_system(APPLICATIONS_APPROVE),
        S.SELECTED_IN_OTHER_POST: _admin_or_system(APPLICATIONS_APPROVE),
        S.REJECTED: _admin_or_system(APPLICATIONS_REJECT),
    }
)

# Edges whose authority differs from the default for their target status
EDGE_AUTHORITY: Mapping[tuple[ApplicationStatus, ApplicationStatus], TransitionAuthority] = (
    MappingProxyType({(S.ON_HOLD, S.ELIGIBLE): _admin_or_system(APPLICATIONS_REVIEW)})
)


class TransitionTableError(Exception):
    """The transition table is structurally incomplete."""


def validate_transition_table(
    table: Mapping[ApplicationStatus, frozenset[ApplicationStatus]],
    authority: Mapping[ApplicationStatus, TransitionAuthority],
) -> None:
    """Check that every status has an entry and every edge has an authority."""
    missing = set(ApplicationStatus) - set(table)
    if missing:
        names = ", ".join(sorted(s.value for s in missing))
        raise TransitionTableError(f"Statuses missing from transition table: {names}")
    for source, targets in table.items():
        if not isinstance(targets, frozenset):
            raise TransitionTableError(f"Transitions for {source.value} must be a frozenset")
        unknown = [t for t in targets if t not in authority]
        if unknown:
            raise TransitionTableError(
                f"No transition authority defined for {', '.join(t.value for t in unknown)}"
            )


validate_transition_table(STATUS_TRANSITIONS, TRANSITION_AUTHORITY)


def is_valid_transition(from_status: ApplicationStatus, to_status: ApplicationStatus) -> bool:
    return to_status in STATUS_TRANSITIONS.get(from_status, frozenset())


def is_terminal_status(status: ApplicationStatus) -> bool:
    return not STATUS_TRANSITIONS[status]


def is_locked_status(status: ApplicationStatus) -> bool:
    return status in LOCKED_STATUSES


def allowed_transitions(status: ApplicationStatus) -> list[ApplicationStatus]:
    """Targets reachable from ``status``, in declaration order of the enum."""
    targets = STATUS_TRANSITIONS[status]
    return [s for s in ApplicationStatus if s in targets]


def authority_for(
    from_status: ApplicationStatus, to_status: ApplicationStatus
) -> TransitionAuthority:
    return EDGE_AUTHORITY.get((from_status, to_status)) or TRANSITION_AUTHORITY[to_status]
