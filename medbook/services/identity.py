from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple, Union

from ..core.exceptions import NotFound
from ..core.security import UserRole
from ..models import Admin, Doctor, Patient
from .credential_store import CredentialStore

Principal = Union[Patient, Doctor, Admin]

class ResolvedPrincipal(NamedTuple):
    principal: Principal
    role: UserRole

Lookup = Callable[[str], Optional[Principal]]

# Login precedence: when an email exists in several classes the first wins
EMAIL_PRECEDENCE = (UserRole.DOCTOR, UserRole.PATIENT, UserRole.ADMIN)
ID_PRECEDENCE = (UserRole.ADMIN, UserRole.PATIENT, UserRole.DOCTOR)

class IdentityResolver:
    """Finds principals across the patient, doctor and admin collections.

    Ambiguous emails are settled by ``EMAIL_PRECEDENCE``; the role returned is
    always the one of the collection that produced the match, never a role
    stored on or claimed for the record.
    """

    def __init__(self, store: CredentialStore):
        self.store = store

    def _lookups(self, roles: Sequence[UserRole], attr: str) -> List[Tuple[UserRole, Lookup]]:
        return [(role, getattr(self.store.for_role(role), attr)) for role in roles]

    def _first_match(self, key: str, lookups: List[Tuple[UserRole, Lookup]]) -> ResolvedPrincipal:
        for role, lookup in lookups:
            principal = lookup(key)
            if principal is not None:
                return ResolvedPrincipal(principal, role)
        raise NotFound("User not found")

    def resolve_by_email(self, email: str) -> ResolvedPrincipal:
        return self._first_match(email, self._lookups(EMAIL_PRECEDENCE, "find_by_email"))

    def resolve_by_id(self, principal_id: str, claimed_role: UserRole) -> ResolvedPrincipal:
        """Fetch from the collection implied by ``claimed_role`` only."""
        return self._first_match(principal_id, self._lookups([UserRole(claimed_role)], "find_by_id"))

    def resolve_any_by_id(self, principal_id: str) -> ResolvedPrincipal:
        return self._first_match(principal_id, self._lookups(ID_PRECEDENCE, "find_by_id"))
