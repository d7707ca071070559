import pytest

from medbook.core.exceptions import NotFound
from medbook.core.security import UserRole
from medbook.services.identity import IdentityResolver
from tests.conftest import provision

@pytest.fixture
def resolver(store):
    return IdentityResolver(store)

class TestIdentityResolver:

    def test_resolves_each_class_by_email(self, store, resolver):
        provision(store, UserRole.PATIENT, "p@example.com")
        provision(store, UserRole.DOCTOR, "d@example.com")
        provision(store, UserRole.ADMIN, "a@example.com")

        assert resolver.resolve_by_email("p@example.com").role == UserRole.PATIENT
        assert resolver.resolve_by_email("d@example.com").role == UserRole.DOCTOR
        assert resolver.resolve_by_email("a@example.com").role == UserRole.ADMIN

    def test_doctor_wins_email_collision(self, store, resolver):
        provision(store, UserRole.PATIENT, "shared@example.com")
        doctor = provision(store, UserRole.DOCTOR, "shared@example.com")

        resolved = resolver.resolve_by_email("shared@example.com")
        assert resolved.role == UserRole.DOCTOR
        assert resolved.principal.id == doctor.id

    def test_patient_wins_over_admin(self, store, resolver):
        patient = provision(store, UserRole.PATIENT, "shared@example.com")
        provision(store, UserRole.ADMIN, "shared@example.com")

        resolved = resolver.resolve_by_email("shared@example.com")
        assert resolved.role == UserRole.PATIENT
        assert resolved.principal.id == patient.id

    def test_unknown_email(self, resolver, test_db):
        with pytest.raises(NotFound):
            resolver.resolve_by_email("nobody@example.com")

    def test_resolve_by_id_uses_claimed_role_only(self, store, resolver):
        patient = provision(store, UserRole.PATIENT, "p@example.com")

        assert resolver.resolve_by_id(patient.id, UserRole.PATIENT).principal.id == patient.id
        with pytest.raises(NotFound):
            resolver.resolve_by_id(patient.id, UserRole.DOCTOR)

    def test_resolve_any_by_id(self, store, resolver):
        admin = provision(store, UserRole.ADMIN, "a@example.com")
        doctor = provision(store, UserRole.DOCTOR, "d@example.com")

        assert resolver.resolve_any_by_id(admin.id).role == UserRole.ADMIN
        assert resolver.resolve_any_by_id(doctor.id).role == UserRole.DOCTOR
        with pytest.raises(NotFound):
            resolver.resolve_any_by_id("missing")

    def test_update_fields_keeps_identity(self, store):
        patient = provision(store, UserRole.PATIENT, "p@example.com")

        updated = store.patients.update_fields(
            patient.id, password_hash="new-hash", email="other@example.com"
        )
        assert updated.password_hash == "new-hash"
        assert updated.email == "p@example.com"
        assert store.patients.update_fields("missing", name="x") is None
