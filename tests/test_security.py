from datetime import datetime, timedelta, timezone
import pytest
from jose import jwt

from medbook.core.exceptions import Forbidden, InvalidToken
from medbook.core.security import PasswordHasher, TokenIssuer, UserRole, pwd_hasher
from tests.conftest import fast_hasher

SECRET = "test-secret"

@pytest.fixture
def issuer():
    return TokenIssuer(secret_key=SECRET, algorithm="HS256", expires_delta=timedelta(days=15))

class TestPasswordHasher:

    def test_production_work_factor(self):
        assert pwd_hasher.rounds == 10
        digest = pwd_hasher.hash("pw123")
        assert digest.startswith("$2b$10$")

    def test_hash_is_salted(self):
        first = fast_hasher.hash("pw123")
        second = fast_hasher.hash("pw123")
        assert first != second
        assert first != "pw123"
        assert fast_hasher.verify("pw123", first)
        assert fast_hasher.verify("pw123", second)

    def test_wrong_password_does_not_verify(self):
        digest = fast_hasher.hash("pw123")
        assert not fast_hasher.verify("pw124", digest)

    @pytest.mark.parametrize("digest", ["", None, "not-a-hash", "$2b$10$short"])
    def test_malformed_digest_is_false(self, digest):
        assert fast_hasher.verify("pw123", digest) is False

    def test_rounds_are_configurable(self):
        assert PasswordHasher(rounds=5).hash("x").startswith("$2b$05$")

class TestTokenIssuer:

    @pytest.mark.parametrize("role", list(UserRole))
    def test_round_trip(self, issuer, role):
        token = issuer.issue("abc123", role)
        payload = issuer.verify(token)
        assert (payload.id, payload.role) == ("abc123", role)

    def test_fifteen_day_expiry(self, issuer):
        issued_at = datetime.now(timezone.utc)
        payload = issuer.verify(issuer.issue("abc123", UserRole.PATIENT, now=issued_at))
        expected = int((issued_at + timedelta(days=15)).timestamp())
        assert abs(payload.exp - expected) <= 1

    def test_expired_token_is_invalid(self, issuer):
        issued_at = datetime.now(timezone.utc) - timedelta(days=16)
        token = issuer.issue("abc123", UserRole.PATIENT, now=issued_at)
        with pytest.raises(InvalidToken):
            issuer.verify(token)

    def test_other_secret_is_invalid(self, issuer):
        forged = TokenIssuer(secret_key="other-secret").issue("abc123", UserRole.ADMIN)
        with pytest.raises(InvalidToken):
            issuer.verify(forged)

    def test_malformed_token_is_invalid(self, issuer):
        with pytest.raises(InvalidToken):
            issuer.verify("not.a.token")

    def test_unknown_role_claim_is_invalid(self, issuer):
        token = jwt.encode(
            {"id": "abc123", "role": "superuser", "exp": datetime.now(timezone.utc) + timedelta(days=1)},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(InvalidToken):
            issuer.verify(token)

    def test_authorize_allows_listed_role(self, issuer):
        token = issuer.issue("abc123", UserRole.DOCTOR)
        payload = issuer.authorize(token, [UserRole.DOCTOR, UserRole.ADMIN])
        assert payload.role == UserRole.DOCTOR

    def test_authorize_rejects_other_role(self, issuer):
        token = issuer.issue("abc123", UserRole.PATIENT)
        with pytest.raises(Forbidden):
            issuer.authorize(token, [UserRole.DOCTOR])

    def test_authorize_checks_token_before_role(self, issuer):
        with pytest.raises(InvalidToken):
            issuer.authorize("garbage", [UserRole.PATIENT])
