import re

from app.models.user import Role, User
from app.services import registry
from app.services.auth_middleware import authenticate, authorize
from app.services.secret_service import generate_verification_code, hash_reset_token
from app.utils.errors import Forbidden, Unauthorized


def test_authenticate_returns_tagged_results(db, create_user):
    user = create_user()
    issuer = registry.token_issuer

    missing = authenticate(None, db, issuer)
    bogus = authenticate("not-a-token", db, issuer)
    good = authenticate(issuer.issue(user.id), db, issuer)

    assert not missing.ok and isinstance(missing.error, Unauthorized)
    assert not bogus.ok and isinstance(bogus.error, Unauthorized)
    assert good.ok and good.user.id == user.id


def test_authorize_checks_role_equality(db, create_user):
    user = create_user(email="user@x.com")
    admin = create_user(email="admin@x.com", role="admin")

    denied = authorize(user, Role.admin)

    assert isinstance(denied.error, Forbidden)
    assert denied.error.status_code == 403
    assert authorize(admin, Role.admin).ok
    assert authorize(user, Role.user).ok


def test_verification_codes_are_six_digits():
    codes = [generate_verification_code() for _ in range(200)]

    assert all(re.fullmatch(r"\d{6}", code) for code in codes)
    assert len(set(codes)) > 1


def test_verification_code_is_consumed_once(db, create_user):
    user = create_user()
    secrets = registry.secret_manager
    code = secrets.issue_verification_code(db, user)

    assert secrets.consume_verification_code(db, user.id + 1, code) is False
    assert secrets.consume_verification_code(db, user.id, code) is True
    assert secrets.consume_verification_code(db, user.id, code) is False


def test_reset_token_for_unknown_email_is_a_decoy(db):
    assert registry.secret_manager.issue_reset_token(db, "ghost@x.com") is None
    assert db.query(User).filter(User.password_reset_token.isnot(None)).count() == 0


def test_reset_token_is_stored_hashed_and_single_use(db, create_user):
    user = create_user(email="user@x.com")
    secrets = registry.secret_manager

    raw_token = secrets.issue_reset_token(db, "USER@x.com")
    db.refresh(user)

    assert len(raw_token) == 64
    assert user.password_reset_token == hash_reset_token(raw_token)
    assert secrets.consume_reset_token(db, raw_token, "N3w-Secret") is True
    assert secrets.consume_reset_token(db, raw_token, "An0ther-Secret") is False

    db.refresh(user)
    assert user.check_password("N3w-Secret", registry.password_hasher) is True


def test_reset_token_stops_working_after_account_linking(db, create_user):
    user = create_user(email="user@x.com")
    secrets = registry.secret_manager
    raw_token = secrets.issue_reset_token(db, "user@x.com")

    db.refresh(user)
    user.link_oauth("google-9")
    db.commit()

    assert secrets.consume_reset_token(db, raw_token, "N3w-Secret") is False
