from app.models.user import User
from app.services.password_service import password_hasher
from seed import seed_admin


def test_seed_creates_admin_account(db):
    admin = seed_admin(db, "Root@X.com", "Adm1n-pass")

    assert admin.email == "root@x.com"
    assert admin.role == "admin"
    assert admin.auth_method == "local"
    assert admin.check_password("Adm1n-pass", password_hasher)


def test_seed_promotes_existing_account(db, create_user):
    user = create_user(email="root@x.com")

    seed_admin(db, "root@x.com", "Adm1n-pass")

    db.refresh(user)
    assert user.role == "admin"
    assert db.query(User).count() == 1


def test_seed_is_skipped_without_credentials(db):
    assert seed_admin(db, None, None) is None
    assert db.query(User).count() == 0
