from app.config import settings
from app.services.auth_service import AuthService
from app.services.email_services import Notifier
from app.services.google_auth_service import GoogleOAuthClient
from app.services.password_service import password_hasher
from app.services.secret_service import SecretManager
from app.services.token_service import TokenIssuer
from app.services.user_service import UserService

token_issuer = TokenIssuer(settings)
secret_manager = SecretManager(settings, password_hasher)
notifier = Notifier(settings)

auth_service = AuthService(settings, password_hasher, token_issuer, secret_manager, notifier)
user_service = UserService(password_hasher)
google_client = GoogleOAuthClient(settings, token_issuer)


def get_auth_service() -> AuthService:
    return auth_service


def get_user_service() -> UserService:
    return user_service


def get_token_issuer() -> TokenIssuer:
    return token_issuer


def get_google_client() -> GoogleOAuthClient:
    return google_client
