"""
Pytest configuration for cms_server. Environment is set before cms_server modules import config.
In-memory SQLite so tests don't touch the filesystem; tables are recreated for every test.
"""
import os

import pytest

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["APP_ENV"] = "development"
os.environ["ADMIN_EMAIL"] = "admin@example.com"
os.environ["SESSION_SECRET"] = "test-session-secret-0123456789abcdef-0123456789"
os.environ["ZITADEL_AUTHORIZATION_URL"] = "https://idp.example.test/oauth/v2/authorize"
os.environ["ZITADEL_TOKEN_URL"] = "https://idp.example.test/oauth/v2/token"
os.environ["ZITADEL_USERINFO_URL"] = "https://idp.example.test/oidc/v1/userinfo"
os.environ["ZITADEL_CLIENT_ID"] = "test-client-id"
os.environ["ZITADEL_CLIENT_SECRET"] = "test-client-secret"
os.environ["ZITADEL_REDIRECT_URI"] = "http://localhost:3001/api/auth/zitadel/callback"
os.environ["ZITADEL_POST_LOGIN_REDIRECT_URL"] = "http://localhost:5173/protected"
for _var in ("ROLES_SEQUENCE_AS_VALUES", "CMS_SEED_ADMIN_EMAIL", "CMS_SEED_ADMIN_PASSWORD", "ZITADEL_SCOPE", "ZITADEL_ROLES_CLAIM"):
    os.environ.pop(_var, None)


@pytest.fixture(autouse=True)
def fresh_db():
    from cms_server.database import engine
    from cms_server.models import Base

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def store():
    from cms_server.database import SessionLocal
    from cms_server.user_store import SqlUserStore

    return SqlUserStore(SessionLocal)
