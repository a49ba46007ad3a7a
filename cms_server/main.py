"""
CMS backend auth server.
OIDC login via ZITADEL (PKCE) under /api/auth, users collection session endpoints under /api/users.
Port 3001 (the storefront frontend runs on 5173).
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from cms_server.auth_routes import router as auth_router
from cms_server.config import LOG_LEVEL
from cms_server.seed import seed_from_env
from cms_server.user_store import close_user_store, get_user_store
from cms_server.users_routes import router as users_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the user store (creates tables), seed the bootstrap admin; release the store on shutdown."""
    seed_from_env(get_user_store())
    yield
    close_user_store()


app = FastAPI(title="CMS Server", version="0.1.0", lifespan=lifespan)
app.include_router(auth_router, tags=["auth"])
app.include_router(users_router, tags=["users"])


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "cms_server"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "cms_server.main:app",
        host="127.0.0.1",
        port=3001,
        reload=True,
        log_level=LOG_LEVEL,
    )
