"""FastAPI application proxying AI text helpers and the GitHub login."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Header, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .config import load_config
from .gemini import DEFAULT_CATEGORY, GeminiClient, GeminiError, MissingApiKeyError
from .gemini import create_from_config as create_gemini
from .github import GitHubOAuth, NoAccessTokenError, OAuthConfigError, OAuthError
from .github import create_from_config as create_github
from .sessions import SessionStore

logger = logging.getLogger(__name__)


# -----------------------------
# Pydantic request/response
# -----------------------------
class BodyRequest(BaseModel):
    body: Optional[str] = Field(default=None, description="Memo body text.")


class TextRequest(BaseModel):
    text: Optional[str] = Field(default=None, description="Text to classify.")


class CodeRequest(BaseModel):
    code: Optional[str] = Field(default=None, description="One-time GitHub OAuth code.")


class TitleResponse(BaseModel):
    title: str


class SummaryResponse(BaseModel):
    summary: str


class CategoryResponse(BaseModel):
    category: str


class AuthUrlResponse(BaseModel):
    authUrl: str


class User(BaseModel):
    id: Optional[int] = None
    login: Optional[str] = None
    avatar_url: Optional[str] = None
    name: Optional[str] = None


class LoginResponse(BaseModel):
    sessionId: str
    sessionToken: str
    user: User


class UserResponse(BaseModel):
    user: User


class MessageResponse(BaseModel):
    message: str


# -----------------------------
# Utilities
# -----------------------------
def _require_text(value: Optional[str], what: str) -> str:
    if not value or not value.strip():
        raise HTTPException(status_code=400, detail=f"{what} is required.")
    return value


PREFLIGHT_METHODS = "GET,OPTIONS,PATCH,DELETE,POST,PUT"
PREFLIGHT_HEADERS = "Accept,Content-Type,X-Requested-With,X-Session-Id"


def _preflight_headers(request: Request, origins: List[str]) -> Dict[str, str]:
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": PREFLIGHT_METHODS,
        "Access-Control-Allow-Headers": request.headers.get("access-control-request-headers") or PREFLIGHT_HEADERS,
        "Vary": "Origin",
    }
    origin = request.headers.get("origin")
    if origin and ("*" in origins or origin in origins):
        headers["Access-Control-Allow-Origin"] = origin
    elif "*" in origins:
        headers["Access-Control-Allow-Origin"] = "*"
    return headers


def _generate(label: str, call) -> str:
    try:
        return call()
    except MissingApiKeyError as e:
        logger.error("%s: %s", label, e)
        raise HTTPException(status_code=500, detail="The API key is not configured.")
    except GeminiError as e:
        logger.exception("%s failed: %s", label, e)
        raise HTTPException(status_code=500, detail=f"{label} failed.")


# -----------------------------
# App factory
# -----------------------------
def create_app(
    config_path: Optional[str] = None,
    gemini: Optional[GeminiClient] = None,
    github: Optional[GitHubOAuth] = None,
    sessions: Optional[SessionStore] = None,
) -> FastAPI:
    cfg = load_config(config_path)

    # CORS
    cors_origins = list(cfg.get("server", {}).get("cors_origins") or ["*"])

    # Services
    gemini = gemini or create_gemini(cfg)
    github = github or create_github(cfg)
    sessions = sessions if sessions is not None else SessionStore()

    app = FastAPI(title="Memo Proxy Server", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.sessions = sessions

    @app.middleware("http")
    async def preflight(request: Request, call_next):
        # Outermost middleware: /api/ pre-flights get an empty 200 before CORSMiddleware sees them.
        if request.method == "OPTIONS" and request.url.path.startswith("/api/"):
            return Response(status_code=200, headers=_preflight_headers(request, cors_origins))
        return await call_next(request)

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {
            "ok": True,
            "gemini_configured": bool(getattr(gemini, "configured", True)),
            "github_configured": bool(getattr(github, "configured", True)),
        }

    # -------------------------
    # GitHub login
    # -------------------------
    @app.get("/api/auth/github", response_model=AuthUrlResponse)
    def github_authorize(redirect: Optional[str] = Query(default=None)):
        return AuthUrlResponse(authUrl=github.authorize_url(redirect))

    @app.post("/api/auth/github/callback", response_model=LoginResponse)
    def github_callback(req: Optional[CodeRequest] = None):
        if req is None or not req.code:
            raise HTTPException(status_code=400, detail="Missing required parameters.")
        try:
            access_token = github.exchange_code(req.code)
            user = github.fetch_user(access_token)
        except OAuthConfigError as e:
            logger.error("GitHub login unavailable: %s", e)
            raise HTTPException(status_code=400, detail="Missing required parameters.")
        except NoAccessTokenError:
            raise HTTPException(status_code=400, detail="Authentication failed.")
        except OAuthError as e:
            logger.exception("GitHub callback failed: %s", e)
            raise HTTPException(status_code=500, detail="GitHub authentication failed.")

        token = sessions.create(access_token, user)
        logger.info("GitHub login for %s", user.get("login"))
        return LoginResponse(sessionId=token, sessionToken=token, user=User(**user))

    @app.get("/api/auth/user", response_model=UserResponse)
    def current_user(x_session_id: Optional[str] = Header(default=None)):
        session = sessions.get(x_session_id)
        if session is None:
            raise HTTPException(status_code=401, detail="Not authenticated.")
        return UserResponse(user=User(**session.user))

    @app.post("/api/auth/logout", response_model=MessageResponse)
    def logout(x_session_id: Optional[str] = Header(default=None)):
        sessions.delete(x_session_id)
        return MessageResponse(message="Logged out.")

    # -------------------------
    # AI text helpers
    # -------------------------
    @app.post("/api/generateTitle", response_model=TitleResponse)
    def generate_title(req: Optional[BodyRequest] = None):
        body = _require_text(req.body if req else None, "Body")
        return TitleResponse(title=_generate("Title generation", lambda: gemini.generate_title(body)))

    @app.post("/api/summarize", response_model=SummaryResponse)
    def summarize(req: Optional[BodyRequest] = None):
        body = _require_text(req.body if req else None, "Body")
        return SummaryResponse(summary=_generate("Summary", lambda: gemini.summarize(body)))

    @app.post("/api/classifyCategory", response_model=CategoryResponse)
    def classify_category(req: Optional[TextRequest] = None):
        text = _require_text(req.text if req else None, "Text")
        category = _generate("Category classification", lambda: gemini.classify_category(text))
        return CategoryResponse(category=category or DEFAULT_CATEGORY)

    return app
