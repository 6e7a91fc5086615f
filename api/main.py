from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, Dict, Optional
import logging

from fastapi import BackgroundTasks, Body, Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse

from tubefeed import config, feed
from tubefeed.errors import NoIdentity, Unauthenticated, TubefeedError
from tubefeed.gate import require_verified
from tubefeed.logging_config import setup_logging
from tubefeed.store import Store
from tubefeed.youtube import catalog_factory
from .schemas import ClickRequest, SearchLogRequest, LikeRequest, VideoItem, OkResponse
from . import service

log = logging.getLogger(__name__)

@lru_cache(maxsize=1)
def get_store() -> Store:
    # One store handle per process; schema created on first use.
    store = Store(config.DB_PATH)
    store.init_db()
    return store

def get_catalog_factory():
    return catalog_factory

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_DEBUG)
    get_store()
    yield

# API layer: thin FastAPI routes that resolve the caller, call service, and return clean JSON.
app = FastAPI(title="tubefeed API", lifespan=lifespan)

# Identity dependencies

def current_catalog(authorization: Optional[str] = Header(None), factory=Depends(get_catalog_factory)):
    # Build a catalog client from the caller's bearer token.
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthenticated("missing bearer token")
    return factory(token.strip())

def current_user(catalog=Depends(current_catalog)) -> Optional[str]:
    # Caller's channel id (None when the account has no channel).
    return catalog.my_channel_id()

def verified_user(user_id=Depends(current_user), store: Store = Depends(get_store)) -> str:
    return require_verified(store, user_id)

# Error translation: no internal detail leaves the process

@app.exception_handler(Unauthenticated)
def on_unauthenticated(request: Request, exc: Unauthenticated):
    return JSONResponse(status_code=401, content={"detail": "unauthenticated"})

@app.exception_handler(TubefeedError)
def on_denied(request: Request, exc: TubefeedError):
    log.warning("%s %s denied: %s: %s", request.method, request.url.path, type(exc).__name__, exc)
    return JSONResponse(status_code=403, content={"detail": "forbidden"})

# Routes

@app.get("/healthz")
def healthz():
    # Liveness/readiness check.
    return {"ok": True}

@app.post("/verify", response_model=OkResponse)
def verify(user_id=Depends(current_user), store: Store = Depends(get_store)):
    # Mark an allow-listed caller as verified.
    return service.verify_user(store, user_id)

@app.get("/settings")
def get_settings(user_id=Depends(verified_user), store: Store = Depends(get_store)):
    return service.get_settings(store, user_id)

@app.post("/settings")
def post_settings(body: Dict[str, Any] = Body(...), user_id=Depends(current_user), store: Store = Depends(get_store)):
    # Settings may be written before verification; the profile is created here.
    if not user_id:
        raise NoIdentity("no channel for this account")
    return service.save_settings(store, user_id, body)

@app.post("/firstpass", response_model=OkResponse)
def firstpass(user_id=Depends(verified_user), catalog=Depends(current_catalog), store: Store = Depends(get_store)):
    # Seed the ledger from subscriptions on first use.
    return service.first_pass(store, catalog, user_id)

@app.get("/videos", response_model=list[VideoItem])
def videos(user_id=Depends(verified_user), store: Store = Depends(get_store)):
    # Ranked, filtered feed for the caller.
    return service.videos(store, user_id)

@app.post("/clicked", response_model=OkResponse)
def clicked(req: ClickRequest, background: BackgroundTasks, user_id=Depends(verified_user),
            catalog=Depends(current_catalog), store: Store = Depends(get_store)):
    # Acknowledge now; re-rank and expansion run after the response is sent.
    uid, vid, served, window = service.click_args(user_id, req.video_id, req.search_window)
    background.add_task(feed.handle_click, store, catalog, uid, vid, served, window)
    return {"ok": True}

@app.post("/search/log", response_model=OkResponse)
def search_log(req: SearchLogRequest, user_id=Depends(verified_user),
               catalog=Depends(current_catalog), store: Store = Depends(get_store)):
    # Seed videos reached through explicit search.
    return service.log_search(store, catalog, user_id, req.video_ids)

@app.post("/like", response_model=OkResponse)
def like(req: LikeRequest, user_id=Depends(verified_user), store: Store = Depends(get_store)):
    return service.like(store, user_id, req.video_id, req.value)

@app.post("/reset", response_model=OkResponse)
def reset(user_id=Depends(verified_user), store: Store = Depends(get_store)):
    # Drop engagement history (settings and verification are kept).
    return service.reset(store, user_id)
