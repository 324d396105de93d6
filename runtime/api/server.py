"""
FastAPI application entry point for the Arena Copilot runtime.

Responsibilities:
- configure logging from the central settings
- construct shared singletons (transport, SessionRegistry, LogStore, CopilotOrchestrator)
- include the copilot routes under /copilot

Run with:

    uvicorn runtime.api.server:app --reload
"""

import logging

from fastapi import FastAPI

from configs.settings import settings
from core.api.openai_client import OpenAITransport
from runtime.agents.orchestrator import CopilotOrchestrator
from runtime.store.log_store import LogStore
from runtime.store.session_store import SessionRegistry
from . import copilot_routes


logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


# ---------------------------------------------------------------------------
# Shared singletons
# ---------------------------------------------------------------------------

# Provider client is created lazily, so the app can start without a key.
transport = OpenAITransport()

# Named chat sessions ("interview", "mentor"), in memory only.
session_registry = SessionRegistry()

# Date-based JSONL event log under runtime/data/logs.
log_store = LogStore(log_dir=settings.log_dir)

orchestrator = CopilotOrchestrator(
    transport=transport,
    registry=session_registry,
    log_store=log_store,
)

# ---------------------------------------------------------------------------
# FastAPI app + route registration
# ---------------------------------------------------------------------------

app = FastAPI(title="Arena Copilot Runtime")

# Initialize the router module with our shared objects, then include it.
copilot_routes.init_routes(orchestrator=orchestrator)
app.include_router(copilot_routes.router, prefix="/copilot")
