"""
Runtime package for the Arena Copilot orchestrator.

This package contains:
- API layer (FastAPI server + routes)
- Agents (the CopilotOrchestrator facade)
- Sessions (chat sessions + turn streams)
- Stores (session registry, event log)
- Models (Pydantic records for sessions, results and requests)
"""
