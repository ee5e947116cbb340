"""
MedAssist - multi-agent medical information assistant.

Package layout:
- api/       : FastAPI app and routes
- agents/    : Specialist agents and the orchestrator
- core/      : Configuration, logging, errors and cross-cutting utilities
- services/  : Chat, pill scanner, speech, OCR and OpenFDA services
- llm/       : Model clients, prompts and reply parsing
- memory/    : Chat transcripts (in-memory or database-backed)
- database/  : SQLAlchemy models and connection
- models/    : Pydantic request/response schemas
"""
__version__ = "0.1.0"
