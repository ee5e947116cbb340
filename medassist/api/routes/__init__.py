"""
API Routes module - Endpoint definitions.

- chat.py     : Conversational endpoint
- identify.py : Pill scanner
- speech.py   : Speech-to-text
- agents.py   : Registered agents
- session.py  : Session management
- health.py   : Health checks
"""
from medassist.api.routes.agents import router as agents_router
from medassist.api.routes.chat import router as chat_router
from medassist.api.routes.health import router as health_router
from medassist.api.routes.identify import router as identify_router
from medassist.api.routes.session import router as session_router
from medassist.api.routes.speech import router as speech_router

__all__ = [
    "agents_router",
    "chat_router",
    "health_router",
    "identify_router",
    "session_router",
    "speech_router",
]
