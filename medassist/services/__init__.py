"""
Services module - Business logic behind the HTTP routes.

- chat_service.py      : Chat flow (memory + agent orchestrator)
- pill_service.py      : Standalone pill scanner
- speech_service.py    : Voice input transcription
- ocr_service.py       : Handwritten document OCR
- drug_info_service.py : OpenFDA label lookup

Import from the submodules directly; the agents package depends on the
OCR and OpenFDA services, and the chat service depends on the agents.
"""
