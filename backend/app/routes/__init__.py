# Routes package init
"""
Notewise Backend - API Routes Package
======================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles one resource or group of actions.

Route Inventory:
    - notes.py:      POST   /api/notes                         (create note)
                     PATCH  /api/notes/{id}                    (update text)
                     DELETE /api/notes/{id}                    (delete note)
                     GET    /api/notes                         (list own notes)
                     GET    /api/notes/{id}                    (get own note)
    - assistant.py:  POST   /api/assistant/ask                 (ask about notes)
                     POST   /api/assistant/analyze-pdf         (summarize a PDF)
                     GET    /api/assistant/suggested-questions (question ideas)
    - health.py:     GET    /health                            (service health)

Routes stay thin: extract request data, resolve dependencies, call a
service, shape the response. Business logic lives in services.
"""
