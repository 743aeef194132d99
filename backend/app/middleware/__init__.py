# Middleware package init
"""
Notewise Backend - Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    1. Request ID first, so every later log line can carry it
    2. Access log measures everything downstream, including the handler
    3. GZip and CORS are Starlette's built-ins, configured in main.py
"""
