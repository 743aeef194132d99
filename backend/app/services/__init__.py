# Services package init
"""
Notewise Backend - Services Layer
==================================

What:  Business logic between routes (HTTP) and the database.

Service Inventory:
    - NoteService:       Note CRUD, scoped to the owner
    - AssistantService:  Ask-about-notes, PDF analysis, suggested questions
    - LLMClient:         Abstract provider interface (llm_base.py)
    - GeminiService:     LLMClient on google-generativeai
    - FileService:       PDF validation and temp-file staging
    - IdentityGateway:   Resolves the Supabase session to a User
    - prompts / question_parser: pure helpers used by AssistantService
"""
