"""
Common dependencies for FastAPI routes.
"""

from fastapi import Request

from plantcare.core.exceptions import NotFoundException


def get_store(request: Request):
    """The process-wide data store created at startup."""
    return request.app.state.store


def get_ai_service(request: Request):
    """AI collaborator; built lazily so the app runs without an API key."""
    service = getattr(request.app.state, "ai_service", None)
    if service is None:
        from plantcare.ai.openai_service import OpenAIService
        service = OpenAIService()
        request.app.state.ai_service = service
    return service


def get_routine(request: Request):
    """The care routine started via /routine/start."""
    routine = getattr(request.app.state, "routine", None)
    if routine is None:
        raise NotFoundException("No care routine has been started")
    return routine
