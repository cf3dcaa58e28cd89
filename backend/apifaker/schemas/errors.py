"""
API Faker — Response Schemas
==============================

What:  Pydantic models for the parts of the API that have a fixed shape.
Why:   Resource bodies are arbitrary JSON, but error bodies are not; declaring
       them gives the OpenAPI docs a real contract for every failure status.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Body of every 400/403/404 (and 405/500) response.

    Example:
        {"error": "Item with id '7' not found in 'posts'"}
    """

    error: str = Field(description="Human-readable error description")
