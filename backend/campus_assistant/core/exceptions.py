"""
Custom exception classes for unified error handling.
"""

from fastapi import HTTPException


class AppBaseError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class InvalidAccessCodeError(AppBaseError):
    """Raised when a privileged role is requested with a wrong access code."""
    def __init__(self, role: str):
        super().__init__(
            message=f"Invalid {role.capitalize()} Access Code",
            detail="Ask your administrator for the current access code.",
        )


class IdentityProviderError(AppBaseError):
    """Raised when the identity provider rejects or fails a user update."""
    def __init__(self, message: str = "Identity provider request failed"):
        super().__init__(message=message)


class GenerationError(AppBaseError):
    """Raised when the generative model call fails or times out."""
    def __init__(self, message: str = "Failed to generate response"):
        super().__init__(message=message)


class EmbeddingError(AppBaseError):
    """Raised when an embedding vector could not be computed."""
    def __init__(self, message: str = "Failed to compute embedding"):
        super().__init__(message=message)


class ArticleNotFoundError(AppBaseError):
    """Raised when a knowledge-base article does not exist."""
    def __init__(self, article_id: str):
        super().__init__(message="Article not found", detail=f"id={article_id}")


# ── Utility: convert to HTTPException ────────────────────

def app_error_to_http(error: AppBaseError, status_code: int = 400) -> HTTPException:
    """Convert an AppBaseError to an HTTPException with consistent JSON body."""
    return HTTPException(
        status_code=status_code,
        detail={
            "error": error.message,
            "detail": error.detail,
            "type": type(error).__name__,
        },
    )
