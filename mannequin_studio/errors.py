"""Error taxonomy for remote generation calls."""

from enum import Enum


class ErrorKind(str, Enum):
    """Stable tag attached to every generation failure."""
    
    SAFETY_BLOCK = "SAFETY_BLOCK"
    API_KEY_INVALID = "API_KEY_INVALID"
    BILLING_NOT_ENABLED = "BILLING_NOT_ENABLED"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    MODEL_OVERLOADED = "MODEL_OVERLOADED"
    RETRY_FAILED = "RETRY_FAILED"
    NO_IMAGE_DATA = "NO_IMAGE_DATA"
    EMPTY_RESPONSE = "EMPTY_RESPONSE"
    ALL_GENERATIONS_FAILED = "ALL_GENERATIONS_FAILED"
    TRANSIENT = "TRANSIENT"


# These need a human to fix something; retrying cannot help.
NON_TRANSIENT_KINDS = frozenset({
    ErrorKind.SAFETY_BLOCK,
    ErrorKind.API_KEY_INVALID,
    ErrorKind.BILLING_NOT_ENABLED,
    ErrorKind.QUOTA_EXCEEDED,
})


class GenerationError(Exception):
    """A remote call failed with a classified error kind."""
    
    def __init__(self, kind: ErrorKind, message: str | None = None, cause: BaseException | None = None):
        self.kind = kind
        self.cause = cause
        super().__init__(message or kind.value)


class AllGenerationsFailedError(GenerationError):
    """No pose image could be produced for a request.
    
    `cause_kind` is the kind of the lowest-index pose failure, `errors`
    maps every failed slot index to its error.
    """
    
    def __init__(self, errors: dict[int, GenerationError]):
        self.errors = errors
        first = errors[min(errors)] if errors else None
        self.cause_kind = first.kind if first else ErrorKind.RETRY_FAILED
        super().__init__(
            ErrorKind.ALL_GENERATIONS_FAILED,
            f"All {len(errors)} image generations failed (first error: {self.cause_kind.value})",
            cause=first,
        )


USER_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.SAFETY_BLOCK: (
        "La génération a été bloquée par les filtres de sécurité. "
        "Essayez avec d'autres images ou une autre description."
    ),
    ErrorKind.API_KEY_INVALID: "La clé API est invalide. Vérifiez votre configuration.",
    ErrorKind.BILLING_NOT_ENABLED: (
        "La facturation n'est pas activée sur ce projet. "
        "Activez-la pour utiliser la génération d'images."
    ),
    ErrorKind.QUOTA_EXCEEDED: "Quota atteint. Réessayez dans quelques minutes.",
    ErrorKind.MODEL_OVERLOADED: "Le service est actuellement surchargé. Réessayez dans un instant.",
    ErrorKind.RETRY_FAILED: "La génération a échoué après plusieurs tentatives.",
    ErrorKind.NO_IMAGE_DATA: "Le service n'a renvoyé aucune image.",
    ErrorKind.EMPTY_RESPONSE: "Le service a renvoyé une réponse vide.",
    ErrorKind.ALL_GENERATIONS_FAILED: (
        "Toutes les tentatives de génération ont échoué. "
        "Le service est peut-être surchargé ou votre quota est atteint."
    ),
    ErrorKind.TRANSIENT: "Une erreur temporaire est survenue. Réessayez.",
}


def user_message(kind: ErrorKind) -> str:
    """User-facing copy for an error kind."""
    return USER_MESSAGES.get(kind, USER_MESSAGES[ErrorKind.TRANSIENT])
