"""Verificação de imagens de desastres com o modelo de linguagem."""

from .service import (
    STATUS_MESSAGES,
    BatchImage,
    ImageVerificationService,
    VerificationOutcome,
)

__all__ = [
    "BatchImage",
    "ImageVerificationService",
    "STATUS_MESSAGES",
    "VerificationOutcome",
]
