"""Versioned API router."""

from fastapi import APIRouter

from . import auth, characters, contact, game, health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(game.router, prefix="/game", tags=["game"])
router.include_router(characters.router, prefix="/characters", tags=["characters"])
router.include_router(contact.router, prefix="/contact", tags=["contact"])

__all__ = ["router"]
