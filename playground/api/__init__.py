"""API router for playground endpoints."""

from fastapi import APIRouter

from playground.api import chat, images

router = APIRouter()

# Chat playground (deterministic KB answers + grounded generation)
router.include_router(chat.router, tags=["chat"])

# Companion image generation
router.include_router(images.router, tags=["images"])
