"""
Library Factory
Centralizes the wiring of storage adapters into application services.
"""

import random

from lingoflash.application.config import AppConfig
from lingoflash.application.library_service import LibraryService
from lingoflash.domain.review.ports import LibraryRepository
from lingoflash.infrastructure.adapters.json_library import JsonLibraryRepository


def get_library_repository(config: AppConfig) -> LibraryRepository:
    """
    Returns the LibraryRepository implementation for the configured library.
    """
    return JsonLibraryRepository(config.library_path)


def get_library_service(config: AppConfig) -> LibraryService:
    """
    Returns a LibraryService whose cards all carry a review state.
    """
    service = LibraryService(get_library_repository(config))
    service.ensure_review_states()
    return service


def get_rng(config: AppConfig) -> random.Random:
    """Seeded when `seed` is configured, so practice draws can be replayed."""
    return random.Random(config.seed)
