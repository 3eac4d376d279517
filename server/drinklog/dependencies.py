"""
Dependency wiring for the FastAPI app.

The store is built once per app from explicit settings and kept on
app.state for the lifetime of the process.
"""

from __future__ import annotations

import logging

from fastapi import Request

from drinklog.config import Settings
from drinklog.storage import DocumentStore, GitHubDocumentStore, InMemoryDocumentStore

logger = logging.getLogger(__name__)


def build_document_store(settings: Settings) -> DocumentStore:
    if settings.use_in_memory_store or not (
        settings.github_owner and settings.github_repo
    ):
        logger.warning("GitHub repository not configured, using in-memory store")
        return InMemoryDocumentStore()
    return GitHubDocumentStore(
        owner=settings.github_owner,
        repo=settings.github_repo,
        path=settings.data_path,
        token=settings.github_token,
        branch=settings.github_branch,
        api_url=settings.github_api_url,
        timeout=settings.request_timeout_seconds,
    )


def get_document_store(request: Request) -> DocumentStore:
    return request.app.state.document_store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
