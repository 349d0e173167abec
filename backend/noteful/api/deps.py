from fastapi import Request

from noteful.storage.document_store import DocumentStore


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store
