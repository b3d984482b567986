from .document_store import COLLECTIONS, DocumentStore, InMemoryDocumentStore

__all__ = ['COLLECTIONS', 'DocumentStore', 'InMemoryDocumentStore']
