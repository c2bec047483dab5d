"""In-memory storage for documents, chunks, models, users and prompts."""

import copy
import logging
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Iterator

from docvault.exceptions import NotFoundError, StoreClosedError, ValidationFailedError
from docvault.models import Chunk, Document, DocumentStatus, Model, Prompt, User
from docvault.storage.locks import ReadWriteLock

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


class DocumentStore:
    """Concurrent in-memory repository.

    One reader/writer lock guards every map. Records are copied on the way in
    and on the way out, so callers never hold a reference to shared state.
    Construct one store at startup and pass it to whatever needs it.
    """

    def __init__(self):
        self._lock = ReadWriteLock()
        self._closed = False
        self._reset()

    def _reset(self) -> None:
        self._documents: dict[str, Document] = {}
        self._chunks: dict[str, list[Chunk]] = {}
        self._models: dict[str, Model] = {}
        self._users: dict[int, User] = {}
        self._prompts: dict[int, Prompt] = {}
        self._next_id = 1
        self._next_chunk_id = 1
        self._next_model_id = 1
        self._next_user_id = 1
        self._next_prompt_id = 1

    @contextmanager
    def reading(self) -> Iterator[None]:
        """Shared access to the maps."""
        with self._lock.read():
            if self._closed:
                raise StoreClosedError()
            yield

    @contextmanager
    def writing(self) -> Iterator[None]:
        """Exclusive access to the maps."""
        with self._lock.write():
            if self._closed:
                raise StoreClosedError()
            yield

    def close(self) -> None:
        """Clear every map and reset counters. Later calls raise StoreClosedError."""
        with self._lock.write():
            if self._closed:
                return
            self._reset()
            self._closed = True
        logger.info("Document store closed and cleared")

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "DocumentStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # Documents

    def create_document(self, doc: Document) -> Document:
        """Store a document, assigning ``id`` and ``upload_date`` when empty.

        A caller-supplied id that already exists overwrites the stored record.

        Returns:
            A copy of the stored document
        """
        with self.writing():
            stored = self._insert_document(doc)
        logger.info(f"Document created: {stored.name} ({stored.id})")
        return stored

    def create_document_with_chunks(
        self, doc: Document, chunks: list[Chunk]
    ) -> tuple[Document, list[Chunk]]:
        """Store a document and its chunks in one critical section.

        Every chunk is attached to the new document whatever its
        ``document_id`` was, so readers never see one without the other.
        """
        with self.writing():
            stored = self._insert_document(doc)
            created = self._insert_chunks(
                [replace(chunk, document_id=stored.id) for chunk in chunks]
            )
        logger.info(f"Document created: {stored.name} ({stored.id}, {len(created)} chunks)")
        return stored, created

    def _insert_document(self, doc: Document) -> Document:
        # Caller holds the write lock
        doc = copy.deepcopy(doc)
        if not doc.id:
            doc.id = self._take_document_id()
        elif doc.id in self._documents:
            logger.warning(f"Document {doc.id} already exists, overwriting")

        if not doc.upload_date:
            doc.upload_date = _now()

        self._documents[doc.id] = doc
        return copy.deepcopy(doc)

    def _take_document_id(self) -> str:
        # Skip ids a caller already supplied explicitly
        while str(self._next_id) in self._documents:
            self._next_id += 1
        doc_id = str(self._next_id)
        self._next_id += 1
        return doc_id

    def get_document(self, doc_id: str) -> Document:
        with self.reading():
            doc = self._documents.get(doc_id)
            if doc is None:
                raise NotFoundError(f"document not found: {doc_id}")
            return copy.deepcopy(doc)

    def list_documents(self) -> list[Document]:
        with self.reading():
            docs = [copy.deepcopy(doc) for doc in self._documents.values()]
        logger.debug(f"Listed {len(docs)} documents")
        return docs

    def update_document_status(self, doc_id: str, status: DocumentStatus) -> Document:
        """Change a document's status, the only in-place change a document gets."""
        with self.writing():
            doc = self._documents.get(doc_id)
            if doc is None:
                raise NotFoundError(f"document not found: {doc_id}")
            doc.status = DocumentStatus(status)
            updated = copy.deepcopy(doc)
        logger.info(f"Document {doc_id} status -> {updated.status.value}")
        return updated

    def delete_document(self, doc_id: str) -> None:
        """Remove a document and all of its chunks in one critical section."""
        with self.writing():
            if doc_id not in self._documents:
                raise NotFoundError(f"document not found: {doc_id}")
            del self._documents[doc_id]
            removed = self._chunks.pop(doc_id, [])
        logger.info(f"Document deleted: {doc_id} ({len(removed)} chunks)")

    # Chunks

    def create_chunk(self, chunk: Chunk) -> Chunk:
        return self.create_chunks([chunk])[0]

    def create_chunks(self, chunks: list[Chunk]) -> list[Chunk]:
        """Store chunks for existing documents in one critical section.

        Raises:
            NotFoundError: if any chunk's parent document is unknown (nothing is stored)
        """
        with self.writing():
            for chunk in chunks:
                if chunk.document_id not in self._documents:
                    raise NotFoundError(f"document not found: {chunk.document_id}")
            created = self._insert_chunks(chunks)

        logger.debug(f"Created {len(created)} chunks")
        return created

    def _insert_chunks(self, chunks: list[Chunk]) -> list[Chunk]:
        # Caller holds the write lock and has checked the parents
        created = []
        for chunk in chunks:
            chunk = copy.deepcopy(chunk)
            if not chunk.id:
                chunk.id = f"chunk_{self._next_chunk_id}"
                self._next_chunk_id += 1
            if not chunk.created_at:
                chunk.created_at = _now()
            self._chunks.setdefault(chunk.document_id, []).append(chunk)
            created.append(copy.deepcopy(chunk))
        return created

    def get_chunks(self, doc_id: str) -> list[Chunk]:
        """Chunks of a document in insertion order (empty if none)."""
        with self.reading():
            return [copy.deepcopy(c) for c in self._chunks.get(doc_id, [])]

    def get_document_with_chunks(self, doc_id: str) -> tuple[Document, list[Chunk]]:
        """A document and its chunks read in one critical section."""
        with self.reading():
            doc = self._documents.get(doc_id)
            if doc is None:
                raise NotFoundError(f"document not found: {doc_id}")
            return copy.deepcopy(doc), [copy.deepcopy(c) for c in self._chunks.get(doc_id, [])]

    # Models

    def create_model(self, model: Model) -> Model:
        model = copy.deepcopy(model)
        with self.writing():
            if not model.id:
                model.id = f"model_{self._next_model_id}"
                self._next_model_id += 1
            self._models[model.id] = model
            stored = copy.deepcopy(model)
        logger.info(f"Model created: {model.id}")
        return stored

    def get_model(self, model_id: str) -> Model:
        with self.reading():
            model = self._models.get(model_id)
            if model is None:
                raise NotFoundError(f"model not found: {model_id}")
            return copy.deepcopy(model)

    def list_models(self) -> list[Model]:
        with self.reading():
            return [copy.deepcopy(m) for m in self._models.values()]

    def delete_model(self, model_id: str) -> None:
        with self.writing():
            if model_id not in self._models:
                raise NotFoundError(f"model not found: {model_id}")
            del self._models[model_id]
        logger.info(f"Model deleted: {model_id}")

    # Users and prompts

    def create_user(self, username: str) -> User:
        with self.writing():
            if any(u.username == username for u in self._users.values()):
                raise ValidationFailedError(f"username already exists: {username}")

            user = User(user_id=self._next_user_id, username=username, created_at=_now())
            self._users[user.user_id] = user
            self._next_user_id += 1
            stored = copy.deepcopy(user)

        logger.info(f"User created: {username} (ID: {stored.user_id})")
        return stored

    def get_user(self, user_id: int) -> User:
        with self.reading():
            user = self._users.get(user_id)
            if user is None:
                raise NotFoundError(f"user not found: {user_id}")
            return copy.deepcopy(user)

    def list_users(self) -> list[User]:
        with self.reading():
            return [copy.deepcopy(u) for u in self._users.values()]

    def create_prompt(self, user_id: int, prompt_text: str, answer_text: str) -> Prompt:
        with self.writing():
            if user_id not in self._users:
                raise NotFoundError(f"user not found: {user_id}")

            prompt = Prompt(
                id=self._next_prompt_id,
                user_id=user_id,
                prompt_text=prompt_text,
                answer_text=answer_text,
                created_at=_now(),
            )
            self._prompts[prompt.id] = prompt
            self._next_prompt_id += 1
            stored = copy.deepcopy(prompt)

        logger.info(f"Prompt created for user {user_id} (ID: {stored.id})")
        return stored

    def get_user_prompts(self, user_id: int, limit: int = 0) -> list[Prompt]:
        """Prompts of a user in creation order; ``limit`` of 0 means all."""
        with self.reading():
            prompts = [copy.deepcopy(p) for p in self._prompts.values() if p.user_id == user_id]
        if limit > 0:
            prompts = prompts[:limit]
        return prompts

    def stats(self) -> dict[str, int]:
        with self.reading():
            return {
                "documents": len(self._documents),
                "chunks": sum(len(c) for c in self._chunks.values()),
                "models": len(self._models),
                "users": len(self._users),
                "prompts": len(self._prompts),
            }
