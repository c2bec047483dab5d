import threading
import time

import pytest

from docvault.exceptions import NotFoundError, StoreClosedError, ValidationFailedError
from docvault.models import Chunk, Document, DocumentStatus, Model
from docvault.storage import DocumentStore, ReadWriteLock


def make_doc(**kwargs) -> Document:
    fields = {"name": "report.txt", "type": "txt", "size": 42, "path": "/tmp/report.txt"}
    fields.update(kwargs)
    return Document(**fields)


def test_create_assigns_id_and_upload_date(store):
    created = store.create_document(make_doc())

    assert created.id == "1"
    assert created.upload_date
    assert store.get_document(created.id) == created


def test_caller_supplied_fields_are_kept(store):
    doc = make_doc(id="abc", upload_date="2024-01-01T00:00:00", metadata={"k": "v"})
    store.create_document(doc)

    assert store.get_document("abc") == doc


def test_returned_documents_are_copies(store):
    doc = make_doc(metadata={"k": "v"})
    created = store.create_document(doc)

    doc.metadata["k"] = "changed by caller"
    fetched = store.get_document(created.id)
    fetched.metadata["k"] = "changed again"
    fetched.name = "other"
    store.list_documents()[0].metadata.clear()

    stored = store.get_document(created.id)
    assert stored.metadata == {"k": "v"}
    assert stored.name == "report.txt"


def test_duplicate_id_overwrites(store):
    store.create_document(make_doc(id="x", name="first"))
    store.create_document(make_doc(id="x", name="second"))

    assert store.get_document("x").name == "second"
    assert len(store.list_documents()) == 1


def test_generated_ids_skip_caller_ids(store):
    store.create_document(make_doc(id="1"))
    created = store.create_document(make_doc())

    assert created.id == "2"
    assert {d.id for d in store.list_documents()} == {"1", "2"}


def test_get_unknown_document(store):
    with pytest.raises(NotFoundError):
        store.get_document("missing")


def test_update_status(store):
    created = store.create_document(make_doc())
    updated = store.update_document_status(created.id, DocumentStatus.READY)

    assert updated.status == DocumentStatus.READY
    assert store.get_document(created.id).status == DocumentStatus.READY


def test_delete_removes_document_and_chunks(store):
    doc = store.create_document(make_doc())
    store.create_chunks(
        [Chunk(document_id=doc.id, content=f"part {i}", chunk_index=i) for i in range(3)]
    )
    assert len(store.get_chunks(doc.id)) == 3

    store.delete_document(doc.id)

    with pytest.raises(NotFoundError):
        store.get_document(doc.id)
    assert store.get_chunks(doc.id) == []
    assert store.stats()["chunks"] == 0


def test_delete_unknown_document(store):
    with pytest.raises(NotFoundError):
        store.delete_document("missing")


def test_chunks_require_parent(store):
    doc = store.create_document(make_doc())

    with pytest.raises(NotFoundError):
        store.create_chunks(
            [
                Chunk(document_id=doc.id, content="ok", chunk_index=0),
                Chunk(document_id="missing", content="orphan", chunk_index=1),
            ]
        )
    assert store.get_chunks(doc.id) == []


def test_chunks_keep_insertion_order(store):
    doc = store.create_document(make_doc())
    store.create_chunk(Chunk(document_id=doc.id, content="first", chunk_index=0))
    store.create_chunk(Chunk(document_id=doc.id, content="second", chunk_index=1))

    chunks = store.get_chunks(doc.id)
    assert [c.content for c in chunks] == ["first", "second"]
    assert all(c.id and c.created_at for c in chunks)


def test_document_ids_are_not_consumed_by_chunks_or_models(store):
    first = store.create_document(make_doc())
    store.create_chunks(
        [Chunk(document_id=first.id, content=c, chunk_index=i) for i, c in enumerate("abc")]
    )
    store.create_model(Model(id="", name="llama"))

    second = store.create_document(make_doc())

    assert (first.id, second.id) == ("1", "2")
    assert [c.id for c in store.get_chunks(first.id)] == ["chunk_1", "chunk_2", "chunk_3"]
    assert store.list_models()[0].id == "model_1"


def test_create_document_with_chunks(store):
    doc, chunks = store.create_document_with_chunks(
        make_doc(chunks=2),
        [
            Chunk(document_id="", content="first", chunk_index=0),
            Chunk(document_id="stale", content="second", chunk_index=1),
        ],
    )

    assert doc.id == "1"
    assert [c.document_id for c in chunks] == [doc.id, doc.id]
    fetched, stored_chunks = store.get_document_with_chunks(doc.id)
    assert fetched == doc
    assert stored_chunks == chunks
    assert store.get_chunks("stale") == []


def test_get_document_with_chunks_missing(store):
    with pytest.raises(NotFoundError):
        store.get_document_with_chunks("missing")


def test_models(store):
    created = store.create_model(Model(id="", name="llama"))
    assert created.id

    assert store.get_model(created.id).name == "llama"
    assert len(store.list_models()) == 1

    store.delete_model(created.id)
    with pytest.raises(NotFoundError):
        store.get_model(created.id)


def test_users_and_prompts(store):
    alice = store.create_user("alice")
    bob = store.create_user("bob")
    assert (alice.user_id, bob.user_id) == (1, 2)

    with pytest.raises(ValidationFailedError):
        store.create_user("alice")

    for i in range(3):
        store.create_prompt(alice.user_id, f"question {i}", f"answer {i}")
    store.create_prompt(bob.user_id, "hi", "hello")

    prompts = store.get_user_prompts(alice.user_id)
    assert [p.prompt_text for p in prompts] == ["question 0", "question 1", "question 2"]
    assert len(store.get_user_prompts(alice.user_id, limit=2)) == 2

    with pytest.raises(NotFoundError):
        store.create_prompt(99, "q", "a")


def test_closed_store_rejects_operations():
    store = DocumentStore()
    store.create_document(make_doc())
    store.close()
    store.close()

    assert store.closed
    with pytest.raises(StoreClosedError):
        store.list_documents()
    with pytest.raises(StoreClosedError):
        store.create_document(make_doc())
    with pytest.raises(StoreClosedError):
        store.get_chunks("1")


def test_context_manager_closes():
    with DocumentStore() as store:
        store.create_document(make_doc())
    with pytest.raises(StoreClosedError):
        store.get_document("1")


def test_concurrent_writers_and_readers(store):
    errors = []

    def writer(n):
        try:
            for i in range(50):
                doc = store.create_document(make_doc(name=f"{n}-{i}"))
                store.create_chunk(Chunk(document_id=doc.id, content="x", chunk_index=0))
        except Exception as e:
            errors.append(e)

    def reader():
        try:
            for _ in range(50):
                for doc in store.list_documents():
                    assert doc.id
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    threads += [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    docs = store.list_documents()
    assert len(docs) == 200
    assert len({d.id for d in docs}) == 200
    assert store.stats()["chunks"] == 200


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    barrier = threading.Barrier(2, timeout=5)
    errors = []

    def read():
        with lock.read():
            try:
                barrier.wait()
            except threading.BrokenBarrierError as e:
                errors.append(e)

    threads = [threading.Thread(target=read) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []


def test_write_excludes_readers():
    lock = ReadWriteLock()
    entered = threading.Event()

    def read():
        with lock.read():
            entered.set()

    with lock.write():
        reader = threading.Thread(target=read)
        reader.start()
        assert not entered.wait(0.2)

    assert entered.wait(5)
    reader.join()


def test_waiting_writer_goes_before_new_readers():
    lock = ReadWriteLock()
    order = []
    reader_entered = threading.Event()

    def write():
        with lock.write():
            order.append("writer")

    def read():
        with lock.read():
            order.append("reader")
            reader_entered.set()

    with lock.read():
        writer = threading.Thread(target=write)
        writer.start()
        deadline = time.monotonic() + 5
        while lock._writers_waiting == 0 and time.monotonic() < deadline:
            time.sleep(0.01)
        assert lock._writers_waiting == 1

        reader = threading.Thread(target=read)
        reader.start()
        assert not reader_entered.wait(0.2)

    writer.join(5)
    reader.join(5)
    assert order == ["writer", "reader"]


def test_observer_never_sees_chunks_of_deleted_document(store):
    deleted = []
    errors = []
    done = threading.Event()

    def writer():
        try:
            for i in range(200):
                doc, _ = store.create_document_with_chunks(
                    make_doc(name=f"doc-{i}", chunks=2),
                    [Chunk(document_id="", content=c, chunk_index=j) for j, c in enumerate("ab")],
                )
                store.delete_document(doc.id)
                deleted.append(doc.id)
        except Exception as e:
            errors.append(e)
        finally:
            done.set()

    def observer():
        try:
            while not done.is_set():
                for doc_id in list(deleted):
                    assert store.get_chunks(doc_id) == []
                    try:
                        store.get_document(doc_id)
                    except NotFoundError:
                        continue
                    raise AssertionError(f"deleted document {doc_id} still readable")
                for doc in store.list_documents():
                    try:
                        fetched, chunks = store.get_document_with_chunks(doc.id)
                    except NotFoundError:
                        continue
                    assert len(chunks) == fetched.chunks == 2
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=writer)]
    threads += [threading.Thread(target=observer) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert store.stats()["documents"] == 0
    assert store.stats()["chunks"] == 0
