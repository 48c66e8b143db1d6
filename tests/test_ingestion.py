import threading

import pytest

from conftest import FakeEmbedder, make_response
from notes_rag.chunking import Chunk
from notes_rag.errors import ExtractionError, GatewayError, RemoteUnavailable
from notes_rag.ingestion import ContentIdAllocator, IdAllocator, IngestionPipeline
from notes_rag.vector_store import QdrantGateway


def _write(path, name):
    target = path / name
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(b"placeholder")
    return str(target)


def _pipeline(config, qdrant, embedder, texts, id_allocator=None):
    """Pipeline whose extractor returns texts[basename] or raises when the value is an exception."""
    def extract(path):
        value = texts[path.replace("\\", "/").rsplit("/", 1)[-1]]
        if isinstance(value, Exception):
            raise value
        return value

    gateway = QdrantGateway(config, session=qdrant)
    return IngestionPipeline(config, embedder, gateway, extractor=extract, id_allocator=id_allocator)


def test_single_document_becomes_three_points(config, qdrant, embedder, tmp_path):
    _write(tmp_path, "lecture.pdf")
    text = "x" * 450 + "y" * 450 + "z" * 300

    report = _pipeline(config, qdrant, embedder, {"lecture.pdf": text}).ingest(str(tmp_path))

    assert report.files_processed == 1
    assert report.chunks_upserted == 3
    assert len(qdrant.calls_to("PUT", "/collections/class_notes")) == 1

    upserts = [c[3]["points"][0] for c in qdrant.calls_to("PUT", "/points")]
    assert [p["payload"]["chunk_index"] for p in upserts] == [0, 1, 2]
    assert [len(p["payload"]["text_content"]) for p in upserts] == [500, 500, 250]
    assert all(p["payload"]["filename"] == "lecture.pdf" for p in upserts)
    assert upserts[1]["payload"]["text_content"] == text[450:950]
    assert embedder.texts == [p["payload"]["text_content"] for p in upserts]


def test_point_ids_are_distinct_and_increasing(config, qdrant, embedder, tmp_path):
    _write(tmp_path, "a.pdf")
    _write(tmp_path, "b.docx")
    texts = {"a.pdf": "a" * 2000, "b.docx": "b" * 1000}

    _pipeline(config, qdrant, embedder, texts).ingest(str(tmp_path))

    ids = [c[3]["points"][0]["id"] for c in qdrant.calls_to("PUT", "/points")]
    assert len(ids) == 8
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)


def test_unsupported_and_empty_files_are_skipped(config, qdrant, embedder, tmp_path):
    _write(tmp_path, "readme.txt")
    _write(tmp_path, "blank.pptx")
    _write(tmp_path, "nested/deeper/notes.docx")
    texts = {"blank.pptx": "   \n\t ", "notes.docx": "Reductions preserve hardness."}

    report = _pipeline(config, qdrant, embedder, texts).ingest(str(tmp_path))

    assert report.files_skipped == 2
    assert report.files_processed == 1
    assert report.chunks_upserted == 1
    assert embedder.texts == ["Reductions preserve hardness."]


def test_bad_file_does_not_stop_the_run(config, qdrant, embedder, tmp_path):
    broken = _write(tmp_path, "broken.pdf")
    _write(tmp_path, "good.pdf")
    texts = {"broken.pdf": ExtractionError(broken, "EOF marker not found"), "good.pdf": "good notes"}

    report = _pipeline(config, qdrant, embedder, texts).ingest(str(tmp_path))

    assert report.failed_files == [broken]
    assert report.files_processed == 1
    assert report.chunks_upserted == 1


def test_missing_folder_gives_empty_report(config, qdrant, embedder, tmp_path):
    report = _pipeline(config, qdrant, embedder, {}).ingest(str(tmp_path / "nope"))
    assert report.files_processed == 0
    assert qdrant.calls == []


def test_embedding_failure_aborts_by_default(config, qdrant, tmp_path):
    _write(tmp_path, "a.pdf")
    embedder = FakeEmbedder(fail_on=2, error=RemoteUnavailable("timed out"))

    with pytest.raises(RemoteUnavailable):
        _pipeline(config, qdrant, embedder, {"a.pdf": "a" * 1200}).ingest(str(tmp_path))
    assert len(qdrant.calls_to("PUT", "/points")) == 1


def test_store_failure_aborts_by_default(config, qdrant, embedder, tmp_path):
    _write(tmp_path, "a.pdf")
    qdrant.fail_with = make_response(503, "unavailable")

    with pytest.raises(GatewayError):
        _pipeline(config, qdrant, embedder, {"a.pdf": "notes"}).ingest(str(tmp_path))


def test_failed_chunks_can_be_skipped(config, qdrant, tmp_path):
    config.skip_failed_chunks = True
    _write(tmp_path, "a.pdf")
    embedder = FakeEmbedder(fail_on=2, error=RemoteUnavailable("timed out"))

    report = _pipeline(config, qdrant, embedder, {"a.pdf": "a" * 1200}).ingest(str(tmp_path))

    assert report.failed_chunks == [("a.pdf", 1)]
    assert report.chunks_upserted == 2


def test_parallel_workers_keep_indices_and_unique_ids(config, qdrant, embedder, tmp_path):
    config.ingest_workers = 4
    _write(tmp_path, "a.pdf")

    report = _pipeline(config, qdrant, embedder, {"a.pdf": "q" * 5000}).ingest(str(tmp_path))

    points = [c[3]["points"][0] for c in qdrant.calls_to("PUT", "/points")]
    assert report.chunks_upserted == 11
    assert sorted(p["payload"]["chunk_index"] for p in points) == list(range(11))
    assert len({p["id"] for p in points}) == 11
    assert len(qdrant.calls_to("PUT", "/collections/class_notes")) == 1


def test_id_allocator_is_thread_safe():
    allocator = IdAllocator(seed=1000)
    ids = []
    lock = threading.Lock()

    def worker():
        got = [allocator.next_id() for _ in range(500)]
        with lock:
            ids.extend(got)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(set(ids)) == 4000
    assert min(ids) == 1001


def test_content_ids_are_deterministic(config, qdrant, embedder, tmp_path):
    allocator = ContentIdAllocator()
    first = allocator.next_id(Chunk("a.pdf", 0, "x"))

    assert first == allocator.next_id(Chunk("a.pdf", 0, "different text"))
    assert first != allocator.next_id(Chunk("a.pdf", 1, "x"))
    assert 0 <= first < 2 ** 64

    config.point_id_strategy = "content"
    _write(tmp_path, "a.pdf")
    pipeline = _pipeline(config, qdrant, embedder, {"a.pdf": "a" * 1200})
    pipeline.ingest(str(tmp_path))
    pipeline.ingest(str(tmp_path))

    assert len(qdrant.points["class_notes"]) == 3
