import asyncio

import pytest

from conftest import FakeEmbedClient, FakeLLMClient
from services.knowledge.KnowledgeLoader import KnowledgeLoader
from services.knowledge.RetrievalService import MIN_SIMILARITY, RetrievalService
from services.knowledge.VectorStore import VectorStore, cosine_similarity, sanitize_id, split_text
from services.knowledge.seed_knowledge import SEED_KNOWLEDGE


@pytest.fixture
def embed_client():
    return FakeEmbedClient()


@pytest.fixture
def vector_store(helper_config, embed_client):
    store = VectorStore(helper_config=helper_config, embed_client=embed_client)
    asyncio.run(store.do_initialize())
    return store


##########################################
############## VECTOR STORE ##############
##########################################


def test_indexed_text_is_found_above_threshold(vector_store):
    text = "Invoices must be settled within 3 calendar days"

    async def _run():
        await vector_store.do_add_document("invoice", text, {"type": "policy"})
        await vector_store.do_add_document("other", "Babysitters and housemaids are basic workers")
        return await vector_store.do_search(text, limit=5)

    hits = asyncio.run(_run())
    assert hits[0].id == "invoice"
    assert hits[0].similarity >= MIN_SIMILARITY
    assert hits[0].metadata == {"type": "policy"}
    assert hits[0].similarity >= hits[1].similarity


def test_adding_same_id_twice_keeps_latest_only(vector_store):
    async def _run():
        await vector_store.do_add_document("fees", "first version")
        await vector_store.do_add_document("fees", "second version")
        return await vector_store.do_count()

    assert asyncio.run(_run()) == 1
    assert vector_store.get_raw_record("fees")["text"] == "second version"


def test_ids_with_unsafe_characters_are_stored(vector_store):
    asyncio.run(vector_store.do_add_document("docs/agreement v2.pdf#0001", "text"))
    assert sanitize_id("docs/agreement v2.pdf#0001") == "docs_agreement_v2.pdf#0001"
    assert list(vector_store.store_path.glob("*.json"))[0].parent == vector_store.store_path
    assert vector_store.get_raw_record("docs/agreement v2.pdf#0001")["id"] == "docs/agreement v2.pdf#0001"


def test_index_file_stores_numbered_chunks(vector_store, tmp_path):
    doc = tmp_path / "Kozi Agreement.txt"
    doc.write_text(" ".join(f"word{i}" for i in range(600)), encoding="utf-8")

    async def _run():
        stored = await vector_store.do_index_file(doc, {"source": "txt"})
        return stored, await vector_store.do_count()

    stored, count = asyncio.run(_run())
    assert stored == count == len(split_text(doc.read_text(encoding="utf-8")))
    record = vector_store.get_raw_record("Kozi Agreement.txt#0001")
    assert record["metadata"] == {"source": "txt", "filename": "Kozi Agreement.txt", "chunk": 1}


def test_index_file_without_text_stores_nothing(vector_store, tmp_path):
    doc = tmp_path / "empty.md"
    doc.write_text("   \n", encoding="utf-8")
    assert asyncio.run(vector_store.do_index_file(doc)) == 0


def test_unsupported_document_type(vector_store, tmp_path):
    doc = tmp_path / "sheet.xlsx"
    doc.write_bytes(b"\x00")
    with pytest.raises(ValueError):
        asyncio.run(vector_store.do_index_file(doc))


def test_split_text_overlaps():
    chunks = split_text("a" * 2500, size=1200, overlap=200)
    assert [len(c) for c in chunks] == [1200, 1200, 500]


def test_cosine_similarity_edge_cases():
    assert cosine_similarity([1, 0], [1, 0]) == pytest.approx(1.0)
    assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)
    assert cosine_similarity([0, 0], [1, 1]) == 0.0
    assert cosine_similarity([1, 2, 3], [1, 2]) == 0.0


def test_clear_removes_everything(vector_store):
    async def _run():
        await vector_store.do_add_document("a", "one")
        await vector_store.do_add_document("b", "two")
        removed = await vector_store.do_clear()
        return removed, await vector_store.do_count()

    assert asyncio.run(_run()) == (2, 0)


##########################################
############### RETRIEVAL ################
##########################################


def test_context_keeps_only_relevant_hits(helper_config, vector_store):
    retrieval = RetrievalService(helper_config=helper_config, vector_store=vector_store, llm_client=FakeLLMClient())

    async def _run():
        await vector_store.do_add_document("late", "late fee is 5 percent per week")
        await vector_store.do_add_document("cv", "professional cv structure contact summary")
        return await retrieval.do_get_relevant_context("late fee is 5 percent per week")

    assert asyncio.run(_run()) == "late fee is 5 percent per week"


def test_no_relevant_hits_gives_empty_context(helper_config, vector_store):
    retrieval = RetrievalService(helper_config=helper_config, vector_store=vector_store, llm_client=FakeLLMClient())

    async def _run():
        await vector_store.do_add_document("cv", "professional cv structure")
        return await retrieval.do_get_relevant_context("governing law of rwanda")

    assert asyncio.run(_run()) == ""


def test_search_failure_gives_empty_context(helper_config, vector_store, embed_client):
    retrieval = RetrievalService(helper_config=helper_config, vector_store=vector_store, llm_client=FakeLLMClient())
    embed_client.fail = True
    assert asyncio.run(retrieval.do_get_relevant_context("anything")) == ""


def test_normalize_query_expands_each_group_once():
    normalized = RetrievalService.normalize_query("What is the registration fee?")
    assert normalized == "What is the service fee fees price prices cost costs?"
    # inserted words are not expanded again
    assert normalized.count("price") == 2


def test_normalize_query_leaves_unrelated_text():
    assert RetrievalService.normalize_query("How do I upload my CV?") == "How do I upload my CV?"


def test_system_prompt_contains_context_and_user_status():
    prompt = RetrievalService.build_system_prompt(
        "job_seeker", "Upload your CV.", {"profile_completion": 40, "missing_fields": ["CV", "ID card"]}
    )
    assert "RELEVANT INFORMATION:\nUpload your CV." in prompt
    assert "- Profile completion: 40%" in prompt
    assert "- Missing fields: CV, ID card" in prompt


def test_unknown_persona_is_rejected():
    with pytest.raises(ValueError):
        RetrievalService.build_system_prompt("employer", "")


def test_contextual_response_sends_history_and_message(helper_config, vector_store):
    llm = FakeLLMClient("Hello from the LLM")
    retrieval = RetrievalService(helper_config=helper_config, vector_store=vector_store, llm_client=llm)
    history = [{"sender": "user", "message": "hi"}, {"sender": "assistant", "message": "hello"}]

    reply = asyncio.run(retrieval.do_generate_contextual_response("what can you do?", history=history))

    assert reply == "Hello from the LLM"
    roles = [m["role"] for m in llm.messages[0]]
    assert roles == ["system", "user", "assistant", "user"]
    assert llm.messages[0][-1]["content"] == "what can you do?"


def test_contextual_response_propagates_llm_failure(helper_config, vector_store):
    llm = FakeLLMClient()
    llm.fail = True
    retrieval = RetrievalService(helper_config=helper_config, vector_store=vector_store, llm_client=llm)
    with pytest.raises(Exception):
        asyncio.run(retrieval.do_generate_contextual_response("hello"))


##########################################
################ LOADER ##################
##########################################


def test_loader_indexes_seed_and_documents(helper_config, vector_store, tmp_path):
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "worker guidelines.md").write_text("Workers must respect the client's home.", encoding="utf-8")
    (docs / "broken.pdf").write_bytes(b"not a pdf")
    (docs / "notes.csv").write_text("ignored", encoding="utf-8")
    loader = KnowledgeLoader(helper_config=helper_config, vector_store=vector_store)

    async def _run():
        first = await loader.do_load()
        second = await loader.do_load(rebuild=True)
        return first, second

    first, second = asyncio.run(_run())
    assert first["seed"] == len(SEED_KNOWLEDGE)
    assert first["documents"] == 1
    assert first["failed"] == ["broken.pdf"]
    assert first["total"] == len(SEED_KNOWLEDGE) + 1
    assert second["total"] == first["total"]
    assert vector_store.get_raw_record("worker guidelines.md#0000")["metadata"]["tags"][0] == "worker"
