"""Builds the knowledge store from the curated seed facts and the platform documents folder."""

import asyncio
from pathlib import Path

from services.knowledge.VectorStore import TEXT_SUFFIXES, VectorStore
from services.knowledge.seed_knowledge import SEED_KNOWLEDGE, tags_for
from shared.helper.HelperConfig import HelperConfig

DOCUMENT_SUFFIXES = (".pdf",) + TEXT_SUFFIXES


class KnowledgeLoader:
    def __init__(self, helper_config: HelperConfig, vector_store: VectorStore, docs_path: Path | None = None) -> None:
        self.logging = helper_config.get_logger()
        self._vector_store = vector_store
        self.docs_path = Path(docs_path) if docs_path else helper_config.get_path_val("KNOWLEDGE_DOCS_PATH", default="./data/docs")

    async def do_load(self, rebuild: bool = False) -> dict:
        """Store the seed facts and index every document in the docs folder.

        Seed facts are upserted by id, so loading twice leaves the same corpus.
        A document that fails to index is logged and skipped.

        Args:
            rebuild (bool): Delete all stored chunks first.

        Returns:
            dict: {"seed": int, "documents": int, "chunks": int, "failed": list[str], "total": int}
        """
        await self._vector_store.do_initialize()
        if rebuild:
            await self._vector_store.do_clear()

        for item in SEED_KNOWLEDGE:
            await self._vector_store.do_add_document(item["id"], item["content"], item["metadata"])
        self.logging.info("Loaded %d seed knowledge items.", len(SEED_KNOWLEDGE))

        documents, chunks, failed = 0, 0, []
        for path in await asyncio.to_thread(self._list_documents):
            try:
                chunks += await self._vector_store.do_index_file(path, {"source": path.suffix.lstrip(".").lower(), "tags": tags_for(path.name)})
                documents += 1
            except Exception as e:
                self.logging.error("Failed to index %s: %s", path.name, e)
                failed.append(path.name)

        total = await self._vector_store.do_count()
        self.logging.info(
            "Knowledge base ready: %d documents (%d chunks) indexed, %d failed, %d chunks stored.",
            documents, chunks, len(failed), total, color="green",
        )
        return {"seed": len(SEED_KNOWLEDGE), "documents": documents, "chunks": chunks, "failed": failed, "total": total}

    def _list_documents(self) -> list[Path]:
        if not self.docs_path.is_dir():
            self.logging.info("No knowledge documents folder at %s", self.docs_path)
            return []
        return sorted(p for p in self.docs_path.iterdir() if p.is_file() and p.suffix.lower() in DOCUMENT_SUFFIXES)
