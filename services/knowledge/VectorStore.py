"""Flat-file vector store.

Every chunk lives in ``<VECTOR_STORE_PATH>/<sanitized id>.json``. A search
embeds the query and scores it against every stored chunk, so search cost
grows linearly with the corpus; fine for a few thousand chunks of platform
documentation, not for more.
"""

import asyncio
import json
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np
from pypdf import PdfReader

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.knowledge import KnowledgeChunk, SearchHit

CHUNK_SIZE = 1200       # characters per text chunk
CHUNK_OVERLAP = 200     # character overlap between consecutive chunks
EMBED_BATCH_SIZE = 64   # max texts per embedding request
TEXT_SUFFIXES = (".txt", ".md")

_UNSAFE_ID_CHARS = re.compile(r"[^\w\-.#]+")


def sanitize_id(doc_id: str) -> str:
    """Map an id to a file-safe name: every run of characters outside [A-Za-z0-9_-.#] becomes "_"."""
    return _UNSAFE_ID_CHARS.sub("_", str(doc_id))


def split_text(text: str, size: int = CHUNK_SIZE, overlap: int = CHUNK_OVERLAP) -> list[str]:
    """Split text into windows of ``size`` characters, each starting ``max(1, size - overlap)`` after the previous one.

    Args:
        text (str): The full text.
        size (int): Window size in characters.
        overlap (int): Characters shared by consecutive windows.

    Returns:
        list[str]: Ordered chunks; empty for empty text.
    """
    step = max(1, size - overlap)
    return [text[start:start + size] for start in range(0, len(text), step)]


def cosine_similarity(a: Any, b: Any) -> float:
    """dot(a, b) / (|a| * |b|). Zero vectors and vectors of different length score 0.0."""
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    if va.shape != vb.shape or va.size == 0:
        return 0.0
    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0
    return float(np.dot(va, vb) / norm)


class VectorStore:
    def __init__(self, helper_config: HelperConfig, embed_client: EmbedClientInterface, store_path: Path | None = None) -> None:
        self.logging = helper_config.get_logger()
        self._embed_client = embed_client
        self.store_path = Path(store_path) if store_path else helper_config.get_path_val("VECTOR_STORE_PATH", default="./data/vectors")

    ##########################################
    ################ SETUP ###################
    ##########################################

    async def do_initialize(self) -> None:
        await asyncio.to_thread(self.store_path.mkdir, parents=True, exist_ok=True)
        self.logging.info("Vector store initialised at %s", self.store_path)

    ##########################################
    ################ WRITE ###################
    ##########################################

    def _write_chunk(self, chunk: KnowledgeChunk) -> None:
        self.store_path.mkdir(parents=True, exist_ok=True)
        target = self.store_path / f"{sanitize_id(chunk.id)}.json"
        tmp = target.with_suffix(".json.tmp")
        tmp.write_text(chunk.model_dump_json(), encoding="utf-8")
        os.replace(tmp, target)

    async def _persist(self, doc_id: str, text: str, embedding: list[float], metadata: dict | None) -> KnowledgeChunk:
        chunk = KnowledgeChunk(
            id=doc_id,
            text=text,
            embedding=embedding,
            metadata=dict(metadata or {}),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        await asyncio.to_thread(self._write_chunk, chunk)
        return chunk

    async def do_add_document(self, doc_id: str, text: str, metadata: dict | None = None) -> KnowledgeChunk:
        """Embed a text and store it under ``doc_id``. Adding the same id again replaces the file.

        Raises:
            Exception: Embedding or file write failures propagate.
        """
        vectors = await self._embed_client.do_embed([text])
        chunk = await self._persist(doc_id, text, vectors[0], metadata)
        self.logging.debug("Stored knowledge chunk %s", doc_id)
        return chunk

    async def do_index_file(self, path: Path | str, metadata: dict | None = None) -> int:
        """Extract a document's text, chunk it and store every chunk as ``<filename>#<NNNN>``.

        Args:
            path (Path | str): A .pdf, .txt or .md file.
            metadata (dict | None): Merged into every chunk's metadata with ``filename`` and ``chunk``.

        Returns:
            int: Number of stored chunks (0 if the document has no text).

        Raises:
            ValueError: For unsupported file types.
        """
        path = Path(path)
        text = (await asyncio.to_thread(self._extract_text, path)).strip()
        if not text:
            self.logging.warning("No extractable text in %s, skipping.", path)
            return 0

        filename = path.name
        chunks = split_text(text)
        vectors: list[list[float]] = []
        for start in range(0, len(chunks), EMBED_BATCH_SIZE):
            vectors.extend(await self._embed_client.do_embed(chunks[start:start + EMBED_BATCH_SIZE]))

        for index, (chunk_text, vector) in enumerate(zip(chunks, vectors)):
            chunk_meta = {**(metadata or {}), "filename": filename, "chunk": index}
            await self._persist(f"{filename}#{index:04d}", chunk_text, vector, chunk_meta)

        self.logging.info("Indexed %s (%d chunks)", filename, len(chunks))
        return len(chunks)

    @staticmethod
    def _extract_text(path: Path) -> str:
        suffix = path.suffix.lower()
        if suffix == ".pdf":
            reader = PdfReader(str(path))
            return "\n".join(page.extract_text() or "" for page in reader.pages)
        if suffix in TEXT_SUFFIXES:
            return path.read_text(encoding="utf-8")
        raise ValueError(f"Unsupported document type '{suffix}' for {path.name}")

    ##########################################
    ################ READ ####################
    ##########################################

    def _load_all(self) -> list[KnowledgeChunk]:
        if not self.store_path.exists():
            return []
        chunks = []
        for file in sorted(self.store_path.glob("*.json")):
            try:
                chunks.append(KnowledgeChunk.model_validate_json(file.read_text(encoding="utf-8")))
            except ValueError as e:
                self.logging.warning("Skipping unreadable knowledge file %s: %s", file.name, e)
        return chunks

    async def do_search(self, query: str, limit: int = 5) -> list[SearchHit]:
        """Return the ``limit`` chunks most similar to ``query``, best first.

        Raises:
            Exception: Embedding failures propagate.
        """
        query_vector = (await self._embed_client.do_embed([query]))[0]
        chunks = await asyncio.to_thread(self._load_all)
        hits = [
            SearchHit(**chunk.model_dump(), similarity=cosine_similarity(query_vector, chunk.embedding))
            for chunk in chunks
        ]
        hits.sort(key=lambda hit: hit.similarity, reverse=True)
        return hits[:limit]

    async def do_count(self) -> int:
        return await asyncio.to_thread(lambda: len(list(self.store_path.glob("*.json"))) if self.store_path.exists() else 0)

    async def do_clear(self) -> int:
        """Delete every stored chunk (corpus rebuild).

        Returns:
            int: Number of deleted chunk files.
        """
        def _clear() -> int:
            if not self.store_path.exists():
                return 0
            files = list(self.store_path.glob("*.json"))
            for file in files:
                file.unlink()
            return len(files)

        removed = await asyncio.to_thread(_clear)
        self.logging.info("Vector store cleared (%d chunks removed).", removed)
        return removed

    def get_raw_record(self, doc_id: str) -> dict | None:
        """Read the stored JSON for an id, as written on disk."""
        target = self.store_path / f"{sanitize_id(doc_id)}.json"
        if not target.exists():
            return None
        return json.loads(target.read_text(encoding="utf-8"))
