"""Knowledge base runner entry point.

Embeds the curated platform facts and every document in KNOWLEDGE_DOCS_PATH
into the flat-file vector store.

Usage:
    python -m services.knowledge.knowledge_runner [--rebuild]
"""

import argparse
import asyncio

from services.knowledge.KnowledgeLoader import KnowledgeLoader
from services.knowledge.VectorStore import VectorStore
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging


async def main(rebuild: bool = False) -> int:
    """Build the knowledge base. Returns the process exit code."""
    logger = setup_logging()
    config = HelperConfig(logger=logger)
    embed_client = EmbedClientManager(helper_config=config).get_client()

    try:
        # embeddings are required, without them there is nothing to store
        try:
            await embed_client.boot()
        except Exception as e:
            logger.error("Error booting Embed client %s: %s. Aborting.", embed_client.get_engine_name(), e)
            return 1

        loader = KnowledgeLoader(helper_config=config, vector_store=VectorStore(helper_config=config, embed_client=embed_client))
        result = await loader.do_load(rebuild=rebuild)
        return 1 if result["failed"] else 0
    finally:
        await embed_client.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Build the admin assistant knowledge base.")
    parser.add_argument("--rebuild", action="store_true", help="delete all stored chunks before loading")
    args = parser.parse_args()
    raise SystemExit(asyncio.run(main(rebuild=args.rebuild)))
