"""Retrieval augmented answers: vector search for grounding, then one LLM call."""

import re

from services.knowledge.VectorStore import VectorStore
from services.knowledge.personas import PERSONAS
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig

MIN_SIMILARITY = 0.55
DEFAULT_CONTEXT_LIMIT = 6

# (trigger, expansion) pairs, matched case-insensitively on word boundaries
SYNONYM_GROUPS: list[tuple[str, str]] = [
    (r"registration fees?", "service fee fees price prices cost costs"),
    (r"service fees?", "service fee fees price prices cost costs"),
    (r"prices?", "price prices cost costs fee fees"),
    (r"costs?", "cost costs price prices fee fees"),
]

_SYNONYM_PATTERN = re.compile(
    r"\b(?:" + "|".join(f"(?P<g{i}>{trigger})" for i, (trigger, _) in enumerate(SYNONYM_GROUPS)) + r")\b",
    re.IGNORECASE,
)


class RetrievalService:
    def __init__(self, helper_config: HelperConfig, vector_store: VectorStore, llm_client: LLMClientInterface) -> None:
        self.logging = helper_config.get_logger()
        self._vector_store = vector_store
        self._llm_client = llm_client
        self.min_similarity = helper_config.get_number_val("RAG_MIN_SIMILARITY", default=MIN_SIMILARITY)

    ##########################################
    ################ QUERY ###################
    ##########################################

    @staticmethod
    def normalize_query(query: str) -> str:
        """Expand price/fee phrasing so paraphrases hit the same chunks.

        A single left-to-right pass: every group expands at most once and
        inserted words are never expanded again.
        """
        used: set[str] = set()

        def _expand(match: re.Match) -> str:
            group = match.lastgroup
            if group in used:
                return match.group(0)
            used.add(group)
            return SYNONYM_GROUPS[int(group[1:])][1]

        return _SYNONYM_PATTERN.sub(_expand, str(query or ""))

    async def do_get_relevant_context(self, query: str, limit: int = DEFAULT_CONTEXT_LIMIT) -> str:
        """Join the texts of all hits scoring at least MIN_SIMILARITY with blank lines.

        A failing search is logged and yields "" so callers still get an (ungrounded) answer.
        """
        normalized = self.normalize_query(query)
        try:
            hits = await self._vector_store.do_search(normalized, limit=limit)
        except Exception as e:
            self.logging.error("Context retrieval failed for %r: %s", query[:80], e)
            return ""

        relevant = [hit for hit in hits if hit.similarity >= self.min_similarity]
        self.logging.info(
            "Retrieved context for %r: %d hits, %d relevant", query[:80], len(hits), len(relevant)
        )
        return "\n\n".join(hit.text for hit in relevant)

    ##########################################
    ################ PROMPT ##################
    ##########################################

    @staticmethod
    def build_system_prompt(persona: str, context: str, user_context: dict | None = None) -> str:
        if persona not in PERSONAS:
            raise ValueError(f"Unknown persona '{persona}'")
        prompt = PERSONAS[persona]
        if context:
            prompt += f"\n\nRELEVANT INFORMATION:\n{context}\n"
        user_context = user_context or {}
        if user_context.get("profile_completion") is not None:
            prompt += f"\nUSER STATUS:\n- Profile completion: {user_context['profile_completion']}%\n"
            if user_context.get("missing_fields"):
                prompt += f"- Missing fields: {', '.join(user_context['missing_fields'])}\n"
        return prompt

    @staticmethod
    def _history_to_messages(history: list[dict] | None) -> list[dict]:
        messages = []
        for item in history or []:
            if "role" in item:
                messages.append({"role": item["role"], "content": item.get("content", "")})
            else:
                role = "assistant" if item.get("sender") == "assistant" else "user"
                messages.append({"role": role, "content": item.get("message", "")})
        return messages

    ##########################################
    ################ ANSWER ##################
    ##########################################

    async def do_generate_contextual_response(
        self,
        user_message: str,
        history: list[dict] | None = None,
        user_context: dict | None = None,
        persona: str = "admin",
    ) -> str:
        """Answer a message grounded in the knowledge store.

        Args:
            user_message (str): The new message.
            history (list[dict] | None): Earlier turns, either {"role", "content"} or stored {"sender", "message"}.
            user_context (dict | None): Optional {"profile_completion", "missing_fields"}.
            persona (str): "admin" or "job_seeker".

        Returns:
            str: The assistant reply.

        Raises:
            Exception: LLM failures propagate.
        """
        context = await self.do_get_relevant_context(user_message)
        messages = [{"role": "system", "content": self.build_system_prompt(persona, context, user_context)}]
        messages.extend(self._history_to_messages(history))
        messages.append({"role": "user", "content": user_message})

        reply = await self._llm_client.do_chat(messages)
        self.logging.info("Contextual response generated (persona=%s, grounded=%s).", persona, bool(context))
        return reply
