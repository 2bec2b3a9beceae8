import json

from pydantic import BaseModel, ConfigDict, Field, field_validator

from services.discovery.intelligent.IntelligentSearchStrategy import IntelligentSearchStrategy
from services.discovery.intelligent.prompts import DIRECT_MATCH_SYSTEM_PROMPT, DIRECT_MATCH_USER_PROMPT
from shared.models.document import DocumentProjection


class DirectMatchOutput(BaseModel):
    """Reply expected from the oracle: matching ids, most relevant first."""

    model_config = ConfigDict(populate_by_name=True)

    document_ids: list[str] = Field(alias="documentIds")

    @field_validator("document_ids", mode="before")
    @classmethod
    def _ids_as_strings(cls, value):
        # some models answer numeric-looking ids as numbers
        if isinstance(value, list):
            return [str(v) for v in value if isinstance(v, (str, int))]
        return value


class DirectMatchStrategy(IntelligentSearchStrategy):
    """Sends the query together with the document projections and lets the oracle pick the matches."""

    def _get_strategy_name(self) -> str:
        return "DirectMatch"

    async def do_search(self, query: str, documents: list[DocumentProjection]) -> list[str]:
        """Ask the oracle which of the given documents match the query.

        An empty collection returns [] without contacting the oracle. The
        oracle's relevance order is kept; ids not in the collection and
        repeated ids are dropped.
        """
        if not documents:
            self.logging.debug("DirectMatch: empty collection, skipping oracle call.")
            return []

        self.logging.info("DirectMatch: query=%r over %d document(s).", query[:80], len(documents))
        payload = json.dumps([doc.model_dump() for doc in documents], ensure_ascii=False)
        messages = [
            {"role": "system", "content": DIRECT_MATCH_SYSTEM_PROMPT},
            {"role": "user", "content": DIRECT_MATCH_USER_PROMPT.format(query=query, documents=payload)},
        ]
        output = await self._do_oracle_call(messages, DirectMatchOutput)

        known_ids = {doc.id for doc in documents}
        result: list[str] = []
        for document_id in output.document_ids:
            if document_id not in known_ids:
                self.logging.debug("DirectMatch: ignoring unknown document id %r from oracle.", document_id)
                continue
            if document_id not in result:
                result.append(document_id)

        self.logging.info("DirectMatch: oracle returned %d matching document(s).", len(result))
        return result
