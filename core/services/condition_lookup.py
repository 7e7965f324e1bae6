"""
Condition lookup against the static reference dataset.

The dataset is fetched fresh on every lookup, either over HTTP with httpx or
from a local file read off the event loop. `ConditionSearch` is the interaction
boundary: it turns failures into outcomes and drops responses that arrive after
a newer search was issued.
"""

import asyncio
from enum import Enum
from pathlib import Path

import httpx
import structlog
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from core.domain.errors import LoadError, NotFoundError
from core.domain.models import ConditionDataset, ConditionReference

logger = structlog.get_logger(__name__)

PROMPT_MESSAGE = "Type a condition and click Search"
NOT_FOUND_MESSAGE = "Condition not found."
LOAD_ERROR_MESSAGE = "Error loading data"


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


class ConditionLookup:
    """Exact, case-insensitive lookup of one condition by name."""

    def __init__(
        self,
        source: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.source = source
        self.timeout_seconds = timeout_seconds
        self.transport = transport
        self.logger = logger.bind(component="condition_lookup", source=source)

    async def _read_source(self) -> bytes:
        if _is_url(self.source):
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self.transport
            ) as client:
                response = await client.get(self.source)
                response.raise_for_status()
                return response.content
        return await asyncio.wait_for(
            asyncio.to_thread(Path(self.source).read_bytes), timeout=self.timeout_seconds
        )

    async def fetch_dataset(self) -> ConditionDataset:
        """
        Load and parse the reference document.

        Raises:
            LoadError: on transport, HTTP status, timeout, JSON or shape failures.
        """
        try:
            raw = await self._read_source()
            return ConditionDataset.model_validate_json(raw)
        except (
            httpx.HTTPError,
            httpx.InvalidURL,
            OSError,
            TimeoutError,
            PydanticValidationError,
        ) as e:
            raise LoadError(f"could not load condition data from {self.source}: {e}") from e

    async def lookup(self, query: str) -> ConditionReference:
        """
        Find the entry whose name equals `query`, ignoring case.

        Raises:
            NotFoundError: no entry matches.
            LoadError: the dataset could not be loaded.
        """
        needle = query.strip().casefold()
        dataset = await self.fetch_dataset()
        for condition in dataset.conditions:
            if condition.name.casefold() == needle:
                return condition
        raise NotFoundError(query, kind="condition")


class LookupStatus(str, Enum):
    PROMPT = "prompt"
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


class LookupOutcome(BaseModel):
    """What the result panel should show for one search."""

    model_config = ConfigDict(frozen=True)

    status: LookupStatus
    query: str
    token: int
    message: str = ""
    condition: ConditionReference | None = None
    stale: bool = False


class ConditionSearch:
    """
    Issues lookups and keeps the outcome of the latest one.

    Every search takes a new, increasing token. An outcome is only stored in
    `latest` when its token is still the newest issued, so a slow earlier
    response can never overwrite a later one.
    """

    def __init__(self, lookup: ConditionLookup) -> None:
        self.lookup = lookup
        self.latest: LookupOutcome | None = None
        self._generation = 0
        self.logger = logger.bind(component="condition_search")

    @property
    def generation(self) -> int:
        return self._generation

    async def search(self, query: str) -> LookupOutcome:
        self._generation += 1
        token = self._generation

        if not query.strip():
            return self._apply(
                LookupOutcome(
                    status=LookupStatus.PROMPT, query=query, token=token, message=PROMPT_MESSAGE
                )
            )

        try:
            condition = await self.lookup.lookup(query)
        except NotFoundError:
            outcome = LookupOutcome(
                status=LookupStatus.NOT_FOUND, query=query, token=token, message=NOT_FOUND_MESSAGE
            )
        except LoadError:
            self.logger.exception("lookup_load_failed", query=query)
            outcome = LookupOutcome(
                status=LookupStatus.ERROR, query=query, token=token, message=LOAD_ERROR_MESSAGE
            )
        else:
            outcome = LookupOutcome(
                status=LookupStatus.FOUND, query=query, token=token, condition=condition
            )
        return self._apply(outcome)

    def _apply(self, outcome: LookupOutcome) -> LookupOutcome:
        if outcome.token != self._generation:
            self.logger.info(
                "lookup_response_discarded", token=outcome.token, latest=self._generation
            )
            return outcome.model_copy(update={"stale": True})
        self.latest = outcome
        return outcome
