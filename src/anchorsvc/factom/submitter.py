"""Two-phase commit/reveal submission of anchor records to the intermediary ledger."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import httpx
from loguru import logger
from nacl.signing import SigningKey
from pydantic import ValidationError

from anchorsvc.errors import ResponseParseError, ServerRejection, TransportError
from anchorsvc.factom.compose import JSON2Request, JSON2Response, compose_entry_commit, compose_entry_reveal
from anchorsvc.factom.entry import new_entry
from anchorsvc.factom.keys import ECAddress
from anchorsvc.record import AnchorRecord

UNAUTHORIZED_HINT = (
    "factomd username/password incorrect. Edit factomd.conf or "
    "call factom-cli with -factomduser=<user> -factomdpassword=<pass>"
)


@dataclass
class PhaseOutcome:
    """HTTP outcome of one phase."""

    phase: str
    status_code: int
    response: JSON2Response | None = None

    @property
    def accepted(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass
class SubmitResult:
    entry_hash: str
    phases: list[PhaseOutcome] = field(default_factory=list)


def parse_response(body: bytes) -> JSON2Response:
    try:
        return JSON2Response.model_validate_json(body)
    except ValidationError as exc:
        raise ResponseParseError(str(exc)) from exc


class EntrySubmitter:
    """Land signed anchor records on the anchor chain through ``/v2``.

    The commit and the reveal reference the same :class:`Entry` instance;
    the ledger rejects a reveal whose bytes differ from the paid commit.
    """

    def __init__(
        self,
        server: str,
        ec_address: ECAddress,
        sig_key: SigningKey,
        chain_id: str,
        *,
        client: httpx.AsyncClient | None = None,
        settle_seconds: float = 2.0,
        timeout_seconds: float = 30.0,
    ) -> None:
        self.server = server
        self.chain_id = chain_id
        self.settle_seconds = settle_seconds
        self._ec_address = ec_address
        self._sig_key = sig_key
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    @property
    def endpoint(self) -> str:
        return f"http://{self.server}/v2"

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def submit(self, record: AnchorRecord) -> SubmitResult:
        """Sign ``record``, commit its entry, wait, then reveal the same entry.

        Raises :class:`SigningError` or :class:`ProtocolCompositionError` before
        anything is sent, :class:`TransportError` as soon as a request fails, and
        :class:`ServerRejection` after the reveal when either phase got a non-2xx
        status.
        """

        raw, signature = record.marshal_and_sign_v2(self._sig_key)
        entry = new_entry(self.chain_id, signature, raw)
        result = SubmitResult(entry_hash=entry.hash().hex())

        commit = compose_entry_commit(entry, self._ec_address)
        result.phases.append(await self._post("commit", commit))
        await asyncio.sleep(self.settle_seconds)

        reveal = compose_entry_reveal(entry)
        result.phases.append(await self._post("reveal", reveal))

        rejected = {outcome.phase: outcome.status_code for outcome in result.phases if not outcome.accepted}
        if rejected:
            raise ServerRejection(f"entry {result.entry_hash} rejected by {self.server}: {rejected}", statuses=rejected)
        logger.info("anchor.entry.submitted entry_hash={} db_height={}", result.entry_hash, record.db_height)
        return result

    async def _post(self, phase: str, request: JSON2Request) -> PhaseOutcome:
        body = request.encode()
        logger.info("anchor.{} body={}", phase, body.decode("utf-8"))
        try:
            resp = await self._client.post(
                self.endpoint,
                content=body,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            logger.error("anchor.{}.transport_error url={} error={}", phase, self.endpoint, exc)
            raise TransportError(f"{phase} request to {self.endpoint} failed: {exc}") from exc

        outcome = PhaseOutcome(phase=phase, status_code=resp.status_code)
        if resp.status_code == httpx.codes.UNAUTHORIZED:
            logger.error("anchor.{}.unauthorized {}", phase, UNAUTHORIZED_HINT)
        elif not outcome.accepted:
            logger.error("anchor.{}.rejected status={} body={}", phase, resp.status_code, resp.text)

        try:
            outcome.response = parse_response(resp.content)
        except ResponseParseError as exc:
            logger.error("anchor.{}.parse_error error={}", phase, exc)
            return outcome
        if outcome.response.error is not None:
            error = outcome.response.error
            logger.warning("anchor.{}.rpc_error code={} message={}", phase, error.code, error.message)
        logger.debug("anchor.{}.response result={}", phase, outcome.response.result)
        return outcome
