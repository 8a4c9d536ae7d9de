"""Twilio WhatsApp webhook.

Extracts red bag codes from direct messages and hands them to the claim
orchestrator in the background; handled messages get an empty TwiML reply.
"""

import re
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Form, Request
from fastapi.responses import Response
from structlog import get_logger

from redbag_claimer.api.routes.helpers import get_orchestrator_from_request
from redbag_claimer.claims.models import ClaimOutcome
from redbag_claimer.claims.orchestrator import ClaimOrchestrator
from redbag_claimer.constants import CODE_PATTERN


logger = get_logger(__name__)

router = APIRouter(tags=["webhook"])

CODE_REGEX = re.compile(CODE_PATTERN)
GROUP_SENDER_MARKER = "@g.us"
EMPTY_TWIML = '<?xml version="1.0" encoding="UTF-8"?><Response></Response>'


def extract_code(message_body: str | None) -> str | None:
    """Return the red bag code if the whole message is one, else None."""
    if not message_body:
        return None
    candidate = message_body.strip()
    return candidate if CODE_REGEX.fullmatch(candidate) else None


def format_claim_reply(code: str, outcome: ClaimOutcome) -> str:
    """Format a claim outcome as a user-facing reply line."""
    if outcome.succeeded and outcome.claimed_by is not None:
        return f"Bag {code} claimed by Cred {outcome.claimed_by.id}! {outcome.message}"
    return f"Error claiming {code}: {outcome.message}"


async def run_claim(orchestrator: ClaimOrchestrator, code: str, sender: str) -> None:
    """Claim a code and report the outcome."""
    outcome = await orchestrator.claim_code(code)
    logger.info(
        "claim_reported",
        code=code,
        to=sender,
        reply=format_claim_reply(code, outcome),
        **outcome.to_dict(),
    )


def twiml_response() -> Response:
    return Response(content=EMPTY_TWIML, media_type="text/xml")


@router.post("/whatsapp")
async def whatsapp_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    body: Annotated[str, Form(alias="Body")] = "",
    sender: Annotated[str, Form(alias="From")] = "",
    recipient: Annotated[str, Form(alias="To")] = "",
) -> Response:
    """Receive an inbound WhatsApp message from Twilio."""
    logger.info("webhook_message_received", sender=sender, to=recipient, body=body)

    if GROUP_SENDER_MARKER in sender:
        logger.info("webhook_group_message_ignored", sender=sender)
        return twiml_response()

    code = extract_code(body)
    if code is None:
        logger.info("webhook_no_code", sender=sender)
        return twiml_response()

    logger.info("webhook_code_detected", code=code, sender=sender)
    orchestrator = get_orchestrator_from_request(request)
    background_tasks.add_task(run_claim, orchestrator, code, sender)
    return twiml_response()
