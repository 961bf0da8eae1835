import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request, Response, status
from pydantic import ValidationError

from dashbot.error_handler import AuthorizationError
from dashbot.integrations.contracts.slack import EventCallback, InteractionPayload

logger = logging.getLogger(__name__)

router = APIRouter()


def _runtime(request: Request):
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Bot is not initialized")
    return runtime


@router.post("/", tags=["Slack"])
@router.post("/events", tags=["Slack"])
async def slack_events(request: Request):
    """
    Slack Events API receiver.
    - Handles URL verification challenge.
    - Runs `<@bot> find <query>` commands from message events.
    """
    try:
        payload: Dict[str, Any] = await request.json()
        callback = EventCallback.model_validate(payload)
    except (ValueError, ValidationError) as e:
        logger.error("Error decoding Slack event: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed event payload")

    if callback.type == "url_verification":
        return {"challenge": callback.challenge}

    if callback.type != "event_callback":
        return {"ok": True, "ignored": True}

    runtime = _runtime(request)
    try:
        return await runtime.handle_event(callback)
    except AuthorizationError:
        raise
    except Exception as e:
        logger.error(f"Error handling Slack event: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.post("/interaction", tags=["Slack"])
async def slack_interaction(request: Request):
    """
    Slack interactive message receiver (select menu / cancel button).

    Answers with an empty 200: any JSON body would replace the original
    message in Slack. Progress is reported through the response_url instead.
    """
    form = await request.form()
    raw = form.get("payload")
    if not raw:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing payload")
    try:
        interaction = InteractionPayload.model_validate_json(raw)
    except ValidationError as e:
        logger.error("Error decoding Slack interaction: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed interaction payload")

    runtime = _runtime(request)
    try:
        result = await runtime.handle_interaction(interaction)
    except AuthorizationError:
        raise
    except Exception as e:
        logger.error(f"Error handling Slack interaction: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    logger.debug("Interaction handled: %s", result)
    return Response(status_code=status.HTTP_200_OK)
