"""HTTP listener for Wekan outgoing webhooks."""

import logging

from fastapi import BackgroundTasks, FastAPI, Request
from pydantic import ValidationError

from .dispatcher import Dispatcher
from .events import KNOWN_EVENTS, HookMessage, is_handled

logger = logging.getLogger("wekan_hooks.server")


def process_message(dispatcher: Dispatcher, message: HookMessage) -> None:
    """
    Dispatch one decoded delivery.

    Errors are logged, never raised: the delivery was already acknowledged
    and Wekan does not resend it.
    """
    event = message.to_event()
    if not is_handled(event.kind):
        if event.kind not in KNOWN_EVENTS:
            logger.debug(f"Ignoring unknown event kind: {event.kind!r}")
        else:
            logger.debug(f"Ignoring event kind: {event.kind}")
        return
    if not event.card_id:
        logger.warning(f"Ignoring {event.kind} without cardId")
        return

    logger.info(f"Signal received: {event.kind} for card {event.card_id}")
    try:
        report = dispatcher.dispatch(event.kind, event.card_id)
    except Exception:
        logger.exception(f"Error processing {event.kind} for card {event.card_id}")
        return
    logger.debug(f"Processed {event.kind} for card {event.card_id}: {len(report.applied)} applied")


def create_app(dispatcher: Dispatcher) -> FastAPI:
    """Build the FastAPI app that feeds webhook deliveries to the dispatcher."""
    app = FastAPI(title="wekan-hooks", docs_url=None, redoc_url=None)
    app.state.dispatcher = dispatcher

    async def receive(request: Request, background_tasks: BackgroundTasks) -> dict:
        body = await request.body()
        try:
            message = HookMessage.model_validate_json(body)
        except ValidationError as e:
            logger.warning(f"Could not decode webhook body: {e}")
            return {"status": "ok"}
        logger.debug(f"Webhook received: {message.model_dump(by_alias=True)}")
        # Runs after the response is sent, in the threadpool
        background_tasks.add_task(process_message, dispatcher, message)
        return {"status": "ok"}

    app.add_api_route("/", receive, methods=["POST"])
    app.add_api_route("/webhook", receive, methods=["POST"])

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app
