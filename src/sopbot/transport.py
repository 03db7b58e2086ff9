"""Slack transport: event handlers, reply rendering, and the App Home view.

Everything Slack-specific lives here. Handlers clean the raw message text,
post an acknowledgement in the thread, run ``handlers.ask`` and post the
rendered reply in the same thread.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import structlog
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp

import sopbot.handlers.ask as h_ask
from sopbot.errors import SopBotError
from sopbot.models.answer import AnswerOutcome

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from slack_sdk.web.async_client import AsyncWebClient

    from sopbot.config import Settings
    from sopbot.state import AppState

    Say = Callable[..., Awaitable[Any]]

log = structlog.get_logger()

_MENTION_RE = re.compile(r"<@[A-Z0-9]+>")

DM_ACK_TEXT = "Searching the SOPs... :mag:"
MENTION_ACK_TEXT = "Let me check the SOPs for you... :mag:"
DM_ERROR_CLOSING = "Please try again or contact support."
MENTION_ERROR_CLOSING = "Please try again."


def clean_question(text: str | None) -> str:
    """Strip user mention markup (``<@U123ABC>``) and surrounding whitespace."""
    if not text:
        return ""
    return _MENTION_RE.sub("", text).strip()


def greeting_text(settings: Settings) -> str:
    return (
        f"Hi! I'm the {settings.assistant.name}. "
        "Ask me anything about our standard operating procedures! :book:"
    )


def no_content_text(settings: Settings) -> str:
    return (
        "I don't have access to any SOP pages yet. Please make sure to add the "
        f"'{settings.assistant.integration_name}' integration to your Notion pages."
    )


def error_text(cause: str, *, suggestion: str = "", closing: str = DM_ERROR_CLOSING) -> str:
    parts = [f"Sorry, I encountered an error: {cause}.", suggestion, closing]
    return " ".join(part for part in parts if part)


async def reply_for(
    question: str, state: AppState, *, error_closing: str = DM_ERROR_CLOSING
) -> str:
    """Answer ``question`` and render the outcome as Slack message text.

    Never raises: every failure becomes a short apology naming its cause.
    """
    try:
        answer = await h_ask.handle(question, state)
    except SopBotError as exc:
        log.warning(
            "question_error",
            code=exc.code,
            message=exc.message,
            recoverable=exc.recoverable,
        )
        return error_text(exc.message, suggestion=exc.suggestion, closing=error_closing)
    except Exception as exc:
        log.error("question_unexpected_error", exc_info=True)
        return error_text(str(exc) or type(exc).__name__, closing=error_closing)

    if answer.outcome == AnswerOutcome.NO_CONTENT:
        return no_content_text(state.settings)
    return answer.text


async def respond(
    question: str,
    *,
    thread_ts: str | None,
    say: Say,
    state: AppState,
    ack_text: str,
    error_closing: str = DM_ERROR_CLOSING,
) -> None:
    """Acknowledge in thread, then post the answer in the same thread."""
    if not question:
        await say(text=greeting_text(state.settings), thread_ts=thread_ts)
        return

    await say(text=ack_text, thread_ts=thread_ts)
    text = await reply_for(question, state, error_closing=error_closing)
    await say(text=text, thread_ts=thread_ts)


def is_direct_question(event: dict[str, Any]) -> bool:
    """True for user-authored messages in a DM with the bot."""
    if event.get("bot_id") or event.get("subtype"):
        return False
    return event.get("channel_type") == "im"


def home_view(settings: Settings) -> dict[str, Any]:
    """Static App Home tab explaining how to use the assistant."""
    name = settings.assistant.name
    usage = (
        f"I'm here to help you find information in {settings.assistant.organisation}'s "
        "Standard Operating Procedures.\n\n"
        "*How to use me:*\n\n"
        "1. *Direct Message:* Send me a message directly to ask questions\n"
        f"2. *Channel Mention:* Tag me with @{name} in any channel\n\n"
        "*Example questions:*\n"
        "- What's the check-in process?\n"
        "- How do I handle a guest complaint?\n"
        "- What are the cleaning procedures?\n"
        "- How do I report a maintenance issue?"
    )
    return {
        "type": "home",
        "blocks": [
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": f"*Welcome to the {name}!* :wave:"},
            },
            {"type": "divider"},
            {"type": "section", "text": {"type": "mrkdwn", "text": usage}},
            {"type": "divider"},
            {
                "type": "context",
                "elements": [
                    {
                        "type": "mrkdwn",
                        "text": (
                            ":bulb: The SOPs are automatically synced from Notion, "
                            "so I always have the latest information!"
                        ),
                    }
                ],
            },
        ],
    }


def build_slack_app(state: AppState) -> AsyncApp:
    """Create the Bolt app and register event listeners bound to ``state``."""
    app = AsyncApp(token=state.settings.slack.bot_token)

    @app.event("message")
    async def on_message(event: dict[str, Any], say: Say) -> None:
        if not is_direct_question(event):
            return
        log.info("question_received", source="dm", channel=event.get("channel"))
        await respond(
            clean_question(event.get("text")),
            thread_ts=event.get("ts"),
            say=say,
            state=state,
            ack_text=DM_ACK_TEXT,
            error_closing=DM_ERROR_CLOSING,
        )

    @app.event("app_mention")
    async def on_mention(event: dict[str, Any], say: Say) -> None:
        log.info("question_received", source="mention", channel=event.get("channel"))
        await respond(
            clean_question(event.get("text")),
            thread_ts=event.get("ts"),
            say=say,
            state=state,
            ack_text=MENTION_ACK_TEXT,
            error_closing=MENTION_ERROR_CLOSING,
        )

    @app.event("app_home_opened")
    async def on_home_opened(event: dict[str, Any], client: AsyncWebClient) -> None:
        await publish_home(client, event.get("user", ""), state.settings)

    return app


async def publish_home(client: AsyncWebClient, user_id: str, settings: Settings) -> None:
    """Publish the App Home view. Failures are logged, never raised."""
    try:
        await client.views_publish(user_id=user_id, view=home_view(settings))
    except Exception:
        log.warning("home_publish_failed", user=user_id, exc_info=True)


def build_socket_mode_handler(app: AsyncApp, settings: Settings) -> AsyncSocketModeHandler:
    return AsyncSocketModeHandler(app, settings.slack.app_token)
