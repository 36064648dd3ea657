"""Explicitly wired application services, shared by routes via app.state."""

from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Request

from dm_relay.adapters.discord.listener import ListenerManager
from dm_relay.adapters.discord.session import DiscordSessionFactory
from dm_relay.adapters.storage import create_storage
from dm_relay.adapters.web.feed import LiveFeed
from dm_relay.config import AppConfig
from dm_relay.domain.directory import DirectoryLookup
from dm_relay.domain.dispatch import MessageDispatcher, Sleeper
from dm_relay.domain.intake import CredentialIntake
from dm_relay.domain.models import CredentialSubmission
from dm_relay.domain.replies import ReplyIngestion
from dm_relay.ports.outbound import SessionFactory, StoragePort


@dataclass
class Services:
    config: AppConfig
    storage: StoragePort
    intake: CredentialIntake
    directory: DirectoryLookup
    dispatcher: MessageDispatcher
    ingestion: ReplyIngestion
    feed: LiveFeed
    listeners: ListenerManager


def build_services(
    config: AppConfig,
    storage: Optional[StoragePort] = None,
    sessions: Optional[SessionFactory] = None,
    sleep: Optional[Sleeper] = None,
    listener_factory: Optional[Callable] = None,
) -> Services:
    """Construct every component once and inject its collaborators."""
    if storage is None:
        storage = create_storage(config.database)
    if sessions is None:
        sessions = DiscordSessionFactory(login_timeout=config.discord.session_timeout_seconds)

    feed = LiveFeed()
    ingestion = ReplyIngestion(storage, feed)
    listeners = ListenerManager(ingestion, listener_factory)

    on_submit = None
    if config.discord.listen_on_submit:
        async def on_submit(submission: CredentialSubmission):
            await listeners.start(submission.token.strip())

    return Services(
        config=config,
        storage=storage,
        intake=CredentialIntake(storage, on_submit=on_submit),
        directory=DirectoryLookup(sessions),
        dispatcher=MessageDispatcher(sessions, sleep=sleep, max_delay_ms=config.max_bulk_delay_ms),
        ingestion=ingestion,
        feed=feed,
        listeners=listeners,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
