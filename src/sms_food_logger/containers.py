"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import ClientOptions, create_client

from sms_food_logger.adapters.ai_chat_client import HttpxAIChatClient
from sms_food_logger.adapters.memory_conversation_store import (
    InMemoryConversationStore,
)
from sms_food_logger.adapters.openai_chat_client import OpenAIChatClient
from sms_food_logger.adapters.redis_conversation_store import RedisConversationStore
from sms_food_logger.adapters.supabase_food_log_repository import (
    SupabaseFoodLogRepository,
)
from sms_food_logger.adapters.twilio_client import HttpxTwilioClient, SmsClient
from sms_food_logger.config import Settings, parse_phone_numbers
from sms_food_logger.services.conversations import (
    ConversationService,
    ConversationStore,
)
from sms_food_logger.services.food_log import FoodLogWriter
from sms_food_logger.services.gateway import SmsGateway
from sms_food_logger.services.nutrition import AIChatClient, NutritionExtractor

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    sms_client: SmsClient
    conversation_service: ConversationService
    nutrition_extractor: NutritionExtractor
    food_log_writer: FoodLogWriter
    gateway: SmsGateway
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url,
        resolved_settings.supabase_service_key,
        options=ClientOptions(
            postgrest_client_timeout=resolved_settings.storage_timeout_seconds
        ),
    )
    food_log_writer = FoodLogWriter(SupabaseFoodLogRepository(supabase_client))

    store: ConversationStore
    redis_store: RedisConversationStore | None = None
    if resolved_settings.redis_url:
        redis_store = RedisConversationStore.create(
            resolved_settings.redis_url,
            timeout_seconds=resolved_settings.storage_timeout_seconds,
        )
        store = redis_store
    else:
        _logger.warning("REDIS_URL not set; conversations are kept in memory")
        store = InMemoryConversationStore()
    conversation_service = ConversationService(
        store=store,
        ttl_seconds=resolved_settings.conversation_ttl_seconds,
        max_messages=resolved_settings.conversation_max_messages,
    )

    ai_client: HttpxAIChatClient | OpenAIChatClient
    if resolved_settings.ai_chat_base_url:
        ai_client = HttpxAIChatClient.create(
            resolved_settings.ai_chat_base_url,
            timeout_seconds=resolved_settings.ai_timeout_seconds,
        )
    else:
        ai_client = OpenAIChatClient.create(
            api_key=resolved_settings.openai_api_key or "",
            model=resolved_settings.openai_model,
            timeout_seconds=resolved_settings.ai_timeout_seconds,
        )
    chat_client: AIChatClient = ai_client
    nutrition_extractor = NutritionExtractor(
        client=chat_client, history_window=resolved_settings.history_window
    )

    sms_client = HttpxTwilioClient.create(
        account_sid=resolved_settings.twilio_account_sid,
        auth_token=resolved_settings.twilio_auth_token,
        from_number=resolved_settings.twilio_phone_number,
        timeout_seconds=resolved_settings.sms_timeout_seconds,
    )
    service_numbers = {resolved_settings.twilio_phone_number}
    service_numbers |= parse_phone_numbers(resolved_settings.ignored_sender_numbers)
    gateway = SmsGateway(
        conversation_service=conversation_service,
        extractor=nutrition_extractor,
        food_log_writer=food_log_writer,
        sms_client=sms_client,
        service_numbers=service_numbers,
        max_length=resolved_settings.sms_max_length,
    )

    async def close_resources() -> None:
        await sms_client.close()
        await ai_client.close()
        if redis_store is not None:
            await redis_store.close()

    return AppContainer(
        settings=resolved_settings,
        sms_client=sms_client,
        conversation_service=conversation_service,
        nutrition_extractor=nutrition_extractor,
        food_log_writer=food_log_writer,
        gateway=gateway,
        close_resources=close_resources,
    )
