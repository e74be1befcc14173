"""Slack user profile lookups."""

from pydantic import BaseModel
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from attendbot.utils.cache import RedisCache, get_cache
from attendbot.utils.logging import get_logger

logger = get_logger(__name__)

UNKNOWN_USER = "Unknown User"
USER_CACHE_PREFIX = "slack:user:"


class SlackUserProfile(BaseModel):
    """The profile fields stored alongside each attendance record."""

    user_name: str = UNKNOWN_USER
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None


class SlackUserDirectory:
    """Resolves Slack user IDs to profiles, caching results in Redis."""

    def __init__(self, client: AsyncWebClient, cache: RedisCache | None = None):
        self.client = client
        self.cache = cache or get_cache()

    async def lookup(self, user_id: str) -> SlackUserProfile:
        """Fetch a user's profile.

        Lookup failures degrade to an "Unknown User" profile instead of
        raising, so a message is never dropped for want of a name.
        """
        cache_key = f"{USER_CACHE_PREFIX}{user_id}"
        cached = await self.cache.get(cache_key)
        if cached:
            return SlackUserProfile.model_validate(cached)

        try:
            response = await self.client.users_info(user=user_id)
        except SlackApiError as e:
            logger.warning(
                "slack_user_lookup_failed", user_id=user_id, error=e.response.get("error")
            )
            return SlackUserProfile()
        except Exception as e:
            logger.warning("slack_user_lookup_error", user_id=user_id, error=str(e))
            return SlackUserProfile()

        user = response.get("user") or {}
        profile_data = user.get("profile") or {}

        profile = SlackUserProfile(
            user_name=(
                user.get("real_name")
                or profile_data.get("real_name")
                or user.get("name")
                or UNKNOWN_USER
            ),
            first_name=profile_data.get("first_name") or None,
            last_name=profile_data.get("last_name") or None,
            email=profile_data.get("email") or None,
        )

        await self.cache.set(cache_key, profile.model_dump())
        logger.debug("slack_user_resolved", user_id=user_id)
        return profile
