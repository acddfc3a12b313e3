import asyncio
import logging
from app.config import settings
from app.database.supabase_client import get_service_supabase
from app.modules.payments.subscription import SubscriptionService

logger = logging.getLogger(__name__)


async def check_and_expire_subscriptions():
    """Downgrade profiles whose paid period has ended."""
    try:
        result = SubscriptionService(get_service_supabase()).expire_subscriptions()
        if result.processed:
            logger.info(f"Subscription expiry: {result.message}")
        else:
            logger.debug("No expired subscriptions found")
        return result
    except Exception as e:
        logger.error(f"Error in subscription expiry check: {str(e)}")
        return None


async def subscription_expiry_loop():
    """Background task that periodically downgrades expired subscriptions"""
    while True:
        try:
            await check_and_expire_subscriptions()
        except Exception as e:
            logger.error(f"Error in subscription expiry loop: {str(e)}")

        await asyncio.sleep(settings.subscription_expiry_interval_sec)
