"""API route handlers."""

from .feed import router as feed_router
from .unlocks import router as unlocks_router
from .quota import router as quota_router
from .applications import router as applications_router
from .credits import router as credits_router
