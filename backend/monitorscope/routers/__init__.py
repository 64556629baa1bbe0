"""API routers."""
from .checks import router as checks_router
from .alerts import router as alerts_router
from .status import router as status_router
from .email_config import router as email_config_router

__all__ = ["checks_router", "alerts_router", "status_router", "email_config_router"]
