from slowapi import Limiter
from slowapi.util import get_remote_address

from ..settings import settings

# Per-IP; shared by the app and the routers that decorate endpoints with it
limiter = Limiter(key_func=get_remote_address)

AI_RATE_LIMIT = settings.rate_limit_ai
