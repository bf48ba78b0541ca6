import uvicorn

from core.config import settings
from core.logger import LOGGING

if __name__ == '__main__':
    uvicorn.run(
        'core.app:app',
        host=settings.host,
        port=settings.app_port,
        log_config=LOGGING,
        timeout_graceful_shutdown=settings.shutdown_timeout,
    )
