from __future__ import annotations

import uvicorn

from dhp.api import create_app
from dhp.logging_config import configure_logging
from dhp.settings import settings

configure_logging(settings.log_level, settings.log_json)

app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
