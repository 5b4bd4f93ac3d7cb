#!/usr/bin/env python3
"""
Start a diary node.

Role, port and peer come from the environment or .env, e.g.

    NODE_ROLE=secondary PORT=3001 PEER_URL=http://localhost:3000 python run.py
"""

import uvicorn

from privatediary.core.config import settings
from privatediary.main import create_app

app = create_app(settings)

if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
