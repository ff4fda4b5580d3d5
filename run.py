"""
Development server for the GitHub App.

Usage:
    python run.py

Reads HOST, PORT and DEBUG from the environment or .env. DEBUG=true switches
uvicorn to debug logging and enables auto-reload.

GitHub needs a public URL for webhook deliveries; tunnel PORT (for example
with smee.io or ngrok) and point the App's webhook at <tunnel>/webhooks.
"""

import uvicorn
from app.config import get_settings


def main():
    settings = get_settings()
    log_level = "debug" if settings.debug else "info"

    print(f"Starting {settings.app_name} on {settings.host}:{settings.port} ({log_level})")
    print(f"Scope: {settings.allowed_org}/{settings.allowed_repo}")
    if not settings.webhook_secret:
        print("WEBHOOK_SECRET is not set: webhook signatures will not be verified")

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=log_level,
    )


if __name__ == "__main__":
    main()
