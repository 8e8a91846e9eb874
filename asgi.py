"""
asgi.py -- Application assembly for RecordGate.

Run with:  uvicorn asgi:app --reload
           python asgi.py          (binds HOST:PORT from settings)
"""

from api.main import app

if __name__ == "__main__":
    import uvicorn

    from core.config import get_settings

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
