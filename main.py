import uvicorn

from panelkit.config import settings
from panelkit.engine import create_app
from panelkit.middleware.logging import setup_structured_logging

setup_structured_logging(log_level=settings.log_level, json_format=settings.log_json)

app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
