import os

import uvicorn

from meeting_edge.core.config import settings


def main() -> None:
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        "meeting_edge.main:app",
        host=host,
        port=port,
        reload=settings.app.debug,
        log_config=None,
    )


if __name__ == "__main__":
    main()
