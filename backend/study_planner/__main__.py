"""Run the API with uvicorn: `python -m study_planner`."""

import uvicorn

from .config import settings


def run():
    uvicorn.run(
        "study_planner.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
