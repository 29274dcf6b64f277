import uvicorn

from bin_collector.core.config import HOST, LOG_LEVEL, PORT


if __name__ == "__main__":
    # uvicorn exits non-zero if the port cannot be bound
    uvicorn.run(
        "bin_collector.main:app",
        host=HOST,
        port=PORT,
        log_level=LOG_LEVEL.lower(),
        reload=False,
    )
