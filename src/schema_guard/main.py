import uvicorn
from schema_guard.config import settings
from schema_guard.utils.logger import get_logger

logger = get_logger(__name__)

def start():
    """
    Main entry point to start the Schema Guard API server.
    Reads configuration from settings.py.
    """
    logger.info("=" * 50)
    logger.info(f"STARTING {settings.APP_NAME}")
    logger.info(f"Version: {settings.APP_VERSION}")
    logger.info(f"Environment: {'Development' if settings.DEBUG else 'Production'}")
    logger.info(f"Storage: {settings.STORAGE_BACKEND}, sample rows: {settings.SAMPLE_ROWS}")
    logger.info("=" * 50)

    try:
        uvicorn.run(
            "schema_guard.api.routes:app",
            host=settings.HOST,
            port=settings.PORT,
            reload=settings.DEBUG,
            log_level="info"
        )
    except KeyboardInterrupt:
        logger.info("Shutting down server...")
    except Exception as e:
        logger.error(f"Failed to start server: {str(e)}")
        raise

if __name__ == "__main__":
    start()
