from icmp_prober import logger_main, setup_logger
import logging


def init_pkg_logger() -> logging.Logger:
    """
    Initialize the package logger named `logger_main` from the logger config file.

    Returns:
        logging.Logger: The logger for the package.

    Raises:
        SystemExit: If logger initialization fails due to configuration errors or unexpected exceptions.
    """
    try:
        return setup_logger(logger_main)

    except (FileNotFoundError, ValueError) as e:
        print(f"Failed to initialize logger: {str(e)}")
        raise SystemExit(1)

    except Exception as e:
        print(f"Unexpected error during logger initialization: {str(e)}")
        raise SystemExit(1)
