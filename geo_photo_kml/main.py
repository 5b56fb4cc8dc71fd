"""Main application module for geo photo KML."""

import logging
import signal
import sys

from .config import ConfigurationManager
from .constants import Constants
from .document import DocumentAssembler
from .exceptions import ConfigurationError, FileOperationError
from .types import RunStatus
from .utils import CancellationToken, LoggingSetup

STATUS_EXIT_CODES = {
    RunStatus.COMPLETED: Constants.ErrorCodes.SUCCESS,
    RunStatus.EMPTY: Constants.ErrorCodes.NO_FILES,
    RunStatus.ABORTED: Constants.ErrorCodes.ABORTED,
    RunStatus.FAILED: Constants.ErrorCodes.FILE_OPERATION_ERROR,
}


def install_interrupt_handler(token: CancellationToken, logger: logging.Logger) -> None:
    """Turn the first Ctrl-C into a cancellation request; a second one stops immediately."""

    def handler(signum, frame):
        if token.cancelled:
            raise KeyboardInterrupt
        logger.info("Interrupt received, stopping after the current photo")
        token.cancel()

    signal.signal(signal.SIGINT, handler)


def main(argv: list[str] | None = None) -> None:
    """Main execution function."""
    logger = LoggingSetup().setup_logging()

    try:
        config_manager = ConfigurationManager(logger)
        app_config = config_manager.parse_arguments_and_config(argv)

        if app_config.output.verbose:
            logging.getLogger().setLevel(logging.DEBUG)
            logger.setLevel(logging.DEBUG)

        token = CancellationToken()
        install_interrupt_handler(token, logger)

        result = DocumentAssembler(logger).run(app_config, token)
        print(result.summary)
        sys.exit(STATUS_EXIT_CODES[result.status])

    except KeyboardInterrupt:
        logger.info("Run interrupted by user")
        sys.exit(Constants.ErrorCodes.INTERRUPTED)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(Constants.ErrorCodes.CONFIGURATION_ERROR)
    except FileOperationError as e:
        logger.error(f"File operation error: {e}")
        sys.exit(Constants.ErrorCodes.FILE_OPERATION_ERROR)
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error(f"Unexpected error: {e}")
        sys.exit(Constants.ErrorCodes.GENERAL_ERROR)


if __name__ == "__main__":
    main()
