import sys

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def _restore_log_sink():
    # The CLI rebinds loguru to the stream that is current when it runs,
    # which under capsys is closed once the test ends.
    yield
    logger.remove()
    logger.add(lambda message: sys.stderr.write(message), level="INFO")
