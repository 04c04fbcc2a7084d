from pathlib import Path
from dotenv import load_dotenv
import pytest

# Load environment variables for tests before settings are imported
load_dotenv(Path(__file__).resolve().parents[1] / '.env.test')

from servertiming.utils.server_timing import ServerTimer  # noqa: E402


@pytest.fixture
def timer():
    return ServerTimer()
