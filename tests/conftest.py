import shutil
import tempfile

import pytest


@pytest.fixture
def tmp_dir():
    d = tempfile.mkdtemp(prefix="ipass-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)
