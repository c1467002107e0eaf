from __future__ import annotations

from typing import Iterator

import pytest

from mockvm.harness import MockVM
from mockvm.runtime.host_api import HostApi
from mockvm.runtime.session import Session, open_session


@pytest.fixture
def session() -> Iterator[Session]:
    """A fresh simulation session, reset on teardown."""
    with open_session(session_id="test") as sess:
        yield sess


@pytest.fixture
def host(session: Session) -> HostApi:
    return HostApi(session)


@pytest.fixture
def vm(host: HostApi) -> MockVM:
    return MockVM(host)
