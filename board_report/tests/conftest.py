import pytest

from board_report.clients.monday import MondayClient
from board_report.clients.retry_handler import RetryStrategy
from board_report.utils.config import BoardConfig, ColumnAliases, Settings

from .fakes import FakeMonday, SleepRecorder

TYPE_COL = "status6"
EUR_COL = "formula_mkmp4x00"
DATE_COL = "date8"


@pytest.fixture()
def fake() -> FakeMonday:
    return FakeMonday()


@pytest.fixture()
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture()
def client(fake: FakeMonday, sleeper: SleepRecorder) -> MondayClient:
    return MondayClient(
        api_key="test-key",
        retry_strategy=RetryStrategy(max_retries=5),
        transport=fake.transport(),
        sleep=sleeper,
    )


@pytest.fixture()
def columns() -> ColumnAliases:
    return ColumnAliases(type=TYPE_COL, sum_eur=EUR_COL, installation_date=DATE_COL)


@pytest.fixture()
def board_config(columns: ColumnAliases) -> BoardConfig:
    return BoardConfig(
        board_id=111,
        group_ids=("group_a", "group_b"),
        columns=columns,
    )


@pytest.fixture()
def settings() -> Settings:
    return Settings(monday_api_key="test-key", client_secret=None, monday_max_retries=5)
