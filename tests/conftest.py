"""Shared fixtures: a small activity feed and an in-memory feed client."""

import os

os.environ.setdefault("LOG_TO_FILE", "false")

import pytest

from models.activity_models import ChartView, DashboardMode

HEADER = (
    "Emp ID,Employee,Manager,Zone,City,Cluster Head,Pipeline,Activity Date,"
    "Status,HiPo,Remarks,Timestamp,Type,Date"
)

SAMPLE_ROWS = [
    "E1,rahul sharma,ANITA DESAI,north,delhi,Vikram Singh,P1,01-10-2025,Won,,x,9:40 AM,RV,01-Oct-2025",
    "E2,Priya Nair,anita desai,North,Noida,Vikram Singh,P1,02-10-2025,WON,,x,10:05 AM,rv,02-Oct-2025",
    "E3,Karan Mehta,Suresh Rao,South,Chennai,Lakshmi Iyer,P2,02-10-2025,LOST,hipo_inactive,x,10:05 AM,OB,02-Oct-2025",
    "E4,Karan Mehta,Suresh Rao,South,Chennai,Lakshmi Iyer,P2,02-10-2025,WON,HIPO_INACTIVE,x,2:15 PM,OB,02-Oct-2025",
]

SAMPLE_CSV = "\n".join([HEADER] + SAMPLE_ROWS) + "\n"


class FakeFeed:
    """Feed client stand-in: each mode maps to CSV text or an exception to raise."""

    def __init__(self, payloads=None):
        self.payloads = payloads or {
            DashboardMode.FTD: SAMPLE_CSV,
            DashboardMode.MTD: SAMPLE_CSV,
        }
        self.calls = []

    def fetch_csv(self, mode):
        mode = DashboardMode(mode)
        self.calls.append(mode)
        payload = self.payloads[mode]
        if isinstance(payload, Exception):
            raise payload
        return payload

    def get_status(self):
        return {"name": "Fake Feed", "configured": {m.value: True for m in self.payloads}}


@pytest.fixture
def sample_csv():
    return SAMPLE_CSV


@pytest.fixture
def fake_feed():
    return FakeFeed()


@pytest.fixture
def session(fake_feed):
    from dashboard.api.session import DashboardSession

    s = DashboardSession(feed=fake_feed, mode=DashboardMode.MTD, chart_view=ChartView.DAILY)
    s.refresh()
    return s
