# tests/career_live/test_playwright_live.py
import pytest

from modules.posting_watch.lib.browser import open_renderer
from modules.posting_watch.lib.config import Settings
from modules.posting_watch.lib.models import ClientConfig
from modules.posting_watch.lib.scrapers import extract_jobs

pytestmark = pytest.mark.live


@pytest.mark.parametrize(
    "url",
    [
        "https://boards.greenhouse.io/gitlab",
    ],
)
def test_real_board_yields_job_links(url):
    settings = Settings(renderer="browser", settle_ms=2_000)
    with open_renderer(settings) as renderer:
        jobs = extract_jobs(ClientConfig("Live", url), renderer, settings)
    assert jobs, "expected at least one posting"
    assert all(j.url.startswith("http") for j in jobs)
    assert len({j.url for j in jobs}) == len(jobs)
