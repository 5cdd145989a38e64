# tests/test_render.py
from modules.posting_watch.lib import render
from modules.posting_watch.lib.models import Alert, ClassifiedJob, Division


def _jobs(n, division, prefix="Job"):
    return [ClassifiedJob(f"{prefix} {i}", f"https://x.example/jobs/{prefix.lower()}-{i}", division) for i in range(n)]


def test_groups_follow_fixed_order_and_skip_empty():
    jobs = _jobs(1, Division.UNCATEGORIZED, "U") + _jobs(2, Division.TECHNOLOGY, "T") + _jobs(1, Division.FINANCE, "F")
    groups = render.group_by_division(jobs)
    assert [d for d, _ in groups] == [Division.TECHNOLOGY, Division.FINANCE, Division.UNCATEGORIZED]
    assert [j.title for j in groups[0][1]] == ["T 0", "T 1"]


def test_group_cap_adds_overflow_line():
    alert = Alert("Acme", "https://acme.example/careers", _jobs(27, Division.TECHNOLOGY))
    html = render.build_sections([alert], group_cap=25)
    assert html.count("<li><a ") == 25
    assert "<li>(and 2 more)</li>" in html
    assert "Job 24" in html and "Job 25" not in html


def test_titles_and_urls_are_escaped():
    job = ClassifiedJob('R&D <Lead> "West"', "https://x.example/jobs/1?a=1&b=2", Division.TECHNOLOGY)
    html = render.build_digest([Alert("Smith & Sons", "https://s.example", [job])])
    assert "R&amp;D &lt;Lead&gt; &quot;West&quot;" in html
    assert 'href="https://x.example/jobs/1?a=1&amp;b=2"' in html
    assert "<h3>Smith &amp; Sons</h3>" in html
    assert "<Lead>" not in html


def test_digest_sections_keep_client_order():
    a = Alert("Beta", "https://b.example", _jobs(1, Division.FINANCE, "B"))
    b = Alert("Alpha", "https://a.example", _jobs(2, Division.FINANCE, "A"))
    html = render.build_digest([a, b])
    assert html.index("<h3>Beta</h3>") < html.index("<h3>Alpha</h3>")
    assert "3 new postings across 2 clients" in html
    assert "<h2>New job postings detected</h2>" in html


def test_subjects():
    one = [Alert("Acme", "u", _jobs(3, Division.FINANCE))]
    two = one + [Alert("Beta", "u", _jobs(1, Division.FINANCE))]
    assert render.build_subject(one) == "New job postings detected: 3 new at Acme"
    assert render.build_subject(two) == "New job postings detected: 4 new jobs (2 clients)"


def test_dry_run_preview_caps_lines():
    jobs = _jobs(12, Division.GENERAL_STAFFING)
    text = render.dry_run_preview("Acme", "https://acme.example/careers", jobs, cap=10)
    lines = text.splitlines()
    assert lines[0] == "========== DRY RUN =========="
    assert "Detected jobs: 12" in lines
    assert "1. [General Staffing] Job 0 | https://x.example/jobs/job-0" in lines
    assert "10. [General Staffing] Job 9 | https://x.example/jobs/job-9" in lines
    assert not any(line.startswith("11. ") for line in lines)
    assert "... and 2 more" in lines


def test_dry_run_preview_without_jobs():
    text = render.dry_run_preview("Acme", "https://acme.example/careers", [])
    assert "Detected jobs: 0" in text
    assert "1. " not in text


def test_single_client_intro_reads_naturally():
    one = render.build_digest([Alert("Acme", "https://a.example", _jobs(1, Division.FINANCE))])
    assert "<p>1 new posting</p>" in one
    assert "across" not in one
    two = render.build_digest([Alert("Acme", "https://a.example", _jobs(2, Division.FINANCE))])
    assert "<p>2 new postings</p>" in two
