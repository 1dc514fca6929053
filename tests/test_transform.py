from core.etl.models import COMPANY_NAME_MAX, TITLE_MAX, RawJob
from core.etl.transform import DEFAULT_REGION, transform_linkedin_jobs


def _job(**overrides):
    data = {
        "title": "Desenvolvedor Python",
        "company": "Acme",
        "link": "https://br.linkedin.com/jobs/view/123",
        "location": "Sorocaba, São Paulo, Brasil",
    }
    data.update(overrides)
    return RawJob(**data)


def test_valid_job_is_trimmed_and_mapped():
    out = transform_linkedin_jobs([_job(title="  Dev Backend  ", company=" Acme ", location=" Sorocaba ")])

    assert len(out) == 1
    p = out[0]
    assert p.title == "Dev Backend"
    assert p.company_name == "Acme"
    assert p.region == "Sorocaba"
    assert p.link == "https://br.linkedin.com/jobs/view/123"


def test_missing_location_uses_default_region():
    out = transform_linkedin_jobs([_job(location=None), _job(link="https://x.com/2", location="   ")])

    assert [p.region for p in out] == [DEFAULT_REGION, DEFAULT_REGION]
    assert DEFAULT_REGION == "Não informada"


def test_long_fields_are_truncated():
    out = transform_linkedin_jobs([_job(title="T" * (TITLE_MAX + 20), company="C" * (COMPANY_NAME_MAX + 5))])

    assert len(out[0].title) == TITLE_MAX
    assert len(out[0].company_name) == COMPANY_NAME_MAX


def test_invalid_entries_are_dropped_and_order_kept():
    jobs = [
        _job(link="https://x.com/1"),
        _job(title="   ", link="https://x.com/2"),
        _job(company="", link="https://x.com/3"),
        _job(link="not a url"),
        _job(link="ftp://x.com/5"),
        _job(link="https://x.com/6"),
    ]

    out = transform_linkedin_jobs(jobs)

    assert [p.link for p in out] == ["https://x.com/1", "https://x.com/6"]


def test_accepts_dicts_and_ignores_non_string_fields():
    jobs = [
        {"title": "Dev", "company": "Acme", "link": "https://x.com/1"},
        {"title": 42, "company": "Acme", "link": "https://x.com/2"},
    ]

    out = transform_linkedin_jobs(jobs)

    assert [p.link for p in out] == ["https://x.com/1"]
    assert out[0].region == DEFAULT_REGION


def test_empty_or_none_input():
    assert transform_linkedin_jobs([]) == []
    assert transform_linkedin_jobs(None) == []
