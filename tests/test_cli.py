import pytest

import run_search


@pytest.fixture(autouse=True)
def _default_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("JOBSEARCH_SETTINGS", str(tmp_path / "none.yaml"))


def test_preview(capsys):
    assert run_search.main(["data engineer", "--location", "Austin", "--preview"]) == 0
    out = capsys.readouterr().out.strip().splitlines()[-1]
    assert out.startswith("data engineer (job OR career")
    assert 'location:"Austin"' in out


def test_preview_rejects_bad_query(capsys):
    assert run_search.main(['"data', "--preview"]) == 2
    assert "Unbalanced quotes" in capsys.readouterr().err


def test_offline_search(capsys):
    assert run_search.main(["software engineer", "--offline"]) == 0
    out = capsys.readouterr().out
    assert "**3** relevant of **5** received" in out


def test_missing_credentials(capsys):
    assert run_search.main(["software engineer"]) == 2
    assert "not configured" in capsys.readouterr().err
