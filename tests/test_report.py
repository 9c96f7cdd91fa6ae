from jobsearch.errors import RateLimited
from jobsearch.models import SearchOutcome, SearchResponse, SearchResultItem
from jobsearch.report import build_results_report, format_search_metadata, result_card_html


def test_format_search_metadata():
    assert format_search_metadata(10, 4) == {
        "original_count": 10, "filtered_count": 4, "efficiency": 40, "has_filtering": True,
    }
    assert format_search_metadata(0, 0)["efficiency"] == 0


def test_success_report():
    items = [SearchResultItem("Data Engineer | Remote", "Build pipelines.", "https://www.linkedin.com/jobs/view/9")]
    response = SearchResponse(
        items=items,
        total_results=321,
        context={"results_received": 5, "tier": "free", "target_sites": ["linkedin.com"], "final_query": "q"},
        warnings=["Warning: Less than 10 requests remaining"],
    )
    report = build_results_report(SearchOutcome.ok(response), "data engineer")
    assert "**1** relevant of **5** received (20%)" in report
    assert "| 1 | Data Engineer / Remote | LinkedIn | [Open](https://www.linkedin.com/jobs/view/9) |" in report
    assert "_Warning: Less than 10 requests remaining_" in report


def test_empty_success_report():
    response = SearchResponse(items=[], total_results=0, context={"results_received": 3})
    report = build_results_report(SearchOutcome.ok(response), "data engineer")
    assert "No matching job postings" in report
    assert "whole web" in report


def test_failure_report():
    report = build_results_report(SearchOutcome.failed(RateLimited(retry_after=20)), "data engineer")
    assert "**Search failed.**" in report
    assert "Try again in about 20 seconds." in report
    assert "`RATE_LIMIT_EXCEEDED`" in report


def test_result_card_escapes_search_text():
    item = SearchResultItem(
        '<script>alert("x")</script> Engineer',
        "<b>bold</b> & more",
        'https://www.indeed.com/viewjob?jk=1&q="><img src=x>',
    )
    card = result_card_html(item)
    assert "<script>" not in card
    assert "&lt;script&gt;" in card
    assert "&lt;b&gt;bold&lt;/b&gt; &amp; more" in card
    assert 'href="https://www.indeed.com/viewjob?jk=1&amp;q=&quot;&gt;&lt;img src=x&gt;"' in card
    assert "· Indeed" in card


def test_result_card_rejects_script_links():
    item = SearchResultItem("Engineer", "", "javascript:alert(1)")
    assert 'href="#"' in result_card_html(item)
