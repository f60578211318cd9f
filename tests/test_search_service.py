import json

import pytest
from conftest import FakeEmbeddingService, FakeIndex, FakeLLM, make_candidate, run

from skillvector.agents.filter_agent import QueryFilterExtractor
from skillvector.agents.summary_agent import NO_MATCHES_SUMMARY, NO_MORE_SUMMARY, SummaryGenerator
from skillvector.errors import ProviderError
from skillvector.schemas.filters import QueryFilterSpec
from skillvector.services.search_service import SearchService


def _service(index, filter_llm=None, summary_llm=None, embedder=None, min_pool=50):
    return SearchService(
        embedder or FakeEmbeddingService(),
        index,
        QueryFilterExtractor(filter_llm),
        SummaryGenerator(summary_llm),
        relevance_threshold=0.3,
        min_candidate_pool=min_pool,
    )


def test_python_query_keeps_boosted_match_and_drops_noise():
    index = FakeIndex(
        [
            make_candidate("ada", 0.2, role="Software Engineer", skills="Python, Algorithms", name="Ada Lovelace"),
            make_candidate("chef", 0.1, role="Chef", skills="Cooking", name="Gordon"),
        ]
    )
    page = run(_service(index).search("python developers"))
    assert [r.payload["data_name"] for r in page.results] == ["Ada Lovelace"]
    assert page.results[0].boosts == ["skills"]
    assert page.results[0].relevance_score == pytest.approx(0.35)
    assert page.total == 1
    assert page.has_more is False


def test_second_page_of_twelve():
    index = FakeIndex([make_candidate(f"p{i:02d}", 0.9 - i * 0.01) for i in range(1, 13)])
    page = run(_service(index).search("anything", limit=5, offset=5))
    assert [r.id for r in page.results] == ["p06", "p07", "p08", "p09", "p10"]
    assert page.total == 12
    assert page.has_more is True
    assert index.searches[0]["limit"] == 50


def test_filter_extraction_failure_still_returns_results():
    index = FakeIndex([make_candidate("ada", 0.8, role="Software Engineer", skills="Python")])
    filter_llm = FakeLLM(fail=True)
    service = _service(index, filter_llm=filter_llm)
    page = run(service.search("python developers"))
    assert [r.id for r in page.results] == ["ada"]
    assert index.searches[0]["filter"].is_empty()
    assert len(filter_llm.calls) == 1


def test_extracted_filters_are_passed_to_index():
    llm = FakeLLM(json.dumps({"skills": "Python", "location": "London", "minExperience": 3}))
    index = FakeIndex([make_candidate("ada", 0.8, skills="Python")])
    run(_service(index, filter_llm=llm).search("python people in London with 3+ years"))
    used = index.searches[0]["filter"]
    assert used.text == {"data_skills": "Python"}
    assert used.ranges == {"data_experience_years": (3.0, None)}


def test_explicit_filters_skip_extraction():
    llm = FakeLLM('{"skills": "Go"}')
    index = FakeIndex([make_candidate("ada", 0.8)])
    run(_service(index, filter_llm=llm).search("x", filters=QueryFilterSpec(skills="Rust")))
    assert llm.calls == []
    assert index.searches[0]["filter"].text == {"data_skills": "Rust"}


def test_no_results_uses_canned_summary_without_model_call():
    summary_llm = FakeLLM("should not be used")
    page = run(_service(FakeIndex([make_candidate("noise", 0.05)]), summary_llm=summary_llm).search("zzqx"))
    assert page.results == []
    assert page.total == 0
    assert page.summary == NO_MATCHES_SUMMARY
    assert summary_llm.calls == []


def test_page_past_the_end_says_no_more():
    summary_llm = FakeLLM("unused")
    index = FakeIndex([make_candidate(f"p{i}", 0.9) for i in range(3)])
    page = run(_service(index, summary_llm=summary_llm).search("x", limit=5, offset=5))
    assert page.results == []
    assert page.total == 3
    assert page.summary == NO_MORE_SUMMARY
    assert summary_llm.calls == []


def test_summary_generated_for_non_empty_page():
    index = FakeIndex([make_candidate("ada", 0.8)])
    page = run(_service(index, summary_llm=FakeLLM("One engineer found.")).search("engineer"))
    assert page.summary == "One engineer found."


def test_query_embedding_failure_propagates():
    service = _service(FakeIndex([]), embedder=FakeEmbeddingService(fail=True))
    with pytest.raises(ProviderError):
        run(service.search("python"))


def test_limit_and_offset_are_clamped():
    index = FakeIndex([make_candidate(f"p{i:03d}", 0.9) for i in range(150)])
    page = run(_service(index, min_pool=0).search("x", limit=1000, offset=-3))
    assert page.limit == 100
    assert page.offset == 0
    assert len(page.results) == 100
    assert index.searches[0]["limit"] == 101


def test_list_people_scrolls():
    index = FakeIndex([make_candidate(f"p{i}", 0.9) for i in range(5)])
    assert len(run(_service(index).list_people(3))) == 3
