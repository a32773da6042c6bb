"""
Unit tests for the explain-search assembler.

The token side may fail soft; search failures and cancellation may not.

Run with: PYTHONPATH=src python -m pytest tests/unit/test_explanation.py -v
"""

import threading
from unittest.mock import MagicMock

import pytest
import structlog

from conftest import make_hit, make_http_response, make_search_response
from core.logging import bind_context, clear_context
from product_search.errors import InferenceTransportError, SearchBackendError, SearchCancelledError
from product_search.explanation import ExplanationAssembler
from product_search.models import Product, ScoredResult, SearchExplanation


@pytest.fixture
def scored_results(sample_product_dict):
    product = Product.model_validate(sample_product_dict)
    return [ScoredResult(product=product, score=7.5, max_score=7.5)]


@pytest.fixture
def mock_search():
    return MagicMock()


@pytest.fixture
def mock_inference():
    return MagicMock()


@pytest.fixture
def assembler(mock_search, mock_inference):
    return ExplanationAssembler(search_service=mock_search, inference_client=mock_inference)


class TestExplain:

    def test_combines_tokens_and_results(self, assembler, mock_search, mock_inference, scored_results):
        mock_inference.fetch_tokens.return_value = {"shoe": 9.1, "run": 5.3}
        mock_search.explain_search.return_value = scored_results

        explanation = assembler.explain("comfortable running footwear")

        assert isinstance(explanation, SearchExplanation)
        assert explanation.query == "comfortable running footwear"
        assert explanation.query_tokens == {"shoe": 9.1, "run": 5.3}
        assert explanation.results == scored_results
        mock_inference.fetch_tokens.assert_called_once_with("comfortable running footwear", None)
        mock_search.explain_search.assert_called_once_with("comfortable running footwear")

    def test_cancel_event_passed_to_inference(self, assembler, mock_search, mock_inference):
        mock_inference.fetch_tokens.return_value = {}
        mock_search.explain_search.return_value = []
        cancel = threading.Event()

        assembler.explain("q", cancel_event=cancel)

        mock_inference.fetch_tokens.assert_called_once_with("q", cancel)

    def test_empty_tokens_are_valid(self, assembler, mock_search, mock_inference, scored_results):
        mock_inference.fetch_tokens.return_value = {}
        mock_search.explain_search.return_value = scored_results

        explanation = assembler.explain("q")

        assert explanation.query_tokens == {}
        assert len(explanation.results) == 1


class TestDegradation:

    @pytest.mark.parametrize("error", [
        InferenceTransportError("bad url"),
        RuntimeError("boom"),
        ValueError("odd payload"),
    ])
    def test_token_failure_gives_empty_map(self, assembler, mock_search, mock_inference, scored_results, error):
        mock_inference.fetch_tokens.side_effect = error
        mock_search.explain_search.return_value = scored_results

        explanation = assembler.explain("q")

        assert explanation.query_tokens == {}
        assert explanation.results == scored_results

    def test_search_failure_propagates(self, assembler, mock_search, mock_inference):
        mock_inference.fetch_tokens.return_value = {"shoe": 1.0}
        mock_search.explain_search.side_effect = SearchBackendError("cluster down")

        with pytest.raises(SearchBackendError):
            assembler.explain("q")

    def test_search_failure_wins_over_token_failure(self, assembler, mock_search, mock_inference):
        mock_inference.fetch_tokens.side_effect = RuntimeError("inference down")
        mock_search.explain_search.side_effect = SearchBackendError("cluster down")

        with pytest.raises(SearchBackendError):
            assembler.explain("q")

    def test_cancellation_propagates(self, assembler, mock_search, mock_inference, scored_results):
        mock_inference.fetch_tokens.side_effect = SearchCancelledError("cancelled")
        mock_search.explain_search.return_value = scored_results

        with pytest.raises(SearchCancelledError):
            assembler.explain("q")


class TestExplainWithRealComponents:
    """Assembler over the real service and inference client (mocked transports)."""

    def test_end_to_end_with_fallback(self, search_service, mock_es, inference_client, mock_session,
                                      sample_product_dict):
        mock_es.search.return_value = make_search_response(
            [make_hit(sample_product_dict, score=11.2)], max_score=11.2,
        )
        mock_session.post.side_effect = [
            make_http_response(404),
            make_http_response(200, {"sparse_embedding": [{"embedding": {"shoe": 9.1, "run": 5.3}}]}),
        ]
        assembler = ExplanationAssembler(search_service=search_service, inference_client=inference_client)

        explanation = assembler.explain("comfortable running footwear")

        assert list(explanation.query_tokens.items()) == [("shoe", 9.1), ("run", 5.3)]
        assert [r.product.id for r in explanation.results] == ["1"]
        assert explanation.results[0].score == explanation.results[0].max_score == 11.2

    def test_no_inference_available(self, search_service, mock_es, inference_client, mock_session):
        mock_es.search.return_value = make_search_response([], max_score=None)
        mock_session.post.return_value = make_http_response(404)
        mock_session.get.return_value = make_http_response(200, {"endpoints": []})
        assembler = ExplanationAssembler(search_service=search_service, inference_client=inference_client)

        explanation = assembler.explain("q")

        assert explanation.query_tokens == {}
        assert explanation.results == []


class TestCancellation:

    def test_set_event_skips_scored_search(self, assembler, mock_search, mock_inference):
        cancel = threading.Event()
        cancel.set()
        mock_inference.fetch_tokens.return_value = {"shoe": 1.0}

        with pytest.raises(SearchCancelledError):
            assembler.explain("q", cancel_event=cancel)

        mock_search.explain_search.assert_not_called()

    def test_real_inference_client_honours_event(self, search_service, mock_es, inference_client, mock_session):
        cancel = threading.Event()
        cancel.set()
        assembler = ExplanationAssembler(search_service=search_service, inference_client=inference_client)

        with pytest.raises(SearchCancelledError):
            assembler.explain("q", cancel_event=cancel)

        mock_session.post.assert_not_called()
        mock_es.search.assert_not_called()


class TestLogContext:

    def test_bound_context_reaches_both_workers(self, assembler, mock_search, mock_inference):
        seen = {}

        def tokens(query, cancel_event):
            seen["tokens"] = structlog.contextvars.get_contextvars().get("request_id")
            return {}

        def results(query):
            seen["search"] = structlog.contextvars.get_contextvars().get("request_id")
            return []

        mock_inference.fetch_tokens.side_effect = tokens
        mock_search.explain_search.side_effect = results

        bind_context(request_id="req-7")
        try:
            assembler.explain("q")
        finally:
            clear_context()

        assert seen == {"tokens": "req-7", "search": "req-7"}
