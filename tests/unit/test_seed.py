"""
Unit tests for the sample catalog bootstrap.
"""

from elasticsearch import ConnectionError as ESConnectionError

from product_search.seed import SAMPLE_PRODUCTS, seed_sample_catalog


class TestSampleProducts:

    def test_ten_unique_products(self):
        ids = [p.id for p in SAMPLE_PRODUCTS]
        assert len(ids) == 10
        assert len(set(ids)) == 10

    def test_running_shoes_present(self):
        shoes = next(p for p in SAMPLE_PRODUCTS if p.id == "1")
        assert shoes.description.startswith("Lightweight breathable running shoes")
        assert shoes.category == "Footwear"


class TestSeedSampleCatalog:

    def test_creates_index_and_indexes_all(self, search_service, mock_es):
        mock_es.indices.exists.return_value = False

        assert seed_sample_catalog(search_service) == 10
        mock_es.indices.create.assert_called_once()
        assert mock_es.index.call_count == 10

    def test_rerun_skips_index_creation(self, search_service, mock_es):
        mock_es.indices.exists.return_value = True

        assert seed_sample_catalog(search_service) == 10
        mock_es.indices.create.assert_not_called()

    def test_failed_product_does_not_stop_others(self, search_service, mock_es):
        ok = {"result": "created"}
        mock_es.index.side_effect = [ok, ESConnectionError("reset"), ok]

        assert seed_sample_catalog(search_service, SAMPLE_PRODUCTS[:3]) == 2
        assert mock_es.index.call_count == 3
