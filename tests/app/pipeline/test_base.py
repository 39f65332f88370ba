"""Tests for app.pipeline.base — run options parsing."""
import pytest

from app.pipeline.base import RunOptions, OptionsError, BatchResult


class TestFromRequest:

    def test_defaults(self):
        options = RunOptions.from_request({'location': ' Denver, CO '})
        assert options.location == 'Denver, CO'
        assert options.max_results == 40
        assert options.preset == 'general'
        assert options.avoid_chains is True
        assert options.include_keywords == []

    def test_location_required(self):
        with pytest.raises(OptionsError, match='location required'):
            RunOptions.from_request({})
        with pytest.raises(OptionsError):
            RunOptions.from_request(None)
        with pytest.raises(OptionsError):
            RunOptions.from_request({'location': '   '})

    def test_max_results_must_be_positive_number(self):
        with pytest.raises(OptionsError):
            RunOptions.from_request({'location': 'x', 'maxResults': 0})
        with pytest.raises(OptionsError):
            RunOptions.from_request({'location': 'x', 'maxResults': 'lots'})
        with pytest.raises(OptionsError):
            RunOptions.from_request({'location': 'x', 'maxResults': True})

    @pytest.mark.parametrize('value', ['false', '0', 0, 1, []])
    def test_avoid_chains_must_be_boolean(self, value):
        with pytest.raises(OptionsError, match='avoidChains must be a boolean'):
            RunOptions.from_request({'location': 'x', 'avoidChains': value})

    def test_avoid_chains_null_keeps_default(self):
        assert RunOptions.from_request({'location': 'x', 'avoidChains': None}).avoid_chains is True
        assert RunOptions.from_request({'location': 'x', 'avoidChains': False}).avoid_chains is False

    def test_keywords_must_be_string_lists(self):
        with pytest.raises(OptionsError):
            RunOptions.from_request({'location': 'x', 'includeKeywords': 'cerec'})
        with pytest.raises(OptionsError):
            RunOptions.from_request({'location': 'x', 'excludeKeywords': [1, 2]})

    def test_blank_keywords_dropped(self):
        options = RunOptions.from_request({'location': 'x', 'includeKeywords': ['cerec', ' ', ' itero ']})
        assert options.include_keywords == ['cerec', 'itero']


class TestMetaRoundTrip:

    def test_to_meta_uses_camel_case(self):
        meta = RunOptions(location='x', avoid_chains=False, include_keywords=['cerec']).to_meta()
        assert meta['avoidChains'] is False
        assert meta['includeKeywords'] == ['cerec']
        assert RunOptions.from_meta(meta) == RunOptions(
            location='x', avoid_chains=False, include_keywords=['cerec'])

    def test_from_meta_is_lenient(self):
        options = RunOptions.from_meta({'includeKeywords': 'oops', 'avoidChains': None})
        assert options.include_keywords == []
        assert options.avoid_chains is True
        assert RunOptions.from_meta(None) == RunOptions()


def test_batch_result_starts_empty():
    result = BatchResult()
    assert (result.total, result.processed, result.failed, result.skipped) == (0, 0, 0, 0)
    assert result.errors == []
