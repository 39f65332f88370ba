"""Tests for app.pipeline.runs — run submission and completion."""
import logging

import pytest
from unittest.mock import patch

from app.models.lead_run import LeadRun
from app.pipeline.base import RunOptions
from app.pipeline.runs import submit_run, load_run_options, complete_run, webhook_url
from app.services import db


class TestSubmitRun:

    def test_starts_crawl_and_records_pending_run(self, db_session):
        options = RunOptions(location='Boise, ID', max_results=10, include_keywords=['cerec'])
        with patch('app.pipeline.runs.apify_service') as mock_apify, \
                patch('app.pipeline.runs.PUBLIC_BASE_URL', 'https://leads.example'):
            mock_apify.start_places_run.return_value = {'id': 'run-42', 'status': 'READY'}
            mock_apify.ACTORS = {'places': 'compass/crawler-google-places'}
            run_id = submit_run(options)

        assert run_id == 'run-42'
        run_input, url = mock_apify.start_places_run.call_args[0]
        assert run_input['locationQuery'] == 'Boise, ID'
        assert url == 'https://leads.example/api/apify/webhook'

        row = db_session.query(LeadRun).filter_by(run_id='run-42').one()
        assert row.status == 'pending'
        assert row.actor_id == 'compass/crawler-google-places'
        assert row.meta['includeKeywords'] == ['cerec']

    def test_crawl_failure_records_nothing(self, db_session):
        with patch('app.pipeline.runs.apify_service') as mock_apify:
            mock_apify.start_places_run.side_effect = RuntimeError('apify down')
            with pytest.raises(RuntimeError):
                submit_run(RunOptions(location='x'))
        assert db_session.query(LeadRun).count() == 0


class TestRunLifecycle:

    def test_load_options_for_unknown_run(self):
        assert load_run_options('missing') == RunOptions()
        assert load_run_options(None) == RunOptions()

    def test_complete_once(self):
        with patch('app.pipeline.runs.apify_service') as mock_apify:
            mock_apify.start_places_run.return_value = {'id': 'run-7'}
            mock_apify.ACTORS = {'places': 'a'}
            submit_run(RunOptions(location='x', preset='implants'))
        assert load_run_options('run-7').preset == 'implants'
        assert complete_run('run-7', 'succeeded') is True
        assert complete_run('run-7', 'failed') is False

    def test_repeat_completion_logs_current_status(self, caplog):
        db.create_run_record('run-8', 'a', {})
        complete_run('run-8', 'failed')
        with caplog.at_level(logging.INFO, logger='pipeline.runs'):
            assert complete_run('run-8', 'succeeded') is False
        assert 'current status: failed' in caplog.text

    def test_complete_unknown_run(self):
        assert complete_run('nope') is False


def test_webhook_url_joins_path():
    with patch('app.pipeline.runs.PUBLIC_BASE_URL', 'https://x.example'):
        assert webhook_url() == 'https://x.example/api/apify/webhook'
