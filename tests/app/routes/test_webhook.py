"""Tests for app.routes.webhook — crawl completion callback."""
from unittest.mock import patch, MagicMock


class TestApifyWebhook:

    def test_enqueues_and_acknowledges(self, client):
        payload = {'eventType': 'ACTOR.RUN.SUCCEEDED', 'resource': {'id': 'run-1', 'defaultDatasetId': 'ds-1'}}
        with patch('app.routes.webhook.enqueue_webhook', return_value=MagicMock(id='job-1')) as mock_enqueue:
            resp = client.post('/api/apify/webhook', json=payload)
        assert resp.status_code == 200
        assert resp.json == {'received': True}
        mock_enqueue.assert_called_once_with(payload)

    def test_acknowledges_even_when_queue_is_down(self, client):
        with patch('app.routes.webhook.enqueue_webhook', side_effect=ConnectionError('redis down')):
            resp = client.post('/api/apify/webhook', json={'id': 'run-1'})
        assert resp.status_code == 200

    def test_non_json_body_queued_as_empty(self, client):
        with patch('app.routes.webhook.enqueue_webhook') as mock_enqueue:
            resp = client.post('/api/apify/webhook', data='garbage', content_type='text/plain')
        assert resp.status_code == 200
        mock_enqueue.assert_called_once_with({})

    def test_get_reachability_check(self, client):
        resp = client.get('/api/apify/webhook')
        assert resp.status_code == 200
        assert resp.json == {'ok': True, 'method': 'GET'}
