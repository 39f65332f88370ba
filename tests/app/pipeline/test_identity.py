"""Tests for app.pipeline.identity — domain parsing and lead matching."""
from datetime import datetime, timedelta, timezone

from app.models.lead import Lead
from app.pipeline.identity import domain_from_url, identity_clauses, find_existing_lead


class TestDomainFromUrl:

    def test_strips_www_and_lowercases(self):
        assert domain_from_url('https://www.Example.com/contact') == 'example.com'

    def test_keeps_subdomain(self):
        assert domain_from_url('http://smile.example.com') == 'smile.example.com'

    def test_no_host(self):
        assert domain_from_url('not a url') is None
        assert domain_from_url('') is None
        assert domain_from_url(None) is None


class TestFindExistingLead:

    def test_no_keys_matches_nothing(self, db_session):
        db_session.add(Lead(name='Anything'))
        db_session.commit()
        assert identity_clauses() == []
        assert find_existing_lead(db_session) is None

    def test_matches_on_any_key(self, db_session):
        lead = Lead(name='A', google_place_id='p1', domain='a.com', phone='555')
        db_session.add(lead)
        db_session.commit()
        assert find_existing_lead(db_session, place_id='p1').id == lead.id
        assert find_existing_lead(db_session, domain='a.com').id == lead.id
        assert find_existing_lead(db_session, phone='555').id == lead.id
        assert find_existing_lead(db_session, place_id='other', phone='555').id == lead.id
        assert find_existing_lead(db_session, place_id='other') is None

    def test_most_recently_seen_wins(self, db_session):
        now = datetime.now(timezone.utc)
        older = Lead(name='Old', google_place_id='p1', last_seen_at=now - timedelta(days=2))
        newer = Lead(name='New', phone='555', last_seen_at=now)
        db_session.add_all([older, newer])
        db_session.commit()
        match = find_existing_lead(db_session, place_id='p1', phone='555')
        assert match.name == 'New'
