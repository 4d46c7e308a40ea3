import pytest

from casefile import db
from casefile.models import Case, SubmittedEvidence, OriginalEvidence
from casefile.services.cases import fabrication, service
from casefile.services.cases.errors import InvalidInputError, NotFoundError

from conftest import FAKE_NEAR_SAFE, FAKE_ASKED_LOCK


def test_build_submitted_evidence_substitutes_every_placeholder():
    rows = fabrication.build_submitted_evidence(
        ['Fact one', 'Fact two'],
        '{name} lied, and {name} ran.',
        'Moriarty',
    )
    assert rows == [
        ('Fact one', True),
        ('Fact two', True),
        ('Moriarty lied, and Moriarty ran.', False),
    ]


def test_build_submitted_evidence_with_custom_placeholder():
    rows = fabrication.build_submitted_evidence([], 'It was <who>', 'Adler', placeholder='<who>')
    assert rows == [('It was Adler', False)]


def test_normalize_selection_takes_first_of_list():
    assert fabrication.normalize_selection(['first', 'second']) == 'first'
    assert fabrication.normalize_selection('only') == 'only'
    with pytest.raises(InvalidInputError):
        fabrication.normalize_selection([])


def test_submitted_set_is_true_statements_plus_one_fake(fabricated_case):
    rows = fabrication.submitted_evidence(fabricated_case)
    true_count = OriginalEvidence.query.filter_by(case_id=fabricated_case, is_true=True).count()
    assert sum(1 for r in rows if r.is_true_evidence) == true_count
    fakes = [r for r in rows if not r.is_true_evidence]
    assert [f.description for f in fakes] == ['A witness saw Moriarty near the safe.']
    # Non-candidate false statements never reach players
    assert all('rumour' not in r.description for r in rows)


def test_refabrication_replaces_instead_of_appending(fabricated_case, people):
    service.fabricate(fabricated_case, people['Moriarty'], [FAKE_ASKED_LOCK])

    rows = SubmittedEvidence.query.filter_by(case_id=fabricated_case).all()
    true_count = OriginalEvidence.query.filter_by(case_id=fabricated_case, is_true=True).count()
    assert sum(1 for r in rows if r.is_true_evidence) == true_count
    fakes = [r.description for r in rows if not r.is_true_evidence]
    assert fakes == ['The butler says Moriarty asked about the lock.']


def test_refabrication_keeps_first_true_culprit(fabricated_case, people):
    service.fabricate(fabricated_case, people['Adler'], [FAKE_NEAR_SAFE])

    case = db.session.get(Case, fabricated_case)
    assert case.true_culprit_id == people['Moriarty']
    # Evidence text follows the culprit named in the call
    fakes = [r.description for r in fabrication.submitted_evidence(fabricated_case) if not r.is_true_evidence]
    assert fakes == ['A witness saw Adler near the safe.']


def test_end_to_end_name_substitution(requested_case, people):
    case = service.create_case('Quick', 'Short case', 1, evidence=[
        {'description': 'It was {name}', 'is_true': False, 'is_fake_candidate': True},
    ])
    service.client_request(case.id, people['Watson'])
    service.culprit_join(case.id, people['Moriarty'])
    service.fabricate(case.id, people['Moriarty'], ['It was {name}'])
    rows = fabrication.submitted_evidence(case.id)
    assert [(r.description, r.is_true_evidence) for r in rows] == [('It was Moriarty', False)]


def test_fabrication_details_lists_all_original_evidence(case_id):
    details = fabrication.fabrication_details(case_id)
    assert details['case_title'] == 'The Missing Diamond'
    assert len(details['original_evidences']) == 5
    assert sum(1 for e in details['original_evidences'] if e['is_fake_candidate']) == 2


def test_fabrication_details_unknown_case(flask_app):
    with pytest.raises(NotFoundError):
        fabrication.fabrication_details(42)
