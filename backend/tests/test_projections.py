from casefile import db
from casefile.models import Case, Participation
from casefile.services.cases import projections, ranking, service, workflow


def test_available_cases_only_registered(fabricated_case, people):
    other = service.create_case('Second', 'Another case', 2)
    ids = [c['id'] for c in projections.available_cases()]
    assert other.id in ids
    assert fabricated_case not in ids


def test_culprit_available_excludes_joined_cases(case_id, people):
    service.client_request(case_id, people['Watson'])
    listing = projections.culprit_available_cases()
    assert [r['case_id'] for r in listing] == [case_id]
    assert listing[0]['client_nickname'] == 'Watson'

    service.culprit_join(case_id, people['Moriarty'])
    assert projections.culprit_available_cases() == []


def test_culprit_cases_flags_fabrication(requested_case, people):
    [row] = projections.culprit_cases(people['Moriarty'])
    assert row['fake_evidence_selected'] is False
    service.fabricate(requested_case, people['Moriarty'], 'A witness saw {name} near the safe.')
    [row] = projections.culprit_cases(people['Moriarty'])
    assert row['fake_evidence_selected'] is True
    assert row['status'] == workflow.FABRICATED


def test_police_pending_shows_fabricated_and_own_accepted(fabricated_case, people):
    pending = projections.police_pending_cases(people['Lestrade'])
    assert [r['case_id'] for r in pending] == [fabricated_case]
    assert pending[0]['culprit_nickname'] == 'Moriarty'

    service.police_accept(fabricated_case, people['Lestrade'])
    assert [r['case_id'] for r in projections.police_pending_cases(people['Lestrade'])] == [fabricated_case]
    assert projections.police_pending_cases(people['Gregson']) == []

    service.police_assign(fabricated_case, people['Lestrade'], people['Holmes'])
    assert projections.police_pending_cases(people['Lestrade']) == []
    [mine] = projections.police_cases(people['Lestrade'])
    assert mine['status'] == workflow.ASSIGNED


def test_detective_listings_follow_status(assigned_case, people):
    [row] = projections.detective_assigned_cases(people['Holmes'])
    assert row['suspects'] == ['Moriarty', 'Adler']
    assert row['police_nickname'] == 'Lestrade'
    assert row['result'] is None
    assert projections.detective_completed_cases(people['Holmes']) == []

    service.detective_guess(assigned_case, people['Holmes'], 'Moriarty')

    assert projections.detective_assigned_cases(people['Holmes']) == []
    [done] = projections.detective_completed_cases(people['Holmes'])
    assert done['culprit_guess'] == 'Moriarty'
    assert done['actual_culprit'] == 'Moriarty'
    assert done['result'] == 'solved'


def test_client_cases_show_result_only_when_checked(assigned_case, people):
    [row] = projections.client_cases(people['Watson'])
    assert row['detective_nickname'] == 'Holmes'
    assert row['result'] is None
    service.detective_guess(assigned_case, people['Holmes'], 'Adler')
    [row] = projections.client_cases(people['Watson'])
    assert row['status'] == workflow.RESULT_CHECKED
    assert row['result'] == 'unsolved'


def test_missing_users_degrade_to_sentinels(people):
    case = service.create_case('Orphan', 'Nobody is left', 1)
    db.session.add(Participation(case_id=case.id, client_id=9001, culprit_id=9002))
    Case.query.filter_by(id=case.id).update({'status': workflow.FABRICATED})
    db.session.commit()

    [row] = projections.police_pending_cases()
    assert row['client_nickname'] == projections.UNKNOWN
    assert row['culprit_nickname'] == projections.UNASSIGNED


def test_unset_roles_show_unassigned(requested_case, people):
    [row] = projections.client_cases(people['Watson'])
    assert row['detective_nickname'] == projections.UNASSIGNED
    details = projections.case_details(requested_case)
    assert details['culprit_name'] == 'Moriarty'
    assert details['evidence'] == []


def test_ranking_orders_by_score(assigned_case, people):
    service.detective_guess(assigned_case, people['Holmes'], 'Adler')
    culprits = ranking.role_ranking('culprits')
    assert [r['nickname'] for r in culprits] == ['Moriarty', 'Adler']
    assert culprits[0]['rank'] == 1
    assert culprits[0]['score'] == 31
    assert culprits[0]['total_cases'] == 1
    assert culprits[0]['success_rate'] == 100.0
    assert culprits[1]['total_cases'] == 0

    [detective] = ranking.role_ranking('detective')
    assert detective['success_rate'] == 0.0
