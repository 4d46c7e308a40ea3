def _drain(sio_client):
    return sio_client.get_received('/ws')


def test_socket_connect_and_watch_case(sio_client):
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')

    sio_client.emit('watch_case', {'case_id': 1}, namespace='/ws')
    received = _drain(sio_client)
    assert any(pkt['name'] == 'joined' and pkt['args'][0]['room'] == 'case:1' for pkt in received)


def test_watch_case_requires_id(sio_client):
    _drain(sio_client)
    sio_client.emit('watch_case', {}, namespace='/ws')
    assert any(pkt['name'] == 'error' for pkt in _drain(sio_client))


def test_board_receives_case_updates(sio_client, client, fabricated_case, people):
    sio_client.emit('watch_board', namespace='/ws')
    _drain(sio_client)

    res = client.post('/api/cases/police/accept', json={'case_id': fabricated_case, 'police_id': people['Lestrade']})
    assert res.status_code == 200

    updates = [pkt['args'][0] for pkt in _drain(sio_client) if pkt['name'] == 'case_update']
    assert {'case_id': fabricated_case, 'status': 'accepting', 'operation': 'police_accept'} in updates


def test_rejected_operation_broadcasts_nothing(sio_client, client, requested_case, people):
    sio_client.emit('watch_case', {'case_id': requested_case}, namespace='/ws')
    _drain(sio_client)

    res = client.post('/api/cases/police/accept', json={'case_id': requested_case, 'police_id': people['Lestrade']})
    assert res.status_code == 409
    assert not any(pkt['name'] == 'case_update' for pkt in _drain(sio_client))
