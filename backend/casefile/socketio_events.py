from flask_socketio import join_room, leave_room, emit
from casefile import socketio

# Every dashboard listening for listing changes joins this room
BOARD_ROOM = 'cases'


def case_room(case_id) -> str:
    return f"case:{case_id}"


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_watch_case(data):
    case_id = (data or {}).get('case_id')
    if case_id is None:
        emit('error', {'message': 'case_id is required'})
        return
    room = case_room(case_id)
    join_room(room)
    emit('joined', {'room': room})


def handle_unwatch_case(data):
    case_id = (data or {}).get('case_id')
    if case_id is None:
        emit('error', {'message': 'case_id is required'})
        return
    room = case_room(case_id)
    leave_room(room)
    emit('left', {'room': room})


def handle_watch_board(data=None):
    join_room(BOARD_ROOM)
    emit('joined', {'room': BOARD_ROOM})


def handle_ping(data):
    emit('pong', data or {})


def broadcast_case_update(case_id: int, status: str, operation: str) -> None:
    """Tell watchers a case moved; clients refetch their listings."""
    payload = {'case_id': case_id, 'status': status, 'operation': operation}
    socketio.emit('case_update', payload, to=case_room(case_id), namespace='/ws')
    socketio.emit('case_update', payload, to=BOARD_ROOM, namespace='/ws')


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    handlers = {
        'connect': handle_connect,
        'watch_case': handle_watch_case,
        'unwatch_case': handle_unwatch_case,
        'watch_board': handle_watch_board,
        'ping': handle_ping,
    }
    for name, handler in handlers.items():
        socketio.on_event(name, handler, namespace='/ws')
    if testing:
        # Test-only mirror on default namespace
        for name, handler in handlers.items():
            socketio.on_event(name, handler, namespace='/')
