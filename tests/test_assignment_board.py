from conftest import make_assigned
from questify.core.services.assignment_board import AssignmentBoard


def test_groups_by_assignment_in_first_seen_order():
    board = AssignmentBoard()
    board.load(
        [
            make_assigned("q1", assignment_id="b", title="Second"),
            make_assigned("q2", assignment_id="a", title="First"),
            make_assigned("q3", assignment_id="b", title="Second"),
        ]
    )
    assignments = board.get_assignments()
    assert [a.assignment_id for a in assignments] == ["b", "a"]
    assert [q.question_id for q in assignments[0].questions] == ["q1", "q3"]
    assert assignments[0].title == "Second"


def test_answered_questions_are_dropped_and_empty_assignments_hidden():
    board = AssignmentBoard()
    board.load(
        [
            make_assigned("q1", assignment_id="a", is_answered=True),
            make_assigned("q2", assignment_id="a"),
            make_assigned("q3", assignment_id="done", is_answered=True, completed=True),
        ]
    )
    assert [a.assignment_id for a in board.get_assignments()] == ["a"]
    assert [q.question_id for q in board.get_assignment("a").questions] == ["q2"]
    assert board.is_completed("done")
    assert board.get_assignment("done") is None


def test_reload_replaces_previous_state():
    board = AssignmentBoard()
    board.load([make_assigned("q1", assignment_id="a", completed=True)])
    board.load([make_assigned("q1", assignment_id="a")])
    assert board.get_completed_ids() == set()
    board.clear()
    assert board.get_assignments() == []
