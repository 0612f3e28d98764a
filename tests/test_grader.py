from omr_grader.grader import grade_answers
from omr_grader.models import QuestionVerdict


def verdicts(*answers):
    out = []
    for q_num, answer in enumerate(answers, start=1):
        if answer == '*':
            out.append(QuestionVerdict(q_num, '', True, ('A', 'B')))
        else:
            out.append(QuestionVerdict(q_num, answer, False, (answer,) if answer else ()))
    return out


def test_score_counts_exact_matches():
    report = grade_answers(verdicts('A', 'B', 'C', ''), {1: 'A', 2: 'C', 3: 'C', 4: 'D'}, 'S1', timestamp=1)

    assert report.score == 2
    assert report.total == 4
    assert [d.is_correct for d in report.details] == [True, False, True, False]
    assert report.percentage == 50.0


def test_questions_without_key_are_not_graded():
    report = grade_answers(verdicts('A', 'B', 'C'), {1: 'A', 3: 'D'}, timestamp=1)

    assert report.total == 2
    assert report.score == 1
    assert [d.question for d in report.details] == [1, 3]


def test_ambiguous_question_is_a_wrong_warning():
    report = grade_answers(verdicts('*'), {1: 'A'}, timestamp=1)

    [detail] = report.details
    assert detail.student_answer == ''
    assert detail.is_correct is False
    assert detail.is_warning is True
    assert report.warnings == [1]


def test_details_ordered_by_question():
    shuffled = list(reversed(verdicts('A', 'B', 'C')))
    report = grade_answers(shuffled, {1: 'A', 2: 'B', 3: 'C'}, timestamp=1)

    assert [d.question for d in report.details] == [1, 2, 3]
    assert report.score == 3


def test_empty_key_gives_empty_report():
    report = grade_answers(verdicts('A'), {}, timestamp=1)
    assert report.total == 0
    assert report.score == 0
    assert report.details == ()
    assert report.percentage == 0.0


def test_grading_is_deterministic():
    v = verdicts('A', '*', 'C')
    key = {1: 'A', 2: 'B', 3: 'D'}
    assert grade_answers(v, key, 'S', timestamp=5) == grade_answers(v, key, 'S', timestamp=5)


def test_default_timestamp_is_epoch_millis():
    report = grade_answers(verdicts('A'), {1: 'A'})
    assert report.timestamp > 1_600_000_000_000


def test_report_json_shape():
    report = grade_answers(verdicts('A', '*'), {1: 'A', 2: 'C'}, 'STU-0001', timestamp=1700000000000)

    assert report.to_dict() == {
        'studentId': 'STU-0001',
        'score': 1,
        'total': 2,
        'details': [
            {'question': 1, 'studentAnswer': 'A', 'correctAnswer': 'A', 'isCorrect': True, 'isWarning': False},
            {'question': 2, 'studentAnswer': '', 'correctAnswer': 'C', 'isCorrect': False, 'isWarning': True},
        ],
        'timestamp': 1700000000000,
    }


def test_key_with_string_question_numbers():
    report = grade_answers(verdicts('A', 'B'), {'1': 'A', '2': 'C'}, timestamp=1)

    assert report.total == 2
    assert report.score == 1
    assert [d.correct_answer for d in report.details] == ['A', 'C']
