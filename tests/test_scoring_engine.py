from onboarding.services.scoring.scoring_engine import (
    course_completion, demo_average, exam_averages, grooming_score, learning_phase, overall_score,
    score_candidate,
)


def test_zero_count_demo_rating_is_excluded():
    assert demo_average({"TopicA": 0}, {"TopicA": 5}) == 0


def test_demo_average_matches_counts_case_insensitively():
    counts = {" python ": 2, "SQL": 0}
    ratings = {"Python": 4, "SQL": 5}

    assert demo_average(counts, ratings) == 4


def test_exam_averages_use_header_variants_and_ignore_non_positive():
    learning = {
        "Daily Quiz Scores": {"Python": 80, "SQL": "90%", "Java": 0},
        "Fortnight Exam Score Average": {"Python": 70},
    }

    averages = exam_averages(learning)

    assert averages["dailyQuiz"] == 85
    assert averages["fortnightExam"] == 70
    assert averages["courseExam"] == 0
    assert averages["overall"] == 77.5


def test_overall_score_weights_only_present_components():
    exams = {"overall": 80}

    assert overall_score(exams, None, None) == 80
    attendance = {"Monthly Percentage": {"NOV'25": 50}}
    # (80*0.6 + 50*0.3) / 0.9 = 70
    assert overall_score(exams, attendance, None) == 70


def test_grooming_score_from_monthly_misses():
    grooming = {"How many times missed grooming check list": {"OCT'25": "2", "NOV'25": "Dresscode Followed"}}

    assert grooming_score(grooming) == 90
    assert grooming_score({}) is None


def test_learning_phase_from_course_efficiency():
    learning = {
        "CourseCompletion": {
            "Python": {"weeksExpected": 6, "weeksTaken": 4, "status": "Completed"},
            "SQL": {"weeksExpected": 2, "weeksTaken": 2, "status": "in progress"},
        }
    }

    completion = course_completion(learning)

    assert list(completion) == ["Python"]
    assert learning_phase(completion) == "fast"
    assert learning_phase({}) == "unknown"


def test_score_candidate_shape():
    result = score_candidate({"Daily Quiz scores": {"Python": 60}}, None, None)

    assert set(result) == {"examAverages", "demoAverages", "courseCompletion", "learningPhase", "overallScore"}
    assert result["overallScore"] == 60
