"""Performance Scoring Engine - pure functions over report payloads, no I/O"""
from typing import Any, Dict, Iterable, List, Optional
from onboarding.config.constants import (
    ATTENDANCE_WEIGHT, AVERAGE_PHASE_THRESHOLD, COMPLETED_STATUSES, COURSE_COMPLETION_KEY,
    COURSE_EXAM_KEYS, DAILY_QUIZ_KEYS, EXAM_WEIGHT, FAST_PHASE_THRESHOLD, FORTNIGHT_KEYS,
    GROOMING_MISSED_KEY, GROOMING_WEIGHT, MONTHLY_PERCENTAGE_VARIANTS, OFFLINE_DEMO_COUNT_KEYS,
    OFFLINE_DEMO_RATING_KEYS, ONLINE_DEMO_COUNT_KEYS, ONLINE_DEMO_RATING_KEYS, WEEKS_EXPECTED_FALLBACK,
)
from onboarding.utils.formatting.number_utils import positive_number, round_half_up, to_number

def _first_present(report: Dict, keys: Iterable[str]) -> Any:
    """Value of the first header variant carrying data"""
    for key in keys:
        value = report.get(key)
        if value:
            return value
    return None

def _positive_values(metric: Any) -> List[float]:
    if isinstance(metric, dict):
        candidates = metric.values()
    elif metric is None:
        candidates = []
    else:
        candidates = [metric]
    return [n for n in (positive_number(v) for v in candidates) if n is not None]

def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0

def exam_averages(learning: Any) -> Dict[str, float]:
    averages = {"dailyQuiz": 0, "fortnightExam": 0, "courseExam": 0, "overall": 0}
    if not isinstance(learning, dict):
        return averages

    averages["dailyQuiz"] = _mean(_positive_values(_first_present(learning, DAILY_QUIZ_KEYS)))
    averages["fortnightExam"] = _mean(_positive_values(_first_present(learning, FORTNIGHT_KEYS)))
    averages["courseExam"] = _mean(_positive_values(_first_present(learning, COURSE_EXAM_KEYS)))

    # Average of averages, not weighted by sample count
    non_zero = [v for v in (averages["dailyQuiz"], averages["fortnightExam"], averages["courseExam"]) if v > 0]
    averages["overall"] = _mean(non_zero)
    return averages

def _matching_count(counts: Dict, topic: str) -> Optional[float]:
    if topic in counts:
        return to_number(counts[topic])
    wanted = topic.strip().lower()
    for key, value in counts.items():
        if isinstance(key, str) and key.strip().lower() == wanted:
            return to_number(value)
    return None

def demo_average(counts: Any, ratings: Any) -> float:
    """
    Mean rating over topics that actually had demos.

    A rating only counts when the topic's count (exact key, then case-insensitive
    trimmed key) is positive. Zero total attempts means an average of 0.
    """
    total = sum(_positive_values(counts))
    if total <= 0:
        return 0

    if isinstance(ratings, dict) and isinstance(counts, dict):
        values = []
        for topic, rating in ratings.items():
            rating_number = positive_number(rating)
            count_number = _matching_count(counts, str(topic))
            if rating_number is not None and count_number is not None and count_number > 0:
                values.append(rating_number)
        return _mean(values)

    return _mean(_positive_values(ratings))

def demo_averages(learning: Any) -> Dict[str, float]:
    if not isinstance(learning, dict):
        return {"onlineDemo": 0, "offlineDemo": 0}
    return {
        "onlineDemo": demo_average(
            _first_present(learning, ONLINE_DEMO_COUNT_KEYS),
            _first_present(learning, ONLINE_DEMO_RATING_KEYS),
        ),
        "offlineDemo": demo_average(
            _first_present(learning, OFFLINE_DEMO_COUNT_KEYS),
            _first_present(learning, OFFLINE_DEMO_RATING_KEYS),
        ),
    }

def course_completion(learning: Any) -> Dict[str, Dict]:
    """Finished courses with positive weeks, with efficiency = expected / taken"""
    completion = {}
    if not isinstance(learning, dict):
        return completion
    courses = learning.get(COURSE_COMPLETION_KEY)
    if not isinstance(courses, dict):
        return completion

    for course, data in courses.items():
        if not isinstance(data, dict):
            continue
        weeks_expected = to_number(data.get("weeksExpected") or data.get(WEEKS_EXPECTED_FALLBACK) or 0) or 0
        weeks_taken = to_number(data.get("weeksTaken") or 0) or 0
        status = str(data.get("status") or data.get("Status") or "").strip().lower()
        if weeks_expected > 0 and weeks_taken > 0 and status in COMPLETED_STATUSES:
            completion[course] = {
                "weeksExpected": weeks_expected,
                "weeksTaken": weeks_taken,
                "status": status,
                "efficiency": weeks_expected / weeks_taken,
            }
    return completion

def learning_phase(completion: Dict[str, Dict]) -> str:
    efficiencies = [c["efficiency"] for c in (completion or {}).values() if c.get("efficiency", 0) > 0]
    if not efficiencies:
        return "unknown"
    mean_efficiency = _mean(efficiencies)
    if mean_efficiency >= FAST_PHASE_THRESHOLD:
        return "fast"
    if mean_efficiency >= AVERAGE_PHASE_THRESHOLD:
        return "average"
    return "slow"

def attendance_average(attendance: Any) -> Optional[float]:
    if not isinstance(attendance, dict):
        return None
    values = []
    for key in MONTHLY_PERCENTAGE_VARIANTS:
        values.extend(_positive_values(attendance.get(key) if isinstance(attendance.get(key), dict) else None))
    return _mean(values) if values else None

def grooming_score(grooming: Any) -> Optional[float]:
    """max(0, 100 - 10 x average misses per month); non-numeric months count as 0"""
    if not isinstance(grooming, dict):
        return None
    monthly = grooming.get(GROOMING_MISSED_KEY)
    if not isinstance(monthly, dict) or not monthly:
        return None
    missed = sum((to_number(v) or 0) for v in monthly.values())
    return max(0, 100 - (missed / len(monthly)) * 10)

def overall_score(exams: Dict[str, float], attendance: Any, grooming: Any) -> int:
    score = 0.0
    weight = 0.0

    if exams.get("overall", 0) > 0:
        score += exams["overall"] * EXAM_WEIGHT
        weight += EXAM_WEIGHT

    attendance_pct = attendance_average(attendance)
    if attendance_pct is not None:
        score += attendance_pct * ATTENDANCE_WEIGHT
        weight += ATTENDANCE_WEIGHT

    groom = grooming_score(grooming)
    if groom is not None:
        score += groom * GROOMING_WEIGHT
        weight += GROOMING_WEIGHT

    return round_half_up(score / weight) if weight > 0 else 0

def score_candidate(learning: Any, attendance: Any, grooming: Any) -> Dict[str, Any]:
    """All derived metrics for one candidate"""
    exams = exam_averages(learning)
    completion = course_completion(learning)
    return {
        "examAverages": exams,
        "demoAverages": demo_averages(learning),
        "courseCompletion": completion,
        "learningPhase": learning_phase(completion),
        "overallScore": overall_score(exams, attendance, grooming),
    }
