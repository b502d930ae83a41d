"""Pure break suggestion logic - no I/O dependencies."""

import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum

from .tasks import Task, TaskType, sort_by_start

LONG_TASK_MINUTES = 90
HYDRATION_OFFSET = timedelta(hours=2)
LUNCH_TIME = time(12, 30)
LUNCH_DURATION = 45
MAX_LEAD_TIME = timedelta(hours=4)
MIN_IMPACT_SCORE = 40.0
HIGH_IMPACT_SCORE = 80.0
SUGGESTION_SPACING = timedelta(minutes=30)
STREAK_GAP_MINUTES = 15
MIN_TRIGGER_MINUTES = 30
MIN_URGENCY = 50.0


class BreakType(Enum):
    """Kind of break."""

    SNACK = "snack"
    HYDRATION = "hydration"
    MOVEMENT = "movement"
    REST = "rest"
    FRESH_AIR = "fresh_air"
    EYE_REST = "eye_rest"
    SOCIAL = "social"

    @property
    def display_name(self) -> str:
        names = {
            BreakType.SNACK: "Snack Break",
            BreakType.HYDRATION: "Hydration",
            BreakType.MOVEMENT: "Movement",
            BreakType.REST: "Rest",
            BreakType.FRESH_AIR: "Fresh Air",
            BreakType.EYE_REST: "Eye Rest",
            BreakType.SOCIAL: "Social Break",
        }
        return names[self]

    @property
    def icon(self) -> str:
        icons = {
            BreakType.SNACK: "🍎",
            BreakType.HYDRATION: "💧",
            BreakType.MOVEMENT: "🚶",
            BreakType.REST: "😌",
            BreakType.FRESH_AIR: "🌬️",
            BreakType.EYE_REST: "👀",
            BreakType.SOCIAL: "💬",
        }
        return icons[self]

    @property
    def typical_duration(self) -> int:
        """Typical break length in minutes."""
        durations = {
            BreakType.SNACK: 15,
            BreakType.HYDRATION: 2,
            BreakType.MOVEMENT: 10,
            BreakType.REST: 15,
            BreakType.FRESH_AIR: 10,
            BreakType.EYE_REST: 5,
            BreakType.SOCIAL: 15,
        }
        return durations[self]

    @property
    def weight(self) -> float:
        """Ranking multiplier; health-related breaks rank higher."""
        weights = {
            BreakType.HYDRATION: 1.2,
            BreakType.MOVEMENT: 1.1,
            BreakType.REST: 1.0,
            BreakType.SNACK: 0.9,
            BreakType.FRESH_AIR: 0.8,
            BreakType.EYE_REST: 0.7,
            BreakType.SOCIAL: 0.6,
        }
        return weights[self]


class SuggestionPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class BreakSuggestion:
    """A proposed break. Never persisted."""

    type: BreakType
    suggested_duration: int
    suggested_start_time: datetime
    reason: str
    time_until_optimal: int = 0
    insert_after_task_id: str | None = None
    impact_score: float = 50.0
    priority: SuggestionPriority = SuggestionPriority.MEDIUM
    icon: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        if not self.icon:
            self.icon = self.type.icon

    @property
    def end_time(self) -> datetime:
        return self.suggested_start_time + timedelta(minutes=self.suggested_duration)

    @property
    def is_high_priority(self) -> bool:
        # Priority tier and impact score are set independently; either one counts.
        # TODO: set the tier from the score in the gap and calendar builders, as suggest_after_task does.
        return self.priority == SuggestionPriority.HIGH or self.impact_score >= HIGH_IMPACT_SCORE

    @property
    def dismissal_key(self) -> str:
        return f"{self.type.value}_{self.suggested_start_time.date().isoformat()}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "icon": self.icon,
            "suggestedDuration": self.suggested_duration,
            "suggestedStartTime": self.suggested_start_time.isoformat(),
            "reason": self.reason,
            "timeUntilOptimal": self.time_until_optimal,
            "insertAfterTaskId": self.insert_after_task_id,
            "impactScore": self.impact_score,
            "priority": self.priority.value,
            "isHighPriority": self.is_high_priority,
        }


def _same_awareness(a: datetime, b: datetime) -> bool:
    return (a.tzinfo is None) == (b.tzinfo is None)


def _minutes_until(when: datetime, now: datetime) -> int:
    return int((when - now).total_seconds() / 60)


def _overlaps_any(start: datetime, end: datetime, tasks: list[Task], exclude_id: str | None = None) -> bool:
    return any(
        t.overlaps(start, end)
        for t in tasks
        if not t.is_cancelled and t.id != exclude_id
    )


def long_task_suggestion(task: Task, now: datetime, threshold: int = LONG_TASK_MINUTES) -> BreakSuggestion | None:
    """Mid-task stretch break for tasks longer than the threshold."""
    if task.is_finished or task.duration_minutes <= threshold:
        return None
    midpoint = task.start_time + timedelta(minutes=task.duration_minutes // 2)
    return BreakSuggestion(
        type=BreakType.MOVEMENT,
        suggested_duration=5,
        suggested_start_time=midpoint,
        reason="Long task - stretch break recommended",
        icon="🤸",
        time_until_optimal=_minutes_until(midpoint, now),
        insert_after_task_id=task.id,
        impact_score=75.0,
    )


def gap_suggestion(after: Task, before: Task, now: datetime) -> BreakSuggestion | None:
    """
    Suggest a break for the gap between two tasks.

    15-30 min: snack at gap start. 31-60 min: movement 5 min in.
    61-120 min: rest 10 min in. Anything else: nothing.
    """
    gap_start = after.end_time
    gap_minutes = int((before.start_time - gap_start).total_seconds() / 60)

    if 15 <= gap_minutes <= 30:
        kind, duration, offset, reason, score = (
            BreakType.SNACK, 15, 0, "Perfect time for a quick snack", 60.0,
        )
    elif 31 <= gap_minutes <= 60:
        kind, duration, offset, reason, score = (
            BreakType.MOVEMENT, 20, 5, "Good opportunity for movement", 70.0,
        )
    elif 61 <= gap_minutes <= 120:
        kind, duration, offset, reason, score = (
            BreakType.REST, 30, 10, "Time for a proper rest break", 80.0,
        )
    else:
        return None

    start = gap_start + timedelta(minutes=offset)
    return BreakSuggestion(
        type=kind,
        suggested_duration=duration,
        suggested_start_time=start,
        reason=reason,
        time_until_optimal=_minutes_until(start, now),
        insert_after_task_id=after.id,
        impact_score=score,
    )


def hydration_suggestion(
    tasks: list[Task],
    now: datetime,
    offset: timedelta = HYDRATION_OFFSET,
) -> BreakSuggestion | None:
    """Hydration reminder at now + offset, unless a task occupies that time."""
    start = now + offset
    suggestion = BreakSuggestion(
        type=BreakType.HYDRATION,
        suggested_duration=2,
        suggested_start_time=start,
        reason="Stay hydrated for optimal focus",
        time_until_optimal=_minutes_until(start, now),
        impact_score=65.0,
    )
    if _overlaps_any(start, suggestion.end_time, tasks):
        return None
    return suggestion


def has_meal(tasks: list[Task]) -> bool:
    """True if any task is a meal or mentions lunch."""
    return any(
        t.task_type == TaskType.MEAL or "lunch" in t.title.lower()
        for t in tasks
    )


def lunch_suggestion(
    tasks: list[Task],
    now: datetime,
    lunch_time: time = LUNCH_TIME,
    duration: int = LUNCH_DURATION,
    day: date | None = None,
) -> BreakSuggestion | None:
    """
    Lunch break at a fixed local time when the day has no meal planned.

    `day` is the date `tasks` belong to and defaults to now's date.
    """
    if has_meal(tasks):
        return None
    start = datetime.combine(day or now.date(), lunch_time, tzinfo=now.tzinfo)
    if start <= now:
        return None
    return BreakSuggestion(
        type=BreakType.SNACK,
        suggested_duration=duration,
        suggested_start_time=start,
        reason="Fuel up with a healthy lunch break",
        icon="🥗",
        time_until_optimal=_minutes_until(start, now),
        impact_score=70.0,
    )


def analyze(
    tasks: list[Task],
    now: datetime,
    long_task_minutes: int = LONG_TASK_MINUTES,
    hydration_offset: timedelta = HYDRATION_OFFSET,
    lunch_time: time = LUNCH_TIME,
    lunch_duration: int = LUNCH_DURATION,
    target_date: date | None = None,
) -> list[BreakSuggestion]:
    """
    Propose breaks for a day's tasks.

    Scans long tasks and gaps between adjacent tasks, then adds
    hydration and lunch reminders. Only suggestions starting after `now`
    are returned, sorted by start time.

    `target_date` is the day the tasks belong to (default: now's date).
    Lunch is placed on that day; hydration is only offered for today.

    Pure function - no I/O. Malformed tasks, including ones whose start
    time can't be compared with `now`, are skipped, never raised.
    """
    day = target_date or now.date()
    ordered = sort_by_start([
        t for t in tasks
        if isinstance(t, Task) and _same_awareness(t.start_time, now)
    ])
    suggestions: list[BreakSuggestion] = []

    for i, current in enumerate(ordered):
        if current.is_finished:
            continue

        long_break = long_task_suggestion(current, now, long_task_minutes)
        if long_break:
            suggestions.append(long_break)

        if i + 1 < len(ordered):
            between = gap_suggestion(current, ordered[i + 1], now)
            if between:
                suggestions.append(between)

    if day == now.date():
        hydration = hydration_suggestion(ordered, now, hydration_offset)
        if hydration:
            suggestions.append(hydration)

    lunch = lunch_suggestion(ordered, now, lunch_time, lunch_duration, day)
    if lunch:
        suggestions.append(lunch)

    upcoming = [s for s in suggestions if s.suggested_start_time > now]
    return sorted(upcoming, key=lambda s: s.suggested_start_time)


def validate_suggestion(
    suggestion: BreakSuggestion,
    tasks: list[Task],
    now: datetime,
    max_lead_time: timedelta = MAX_LEAD_TIME,
    min_impact: float = MIN_IMPACT_SCORE,
) -> bool:
    """
    Quality gate before a suggestion is shown.

    Must start in the future but within max_lead_time, must not overlap
    any task other than the one it is anchored to, and must have enough
    impact.
    """
    start = suggestion.suggested_start_time
    if start <= now:
        return False
    if start - now > max_lead_time:
        return False
    if suggestion.impact_score < min_impact:
        return False
    comparable = [t for t in tasks if _same_awareness(t.start_time, start)]
    if _overlaps_any(start, suggestion.end_time, comparable, exclude_id=suggestion.insert_after_task_id):
        return False
    return True


def priority_score(suggestion: BreakSuggestion, now: datetime) -> float:
    """Impact weighted by how soon the break is and what kind it is."""
    seconds_until = (suggestion.suggested_start_time - now).total_seconds()
    relevance = max(0.1, 1.0 - seconds_until / MAX_LEAD_TIME.total_seconds())

    bonus = 0.0
    if "Long task" in suggestion.reason:
        bonus += 15.0
    if suggestion.type == BreakType.SNACK and suggestion.suggested_start_time.hour in (12, 18):
        bonus += 20.0
    if suggestion.type == BreakType.HYDRATION:
        bonus += 10.0

    return suggestion.impact_score * relevance * suggestion.type.weight + bonus


def rank_suggestions(suggestions: list[BreakSuggestion], now: datetime) -> list[BreakSuggestion]:
    """Sort suggestions by priority score, highest first."""
    return sorted(suggestions, key=lambda s: priority_score(s, now), reverse=True)


# ============== Break after a task ==============


class TimeOfDay(Enum):
    MORNING = "morning"
    MIDDAY = "midday"
    AFTERNOON = "afternoon"
    EVENING = "evening"

    @classmethod
    def from_datetime(cls, when: datetime) -> "TimeOfDay":
        if when.hour < 12:
            return cls.MORNING
        if when.hour < 14:
            return cls.MIDDAY
        if when.hour < 17:
            return cls.AFTERNOON
        return cls.EVENING


class WorkloadIntensity(Enum):
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"
    INTENSE = "intense"


BREAK_TASK_TYPES = (TaskType.RELAX, TaskType.MEAL)


def workload_intensity(task: Task) -> WorkloadIntensity:
    """Intensity from task type and length. Untyped tasks count as light."""
    match task.task_type:
        case TaskType.WORK:
            if task.duration_minutes >= 120:
                return WorkloadIntensity.INTENSE
            if task.duration_minutes >= 60:
                return WorkloadIntensity.HEAVY
            return WorkloadIntensity.MODERATE
        case TaskType.STUDY:
            if task.duration_minutes >= 90:
                return WorkloadIntensity.HEAVY
            return WorkloadIntensity.MODERATE
        case _:
            return WorkloadIntensity.LIGHT


def work_streak_minutes(task: Task, tasks: list[Task]) -> int:
    """
    Minutes of uninterrupted work ending with `task`.

    Walks back through earlier tasks while each one ends within
    STREAK_GAP_MINUTES of the next and is not itself a break.
    """
    streak_start = task.start_time
    earlier = sort_by_start([
        t for t in tasks
        if t.id != task.id
        and not t.is_cancelled
        and _same_awareness(t.start_time, task.start_time)
        and t.start_time < task.start_time
    ])
    for previous in reversed(earlier):
        if previous.task_type in BREAK_TASK_TYPES:
            break
        if streak_start - previous.end_time > timedelta(minutes=STREAK_GAP_MINUTES):
            break
        streak_start = min(streak_start, previous.start_time)
    return int((task.end_time - streak_start).total_seconds() / 60)


def last_break_end(task: Task, tasks: list[Task]) -> datetime | None:
    """End of the latest relax or meal task finished before `task` starts."""
    ends = [
        t.end_time for t in tasks
        if t.task_type in BREAK_TASK_TYPES
        and not t.is_cancelled
        and _same_awareness(t.start_time, task.start_time)
        and t.end_time <= task.start_time
    ]
    return max(ends) if ends else None


def _gap_after(task: Task, next_task: Task | None) -> int | None:
    if next_task is None:
        return None
    return int((next_task.start_time - task.end_time).total_seconds() / 60)


def break_urgency(
    task: Task,
    next_task: Task | None,
    streak_minutes: int,
    last_break: datetime | None,
) -> float:
    """Score from 0 to 100 for how much a break is needed once `task` ends."""
    score = 30.0

    streak_hours = streak_minutes / 60
    if streak_hours >= 3:
        score += 40.0
    elif streak_hours >= 2:
        score += 25.0
    elif streak_hours >= 1:
        score += 10.0

    if last_break is None:
        score += 25.0
    else:
        hours_since = (task.end_time - last_break).total_seconds() / 3600
        if hours_since >= 2:
            score += 30.0
        elif hours_since >= 1:
            score += 15.0

    match workload_intensity(task):
        case WorkloadIntensity.INTENSE:
            score += 20.0
        case WorkloadIntensity.HEAVY:
            score += 15.0
        case WorkloadIntensity.MODERATE:
            score += 5.0
        case WorkloadIntensity.LIGHT:
            score -= 5.0

    match TimeOfDay.from_datetime(task.end_time):
        case TimeOfDay.MIDDAY:
            score += 10.0
        case TimeOfDay.AFTERNOON:
            score += 5.0

    gap = _gap_after(task, next_task)
    if gap is not None:
        if 15 <= gap <= 60:
            score += 15.0
        elif gap < 15:
            score -= 20.0

    return min(100.0, max(0.0, score))


def choose_break_type(time_of_day: TimeOfDay, streak_minutes: int) -> BreakType:
    match time_of_day:
        case TimeOfDay.MIDDAY:
            return BreakType.SNACK
        case TimeOfDay.AFTERNOON:
            return BreakType.MOVEMENT if streak_minutes > 120 else BreakType.REST
        case TimeOfDay.MORNING:
            return BreakType.HYDRATION
        case _:
            return BreakType.REST


def optimal_break_duration(kind: BreakType, intensity: WorkloadIntensity, gap_minutes: int | None) -> int:
    """
    Break length in minutes.

    With a following task the break leaves a 10 minute buffer before it.
    Otherwise the typical length is stretched or shortened by intensity.
    """
    base = kind.typical_duration
    if gap_minutes is not None:
        return min(base, max(5, gap_minutes - 10))

    match intensity:
        case WorkloadIntensity.INTENSE:
            return min(base + 10, 30)
        case WorkloadIntensity.HEAVY:
            return base + 5
        case WorkloadIntensity.LIGHT:
            return max(base - 5, 5)
        case _:
            return base


def contextual_reason(
    kind: BreakType,
    streak_minutes: int,
    intensity: WorkloadIntensity,
    time_of_day: TimeOfDay,
) -> str:
    streak_hours = streak_minutes // 60
    match kind:
        case BreakType.MOVEMENT:
            if streak_hours >= 2:
                return f"You've been working for {streak_hours} hours - time to move!"
            return "A quick walk will boost your energy"
        case BreakType.HYDRATION:
            return "Stay hydrated for optimal focus"
        case BreakType.REST:
            if intensity == WorkloadIntensity.INTENSE:
                return "Intense work session - rest will help you recharge"
            return "Perfect time for a mental break"
        case BreakType.SNACK:
            if time_of_day == TimeOfDay.MIDDAY:
                return "Fuel up with a healthy lunch break"
            return "A healthy snack will maintain your energy"
        case BreakType.FRESH_AIR:
            return "Fresh air will clear your mind and boost alertness"
        case BreakType.EYE_REST:
            return "Give your eyes a break from the screen"
        case _:
            return "Connect with others to boost your mood"


def suggest_after_task(
    task: Task,
    next_task: Task | None,
    now: datetime,
    tasks: list[Task] | None = None,
) -> BreakSuggestion | None:
    """
    Suggest a break five minutes after `task` ends, if one is warranted.

    Short tasks (under 30 min) and relax tasks never trigger one. The
    urgency score becomes the impact score; 80 and above is high priority.
    `tasks` is the rest of the day, used for the work streak and the last
    break.

    Pure function - no I/O.
    """
    if task.duration_minutes < MIN_TRIGGER_MINUTES or task.task_type == TaskType.RELAX:
        return None
    if not _same_awareness(task.start_time, now):
        return None
    if next_task is not None and not _same_awareness(next_task.start_time, now):
        next_task = None

    day = tasks or []
    streak = work_streak_minutes(task, day)
    urgency = break_urgency(task, next_task, streak, last_break_end(task, day))
    if urgency < MIN_URGENCY:
        return None

    time_of_day = TimeOfDay.from_datetime(task.end_time)
    intensity = workload_intensity(task)
    kind = choose_break_type(time_of_day, streak)
    start = task.end_time + timedelta(minutes=5)
    return BreakSuggestion(
        type=kind,
        suggested_duration=optimal_break_duration(kind, intensity, _gap_after(task, next_task)),
        suggested_start_time=start,
        reason=contextual_reason(kind, streak, intensity, time_of_day),
        time_until_optimal=_minutes_until(start, now),
        insert_after_task_id=task.id,
        impact_score=urgency,
        priority=SuggestionPriority.HIGH if urgency >= HIGH_IMPACT_SCORE else SuggestionPriority.MEDIUM,
    )


class SuggestionTracker:
    """
    Advisory bookkeeping for shown, dismissed and accepted suggestions.

    Keeps dismissed (type, day) pairs and the last time a suggestion was
    shown, and spaces out what gets surfaced.
    """

    def __init__(
        self,
        spacing: timedelta = SUGGESTION_SPACING,
        max_active: int = 1,
    ):
        self.spacing = spacing
        self.max_active = max_active
        self.dismissed: set[str] = set()
        self.last_shown: datetime | None = None

    def is_dismissed(self, suggestion: BreakSuggestion) -> bool:
        return suggestion.dismissal_key in self.dismissed

    def select(self, ranked: list[BreakSuggestion], now: datetime) -> list[BreakSuggestion]:
        """Pick suggestions to surface from a ranked list."""
        if self.last_shown and now - self.last_shown < self.spacing:
            return []

        selected: list[BreakSuggestion] = []
        for suggestion in ranked:
            if len(selected) >= self.max_active:
                break
            if self.is_dismissed(suggestion):
                continue
            too_close = any(
                abs(suggestion.suggested_start_time - s.suggested_start_time) < self.spacing
                for s in selected
            )
            if too_close:
                continue
            selected.append(suggestion)
        return selected

    def mark_shown(self, suggestion: BreakSuggestion, now: datetime) -> None:
        self.last_shown = now

    def mark_dismissed(self, suggestion: BreakSuggestion) -> None:
        self.dismissed.add(suggestion.dismissal_key)

    def mark_accepted(self, suggestion: BreakSuggestion, now: datetime) -> None:
        self.last_shown = now

    def reset(self) -> None:
        """Forget dismissals. Call once per day."""
        self.dismissed.clear()
        self.last_shown = None


@dataclass
class SuggestionMetrics:
    total: int
    average_impact: float
    by_type: dict[BreakType, int]
    by_priority: dict[SuggestionPriority, int]

    def format(self) -> str:
        types = ", ".join(f"{k.value}={v}" for k, v in self.by_type.items()) or "none"
        return f"{self.total} suggestions, avg impact {self.average_impact:.1f} ({types})"


def summarize(suggestions: list[BreakSuggestion]) -> SuggestionMetrics:
    """Aggregate counts and average impact."""
    total = len(suggestions)
    return SuggestionMetrics(
        total=total,
        average_impact=sum(s.impact_score for s in suggestions) / max(1, total),
        by_type=dict(Counter(s.type for s in suggestions)),
        by_priority=dict(Counter(s.priority for s in suggestions)),
    )
