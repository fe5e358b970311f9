# app/services/achievement_rules.py
"""
Каталог достижений как неизменяемая таблица правил.

Каждое правило - frozen dataclass своего вида (счетчик сессий, серия дней,
временное окно, улучшение настроения, длительность, внешний счетчик).
Правило не ходит в базу: получает SessionFacts и текущий прогресс и
возвращает новый прогресс либо None, если сессия его не затрагивает.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Tuple, Iterable, Dict
from app.core.config import AchievementConfig, settings
from app.models.meditation import is_mood_improved


@dataclass(frozen=True)
class SessionFacts:
    """Все, что нужно правилам о завершенной сессии и истории пользователя"""
    user_id: int
    start_time: datetime
    duration: int
    duration_completed: int
    mood_before: Optional[str]
    mood_after: Optional[str]
    completed_sessions: int
    streak_days: int


@dataclass(frozen=True)
class AchievementRule:
    type: str
    title: str
    description: str
    target: int
    points: int

    def next_progress(self, progress: int, facts: SessionFacts) -> Optional[int]:
        return None


@dataclass(frozen=True)
class TimeWindowRule(AchievementRule):
    """Разовое достижение: сессия началась в окне [start_hour, end_hour)"""
    start_hour: int = 0
    end_hour: int = 0

    def in_window(self, moment: datetime) -> bool:
        hour = moment.hour
        if self.start_hour <= self.end_hour:
            return self.start_hour <= hour < self.end_hour
        # окно через полночь, например 22:00-02:00
        return hour >= self.start_hour or hour < self.end_hour

    def next_progress(self, progress: int, facts: SessionFacts) -> Optional[int]:
        if self.in_window(facts.start_time):
            return self.target
        return None


@dataclass(frozen=True)
class DurationRule(AchievementRule):
    """+1 за каждую сессию длиннее порога"""
    min_minutes: int = 30

    def next_progress(self, progress: int, facts: SessionFacts) -> Optional[int]:
        minutes = facts.duration_completed or facts.duration or 0
        if minutes >= self.min_minutes:
            return progress + 1
        return None


@dataclass(frozen=True)
class StreakRule(AchievementRule):
    """Прогресс равен текущей серии дней подряд"""

    def next_progress(self, progress: int, facts: SessionFacts) -> Optional[int]:
        return facts.streak_days


@dataclass(frozen=True)
class MoodDeltaRule(AchievementRule):
    """+1 за сессию, после которой настроение стало лучше"""

    def next_progress(self, progress: int, facts: SessionFacts) -> Optional[int]:
        if is_mood_improved(facts.mood_before, facts.mood_after):
            return progress + 1
        return None


@dataclass(frozen=True)
class SessionCountRule(AchievementRule):
    """Порог по общему числу завершенных сессий"""

    def next_progress(self, progress: int, facts: SessionFacts) -> Optional[int]:
        return facts.completed_sessions


@dataclass(frozen=True)
class CounterRule(AchievementRule):
    """Счетчик внешних событий (групповые сессии, друзья); сессии его не двигают"""
    event: str = ""


def build_catalogue(config: AchievementConfig) -> Tuple[AchievementRule, ...]:
    return (
        TimeWindowRule(
            type="early_bird", title="Early Bird",
            description="Complete a meditation session early in the morning",
            target=1, points=100,
            start_hour=config.EARLY_BIRD_START_HOUR, end_hour=config.EARLY_BIRD_END_HOUR,
        ),
        TimeWindowRule(
            type="night_owl", title="Night Owl",
            description="Complete a meditation session late at night",
            target=1, points=100,
            start_hour=config.NIGHT_OWL_START_HOUR, end_hour=config.NIGHT_OWL_END_HOUR,
        ),
        DurationRule(
            type="marathon_meditator", title="Marathon Meditator",
            description=f"Complete a meditation session of {config.MARATHON_MINUTES} minutes or longer",
            target=1, points=150, min_minutes=config.MARATHON_MINUTES,
        ),
        StreakRule(
            type="week_warrior", title="Week Warrior",
            description="Meditate for 7 consecutive days",
            target=7, points=200,
        ),
        StreakRule(
            type="mindful_month", title="Mindful Month",
            description="Meditate for 30 consecutive days",
            target=30, points=500,
        ),
        MoodDeltaRule(
            type="mood_lifter", title="Mood Lifter",
            description="Improve your mood in 10 meditation sessions",
            target=10, points=200,
        ),
        SessionCountRule(
            type="beginner_meditator", title="Beginner Meditator",
            description="Complete your first meditation session",
            target=1, points=10,
        ),
        SessionCountRule(
            type="intermediate_meditator", title="Intermediate Meditator",
            description="Complete 10 meditation sessions",
            target=10, points=50,
        ),
        SessionCountRule(
            type="advanced_meditator", title="Advanced Meditator",
            description="Complete 50 meditation sessions",
            target=50, points=100,
        ),
        CounterRule(
            type="community_pillar", title="Community Pillar",
            description="Participate in 10 group meditation sessions",
            target=10, points=300, event="group_participation",
        ),
        CounterRule(
            type="group_guide", title="Group Guide",
            description="Host 5 group meditation sessions",
            target=5, points=250, event="group_hosted",
        ),
        CounterRule(
            type="social_butterfly", title="Social Butterfly",
            description="Make 5 friends in the community",
            target=5, points=150, event="friends",
        ),
    )


DEFAULT_CATALOGUE = build_catalogue(settings.achievements)


def catalogue_index(catalogue: Iterable[AchievementRule]) -> Dict[str, AchievementRule]:
    return {rule.type: rule for rule in catalogue}


def longest_streak_target(catalogue: Iterable[AchievementRule]) -> int:
    return max((rule.target for rule in catalogue if isinstance(rule, StreakRule)), default=1)


def consecutive_days(days: Iterable[date], end_day: date) -> int:
    """Сколько календарных дней подряд, заканчивая end_day, есть в days"""
    present = set(days)
    streak = 0
    current = end_day
    while current in present:
        streak += 1
        current -= timedelta(days=1)
    return streak
