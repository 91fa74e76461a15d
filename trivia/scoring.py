"""Dual streak scoring.

Two counters drive a player's score:

* winning streak: consecutive correct answers. It sets the bonus on correct answers and
  resets to 0 on any wrong answer.
* play streak: days the player has answered at all. It only drives encouragement messages.

Wrong answers earn a flat 10 points. Correct answers earn 100 points plus a winning streak
bonus that grows in steps:

  1-2 wins    no bonus          (100)
  3-6 wins    +2 per win        (102 .. 108)
  7-13 wins   +3 per win        (111 .. 129)
  14-20 wins  +4 per win        (133 .. 157)
  21-29 wins  +5 per win        (162 .. 202)
  30+ wins    +7 per win        (209, 216, ...)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date

CORRECT_BASE_POINTS = 100
INCORRECT_POINTS = 10

# (first streak value in band, bonus carried in from the previous band, bonus per win)
_BONUS_BANDS: tuple[tuple[int, int, int], ...] = (
  (30, 102, 7),
  (21, 57, 5),
  (14, 29, 4),
  (7, 8, 3),
  (3, 0, 2),
)

# (first streak value in tier, message); the emoji count grows with the tier.
_WINNING_TIERS: tuple[tuple[int, str], ...] = (
  (30, "🔥🔥🔥🔥🔥 INCREDIBLE winning streak! Trivia legend!"),
  (21, "🔥🔥🔥🔥 Legendary winning streak! Quiz master!"),
  (14, "🔥🔥🔥 Amazing winning streak! Unstoppable!"),
  (7, "🔥🔥 Great winning streak! You're on fire!"),
  (3, "🔥 Nice winning streak! Keep it up!"),
)

_PLAY_TIERS: tuple[tuple[int, str], ...] = (
  (30, "🎯🎯🎯🎯🎯 INCREDIBLE play streak! True quiz master!"),
  (21, "🎯🎯🎯🎯 Legendary play streak! Quiz devotee!"),
  (14, "🎯🎯🎯 Amazing play streak! Daily champion!"),
  (7, "🎯🎯 Great play streak! You're dedicated!"),
  (3, "🎯 Nice play streak! Keep it up!"),
)

PREVIEW_MILESTONES: tuple[int, ...] = (1, 2, 3, 4, 5, 6, 7, 10, 13, 14, 17, 20, 21, 25, 29, 30, 35, 40, 50, 100)


@dataclass(frozen=True)
class PointsBreakdown:
  """Points awarded for one answer plus the text sent back to the player."""

  total_points: int
  base_points: int
  streak_bonus: int
  message: str


@dataclass(frozen=True)
class StreakState:
  """The part of a user row that scoring reads and writes."""

  winning_streak: int = 0
  play_streak: int = 0
  total_score: int = 0
  last_play_date: date | None = None


def _tier_message(value: int, tiers: tuple[tuple[int, str], ...]) -> str:
  for floor, message in tiers:
    if value >= floor:
      return message
  return ""


def streak_bonus(winning_streak: int) -> int:
  """Return the bonus for a correct answer that brings the winning streak to this value."""
  streak = max(winning_streak, 0)
  for floor, carried, per_win in _BONUS_BANDS:
    if streak >= floor:
      return carried + (streak - floor + 1) * per_win
  return 0


def calculate_points(is_correct: bool, winning_streak: int, play_streak: int = 0) -> int:
  """Return only the point total for an answer."""
  _ = play_streak
  if not is_correct:
    return INCORRECT_POINTS
  return CORRECT_BASE_POINTS + streak_bonus(winning_streak)


def get_winning_streak_message(winning_streak: int) -> str:
  """Return the fire-themed milestone line for a winning streak, or an empty string."""
  return _tier_message(winning_streak, _WINNING_TIERS)


def get_play_streak_message(play_streak: int) -> str:
  """Return the target-themed milestone line for a play streak, or an empty string."""
  return _tier_message(play_streak, _PLAY_TIERS)


def compute_points(is_correct: bool, winning_streak: int, play_streak: int = 0) -> PointsBreakdown:
  """Score one answer.

  For a correct answer ``winning_streak`` is the streak *including* this answer. For a wrong
  answer it is the streak the player held before answering; it only decides whether the
  reset warning is shown. The caller owns the stored counters.
  """
  winning_streak = max(winning_streak, 0)
  play_streak = max(play_streak, 0)
  play_message = get_play_streak_message(play_streak)

  if not is_correct:
    lines = ["Score: +10 points for trying! 💪"]
    if play_message:
      lines.append(play_message)
    if winning_streak > 0:
      lines.append(f"⚠️ Winning streak reset, but your {play_streak}-day play streak continues!")
    return PointsBreakdown(total_points=INCORRECT_POINTS, base_points=INCORRECT_POINTS, streak_bonus=0, message="\n".join(lines))

  bonus = streak_bonus(winning_streak)
  total = CORRECT_BASE_POINTS + bonus
  winning_message = get_winning_streak_message(winning_streak)

  header = f"Score: +{total} points"
  lines = []
  if bonus > 0:
    header += f" ({CORRECT_BASE_POINTS} base + {bonus} winning bonus!)"
    if winning_message:
      lines.append(winning_message)
  # Both tiers share thresholds, so only skip the play line if the text is identical.
  if play_message and play_message != winning_message:
    lines.append(play_message)

  return PointsBreakdown(total_points=total, base_points=CORRECT_BASE_POINTS, streak_bonus=bonus, message="\n".join([header, *lines]))


def get_winning_streak_preview() -> list[tuple[int, int]]:
  """Return (winning streak, points) pairs for the documented milestones."""
  return [(streak, calculate_points(True, streak)) for streak in PREVIEW_MILESTONES]


def apply_answer(state: StreakState, is_correct: bool, answered_on: date) -> tuple[StreakState, PointsBreakdown]:
  """Advance both streaks for one answer and score it.

  The play streak moves at most once per calendar day and never goes down. The winning
  streak grows on a correct answer and drops to zero on a wrong one.
  """
  play_streak = state.play_streak
  if state.last_play_date != answered_on:
    play_streak += 1

  if is_correct:
    winning_streak = state.winning_streak + 1
    breakdown = compute_points(True, winning_streak, play_streak)
  else:
    winning_streak = 0
    breakdown = compute_points(False, state.winning_streak, play_streak)

  new_state = replace(state, winning_streak=winning_streak, play_streak=play_streak, total_score=state.total_score + breakdown.total_points, last_play_date=answered_on)
  return new_state, breakdown
