"""Unit tests for the dual streak scoring engine."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from trivia.scoring import (
  PREVIEW_MILESTONES,
  StreakState,
  apply_answer,
  calculate_points,
  compute_points,
  get_play_streak_message,
  get_winning_streak_message,
  get_winning_streak_preview,
  streak_bonus,
)


@pytest.mark.parametrize(
  ("winning_streak", "expected"),
  [(1, 100), (2, 100), (3, 102), (6, 108), (7, 111), (13, 129), (14, 133), (20, 157), (21, 162), (29, 202), (30, 209), (31, 216), (100, 699)],
)
def test_correct_answer_points_follow_bonus_bands(winning_streak, expected):
  assert calculate_points(True, winning_streak) == expected
  assert compute_points(True, winning_streak).total_points == expected


def test_bonus_is_continuous_and_monotonic():
  """Each extra win adds the per-win amount of the band the new streak lands in."""
  per_win = {range(3, 7): 2, range(7, 14): 3, range(14, 21): 4, range(21, 30): 5, range(30, 200): 7}
  for streak in range(3, 200):
    step = streak_bonus(streak) - streak_bonus(streak - 1)
    expected = next(value for band, value in per_win.items() if streak in band)
    assert step == expected, f"step into streak {streak}"


def test_incorrect_answer_is_flat_ten_points():
  for winning_streak, play_streak in [(0, 0), (5, 3), (40, 40)]:
    breakdown = compute_points(False, winning_streak, play_streak)
    assert breakdown.total_points == 10
    assert breakdown.base_points == 10
    assert breakdown.streak_bonus == 0


def test_negative_streaks_are_clamped():
  assert compute_points(True, -4, -1) == compute_points(True, 0, 0)
  assert calculate_points(True, -10) == 100


def test_incorrect_message_warns_about_reset_and_keeps_play_streak():
  breakdown = compute_points(False, 5, 4)
  assert breakdown.message.split("\n") == [
    "Score: +10 points for trying! 💪",
    "🎯 Nice play streak! Keep it up!",
    "⚠️ Winning streak reset, but your 4-day play streak continues!",
  ]


def test_incorrect_message_without_streak_has_no_warning():
  assert compute_points(False, 0, 1).message == "Score: +10 points for trying! 💪"


def test_correct_message_with_bonus_lists_both_milestones():
  breakdown = compute_points(True, 7, 7)
  assert breakdown.streak_bonus == 11
  assert breakdown.message.split("\n") == [
    "Score: +111 points (100 base + 11 winning bonus!)",
    "🔥🔥 Great winning streak! You're on fire!",
    "🎯🎯 Great play streak! You're dedicated!",
  ]


def test_correct_message_without_bonus():
  assert compute_points(True, 1, 1).message == "Score: +100 points"
  assert compute_points(True, 2, 5).message == "Score: +100 points\n🎯 Nice play streak! Keep it up!"


@pytest.mark.parametrize(
  ("streak", "fires"),
  [(0, 0), (2, 0), (3, 1), (6, 1), (7, 2), (13, 2), (14, 3), (20, 3), (21, 4), (29, 4), (30, 5), (365, 5)],
)
def test_milestone_tiers(streak, fires):
  assert get_winning_streak_message(streak).count("🔥") == fires
  assert get_play_streak_message(streak).count("🎯") == fires


def test_preview_covers_milestones_in_order():
  preview = get_winning_streak_preview()
  assert [streak for streak, _ in preview] == list(PREVIEW_MILESTONES)
  assert dict(preview)[30] == 209
  points = [value for _, value in preview]
  assert points == sorted(points)


def test_apply_correct_answer_grows_both_streaks():
  today = date(2026, 3, 14)
  state = StreakState(winning_streak=2, play_streak=3, total_score=500, last_play_date=today - timedelta(days=1))

  new_state, breakdown = apply_answer(state, True, today)

  assert new_state == StreakState(winning_streak=3, play_streak=4, total_score=602, last_play_date=today)
  assert breakdown.total_points == 102


def test_apply_incorrect_answer_resets_winning_streak_only():
  today = date(2026, 3, 14)
  state = StreakState(winning_streak=5, play_streak=9, total_score=1000, last_play_date=today - timedelta(days=1))

  new_state, breakdown = apply_answer(state, False, today)

  assert new_state.winning_streak == 0
  assert new_state.play_streak == 10
  assert new_state.total_score == 1010
  assert "Winning streak reset" in breakdown.message


def test_play_streak_moves_once_per_day():
  today = date(2026, 3, 14)
  first, _ = apply_answer(StreakState(), True, today)
  second, _ = apply_answer(first, False, today)

  assert first.play_streak == 1
  assert second.play_streak == 1
  assert second.winning_streak == 0


def test_missed_days_do_not_reset_play_streak():
  today = date(2026, 3, 14)
  state = StreakState(winning_streak=0, play_streak=12, total_score=0, last_play_date=today - timedelta(days=10))

  new_state, _ = apply_answer(state, True, today)

  assert new_state.play_streak == 13
