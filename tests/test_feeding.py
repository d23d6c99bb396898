"""Tests for feeding and predation resolution."""

import pytest

from arena.entities import DeathCause, Food, FoodKind
from arena.feeding import resolve_feeding, resolve_predation
from arena.math_utils import Vector2


def _food(x, y, kind=FoodKind.NORMAL, food_id="f"):
    return Food(id=food_id, pos=Vector2(x, y), vel=Vector2(), kind=kind)


class TestFeeding:
    def test_normal_food(self, make_creature):
        c = make_creature(x=100, y=100, size=11, energy=100)
        c.time_since_last_meal = 500
        food = _food(105, 100)
        event = resolve_feeding(c, [food])
        assert event is not None
        assert c.size == 13
        assert c.energy == 200
        assert c.food_eaten == 1
        assert c.time_since_last_meal == 0
        assert food.consumed
        assert event.reward == pytest.approx(3.0)

    def test_growth_food(self, make_creature):
        c = make_creature(x=100, y=100, size=20, energy=100)
        food = _food(110, 100, FoodKind.GROWTH)
        resolve_feeding(c, [food])
        assert c.size == 24
        assert c.energy == 300

    def test_distance_must_be_strictly_less_than_size(self, make_creature):
        c = make_creature(x=100, y=100, size=10)
        assert resolve_feeding(c, [_food(110, 100)]) is None

    def test_eats_last_item_in_reach_only_once(self, make_creature):
        c = make_creature(x=100, y=100, size=11)
        first = _food(101, 100, food_id="first")
        last = _food(102, 100, food_id="last")
        event = resolve_feeding(c, [first, last])
        assert event.food_id == "last"
        assert not first.consumed
        assert c.food_eaten == 1

    def test_consumed_food_cannot_be_eaten_twice(self, make_creature):
        a = make_creature(x=100, y=100, size=11)
        b = make_creature(x=102, y=100, size=11)
        food = _food(101, 100)
        assert resolve_feeding(a, [food]) is not None
        assert resolve_feeding(b, [food]) is None


class TestPredation:
    def test_larger_creature_eats_smaller_of_other_color(self, make_creature):
        predator = make_creature(x=100, y=100, size=20, color="red", energy=100)
        prey = make_creature(x=110, y=100, size=10, color="blue")
        events = resolve_predation([predator, prey])
        assert len(events) == 1
        assert not prey.alive
        assert prey.death_cause is DeathCause.EATEN
        assert predator.size == 25
        assert predator.energy == 100 + 500
        assert predator.prey_eaten == 1

    def test_same_color_never_eaten(self, make_creature):
        big = make_creature(x=100, y=100, size=20, color="red")
        small = make_creature(x=105, y=100, size=10, color="red")
        assert resolve_predation([big, small]) == []
        assert small.alive

    def test_equal_size_never_eaten(self, make_creature):
        a = make_creature(x=100, y=100, size=15, color="red")
        b = make_creature(x=105, y=100, size=15, color="blue")
        assert resolve_predation([a, b]) == []
        assert a.alive and b.alive

    def test_out_of_reach(self, make_creature):
        predator = make_creature(x=100, y=100, size=20, color="red")
        prey = make_creature(x=121, y=100, size=10, color="blue")
        assert resolve_predation([predator, prey]) == []

    def test_one_meal_per_attacker_per_tick(self, make_creature):
        predator = make_creature(x=100, y=100, size=30, color="red")
        prey_a = make_creature(x=105, y=100, size=8, color="blue", id="a")
        prey_b = make_creature(x=95, y=100, size=8, color="blue", id="b")
        events = resolve_predation([predator, prey_a, prey_b])
        assert len(events) == 1
        # Victims are scanned from the end of the list
        assert events[0].prey_id == "b"
        assert prey_a.alive

    def test_eaten_creature_cannot_attack(self, make_creature):
        # b could eat d, but a is visited first and eats b
        d = make_creature(x=125, y=100, size=5.5, color="green", id="d")
        b = make_creature(x=110, y=100, size=20, color="blue", id="b")
        a = make_creature(x=100, y=100, size=30, color="red", id="a")
        events = resolve_predation([d, b, a])
        assert [(e.predator_id, e.prey_id) for e in events] == [("a", "b")]
        assert not b.alive
        assert d.alive
