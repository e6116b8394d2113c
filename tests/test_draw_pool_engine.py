from __future__ import annotations

import random
import unittest

from luckydraw.models.draw_state import DrawState
from luckydraw.services.draw_pool_engine import DrawPoolEngine
from luckydraw.services.persistence import PersistenceAdapter
from luckydraw.services.session_guard import SessionGuard

from tests.fakes import RecordingConfirmation, make_repository


def _engine(state: DrawState | None = None, answer: bool = True, **kwargs) -> DrawPoolEngine:
    return DrawPoolEngine(
        state,
        confirmation=RecordingConfirmation(answer),
        random=random.Random(42).random,
        **kwargs,
    )


class AddEntriesTests(unittest.TestCase):
    def test_free_text_drops_blank_lines_and_duplicates(self) -> None:
        engine = _engine()
        self.assertTrue(engine.add_free_text("a\n\nb\na"))
        self.assertEqual(engine.state.pool, ("a", "b"))
        self.assertEqual(engine.state.pending_input, "")

    def test_free_text_appends_to_existing_pool(self) -> None:
        engine = _engine(DrawState(pool=("x", "a")))
        engine.add_free_text("a\ny")
        self.assertEqual(engine.state.pool, ("x", "a", "y"))

    def test_free_text_defaults_to_pending_input(self) -> None:
        engine = _engine()
        engine.update_pending_input("alice\nbob\n")
        self.assertEqual(engine.state.pending_input, "alice\nbob\n")
        engine.add_free_text()
        self.assertEqual(engine.state.pool, ("alice", "bob"))
        self.assertEqual(engine.state.pending_input, "")

    def test_empty_text_only_clears_input(self) -> None:
        engine = _engine(DrawState(pool=("a",), pending_input="draft"))
        self.assertTrue(engine.add_free_text(""))
        self.assertEqual(engine.state.pool, ("a",))
        self.assertEqual(engine.state.pending_input, "")

    def test_range_replaces_pool(self) -> None:
        engine = _engine(DrawState(pool=("a", "b"), pending_input="draft"))
        self.assertTrue(engine.add_range(4))
        self.assertEqual(engine.state.pool, (1, 2, 3, 4))
        self.assertEqual(engine.state.pending_input, "")

    def test_invalid_range_is_noop(self) -> None:
        engine = _engine(DrawState(pool=("a",)))
        for bad in (0, -3, True, "5", 2.5):
            self.assertFalse(engine.add_range(bad))  # type: ignore[arg-type]
        self.assertEqual(engine.state.pool, ("a",))


class PickWinnersTests(unittest.TestCase):
    def test_pick_all(self) -> None:
        engine = _engine(DrawState(pool=(1, 2, 3, 4, 5)))
        self.assertTrue(engine.pick_winners(5))
        self.assertEqual(sorted(engine.state.current_winners), [1, 2, 3, 4, 5])
        self.assertEqual(engine.state.pool, ())

    def test_pick_draws_over_deduplicated_pool(self) -> None:
        engine = _engine(DrawState(pool=(1, 2, 2, 3)))
        engine.pick_winners(2)
        winners = engine.state.current_winners
        pool = engine.state.pool
        self.assertEqual(len(winners), 2)
        self.assertEqual(len(pool), 1)
        self.assertFalse(set(winners) & set(pool))
        self.assertEqual(set(winners) | set(pool), {1, 2, 3})

    def test_pick_clamps_count(self) -> None:
        engine = _engine(DrawState(pool=("a", "b")))
        engine.pick_winners(10)
        self.assertEqual(sorted(engine.state.current_winners), ["a", "b"])
        self.assertEqual(engine.state.pool, ())

        engine = _engine(DrawState(pool=("a", "b")))
        engine.pick_winners(-1)
        self.assertEqual(engine.state.current_winners, ())
        self.assertEqual(len(engine.state.pool), 2)

    def test_previous_winners_are_archived_first(self) -> None:
        engine = _engine(
            DrawState(pool=(1, 2, 3), current_winners=("x", "y"), past_winners=("y", "z"))
        )
        engine.pick_winners(1)
        self.assertEqual(engine.state.past_winners, ("x", "y", "z"))
        self.assertEqual(len(engine.state.current_winners), 1)

    def test_empty_pool_only_archives(self) -> None:
        engine = _engine(DrawState(current_winners=("x",), past_winners=("z",)))
        self.assertTrue(engine.pick_winners(3))
        self.assertEqual(engine.state.current_winners, ())
        self.assertEqual(engine.state.past_winners, ("x", "z"))

    def test_declined_confirmation_leaves_state(self) -> None:
        before = DrawState(pool=(1, 2, 3), current_winners=("x",))
        engine = _engine(before, answer=False)
        self.assertFalse(engine.pick_winners(2))
        self.assertEqual(engine.state, before)

    def test_confirmation_message_and_override(self) -> None:
        default = RecordingConfirmation(False)
        override = RecordingConfirmation(True)
        engine = DrawPoolEngine(DrawState(pool=(1, 2)), confirmation=default)
        self.assertTrue(engine.pick_winners(1, confirmation=override))
        self.assertEqual(default.messages, [])
        self.assertEqual(override.messages, ["Are you ready? We will pick 1 winner(s)."])

    def test_without_confirmation_provider_destructive_calls_decline(self) -> None:
        engine = DrawPoolEngine(DrawState(pool=(1, 2)))
        self.assertFalse(engine.pick_winners(1))
        self.assertFalse(engine.reset())
        self.assertEqual(engine.state.pool, (1, 2))


class FlushRemoveResetTests(unittest.TestCase):
    def test_flush_merges_without_duplicates(self) -> None:
        engine = _engine(DrawState(current_winners=("x", "y"), past_winners=("y", "z")))
        self.assertTrue(engine.flush_current_into_past())
        self.assertEqual(engine.state.current_winners, ())
        self.assertEqual(sorted(engine.state.past_winners), ["x", "y", "z"])
        self.assertEqual(len(engine.state.past_winners), 3)

    def test_remove_entry(self) -> None:
        confirmation = RecordingConfirmation(True)
        engine = DrawPoolEngine(DrawState(pool=("a", "b", 1)), confirmation=confirmation)
        self.assertTrue(engine.remove_entry("b"))
        self.assertEqual(engine.state.pool, ("a", 1))
        self.assertEqual(confirmation.messages, ['Do you want to remove "b"?'])

    def test_remove_compares_by_type_and_value(self) -> None:
        confirmation = RecordingConfirmation(True)
        engine = DrawPoolEngine(DrawState(pool=(1, "2")), confirmation=confirmation)
        self.assertFalse(engine.remove_entry("1"))
        self.assertFalse(engine.remove_entry(2))
        self.assertEqual(engine.state.pool, (1, "2"))
        self.assertEqual(confirmation.messages, [])

    def test_remove_declined(self) -> None:
        engine = _engine(DrawState(pool=("a",)), answer=False)
        self.assertFalse(engine.remove_entry("a"))
        self.assertEqual(engine.state.pool, ("a",))

    def test_reset(self) -> None:
        engine = _engine(
            DrawState(pool=(1,), current_winners=(2,), past_winners=(3,), pending_input="x")
        )
        self.assertTrue(engine.reset())
        self.assertEqual(engine.state, DrawState.empty())
        self.assertTrue(engine.state.is_empty)

    def test_reset_declined(self) -> None:
        before = DrawState(pool=(1,), past_winners=(3,))
        engine = _engine(before, answer=False)
        self.assertFalse(engine.reset())
        self.assertEqual(engine.state, before)

    def test_reshuffle_keeps_entries(self) -> None:
        engine = _engine(DrawState(pool=(1, 2, 3, 4, 5, 6)))
        self.assertTrue(engine.reshuffle())
        self.assertEqual(sorted(engine.state.pool), [1, 2, 3, 4, 5, 6])


class PersistAndGuardTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repo, self.db_engine = make_repository()

    def tearDown(self) -> None:
        self.db_engine.dispose()

    def test_persists_before_listeners(self) -> None:
        persistence = PersistenceAdapter(self.repo)
        engine = _engine(persistence=persistence)
        seen: list[DrawState] = []
        engine.add_listener(lambda state: seen.append(persistence.load()))

        engine.add_free_text("a\nb")

        self.assertEqual(seen, [engine.state])
        self.assertEqual(persistence.load().pool, ("a", "b"))

    def test_noop_does_not_persist(self) -> None:
        persistence = PersistenceAdapter(self.repo)
        engine = _engine(answer=False, persistence=persistence)
        engine.reset()
        self.assertIsNone(self.repo.get(persistence.key))

    def test_blocked_guard_disables_mutations(self) -> None:
        first = SessionGuard(self.repo, random=random.Random(1).random)
        first.start()
        engine = _engine(DrawState(pool=(1, 2)), guard=first)

        SessionGuard(self.repo, random=random.Random(2).random).start()
        self.assertFalse(first.check())

        self.assertTrue(engine.blocked)
        self.assertFalse(engine.add_free_text("c"))
        self.assertFalse(engine.pick_winners(1))
        self.assertFalse(engine.reshuffle())
        self.assertFalse(engine.reset())
        self.assertEqual(engine.state.pool, (1, 2))


if __name__ == "__main__":
    unittest.main()
