import re
import unittest

from quizengine.app.topics import (
    DIFFICULTIES,
    SUGGESTED_TOPICS,
    difficulty_description,
    estimated_minutes,
    get_topic,
    list_topics,
    make_custom_topic,
)
from quizengine.content.fallback import FALLBACK_QUESTIONS


class TopicTests(unittest.TestCase):
    def test_catalogue(self) -> None:
        topics = list_topics()
        self.assertEqual([t.id for t in topics], ["science-nature", "history", "technology", "sports"])
        for t in topics:
            self.assertIn(t.difficulty, DIFFICULTIES)
            # Every built-in topic can be served offline
            self.assertIn(t.name, FALLBACK_QUESTIONS)

    def test_lookup_by_id_or_name(self) -> None:
        self.assertEqual(get_topic("history").question_count, 15)
        self.assertEqual(get_topic("science & nature").id, "science-nature")
        self.assertEqual(get_topic("  Sports ").difficulty, "easy")
        with self.assertRaises(KeyError):
            get_topic("astrology")

    def test_custom_topic(self) -> None:
        topic = make_custom_topic("  Marine Biology ", "hard", 12)
        self.assertRegex(topic.id, re.compile(r"^custom-\d+$"))
        self.assertEqual(topic.name, "Marine Biology")
        self.assertEqual(topic.description, "A hard quiz about Marine Biology")
        self.assertEqual(topic.question_count, 12)
        self.assertEqual(make_custom_topic("Chess", description="Openings").description, "Openings")

    def test_custom_topic_validation(self) -> None:
        with self.assertRaises(ValueError):
            make_custom_topic("   ")
        with self.assertRaises(ValueError):
            make_custom_topic("Chess", "expert")
        with self.assertRaises(ValueError):
            make_custom_topic("Chess", question_count=4)
        with self.assertRaises(ValueError):
            make_custom_topic("Chess", question_count=51)
        self.assertEqual(make_custom_topic("Chess", question_count=3, min_questions=1).question_count, 3)

    def test_helpers(self) -> None:
        self.assertEqual(estimated_minutes(10), "5-10 minutes")
        self.assertEqual(estimated_minutes(15), "8-15 minutes")
        self.assertEqual(difficulty_description("unknown"), "")
        self.assertIn("Psychology", SUGGESTED_TOPICS)


if __name__ == "__main__":
    unittest.main()
