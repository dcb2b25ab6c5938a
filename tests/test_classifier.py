"""Tests for question classifier."""
import unittest

from finadvisor.semantics import QUESTION_TYPES, assess_complexity, classify, needs_realtime_data


class TestClassifier(unittest.TestCase):
    """Test classify() and question helpers."""

    def test_difference_question_is_comparative(self):
        """Test a general FD vs mutual fund question."""
        bundle = classify("What is the difference between mutual fund and FD?")

        self.assertEqual(bundle.question_type, "comparative")
        self.assertTrue(bundle.has_concept("mutual_fund", "fixed_deposit"))
        self.assertIn("investment", bundle.topics)
        self.assertEqual(bundle.intents, ("education", "comparison"))
        self.assertFalse(bundle.is_personal_finance)
        self.assertEqual(bundle.confidence, 0.8)

    def test_reduce_spending_is_personal_advisory(self):
        """Test a first-person spending question."""
        bundle = classify("How can I reduce my spending?")

        self.assertEqual(bundle.question_type, "advisory")
        self.assertTrue(bundle.is_personal_finance)
        self.assertIn("spending", bundle.topics)
        self.assertIn("savings", bundle.topics)
        self.assertEqual(bundle.concepts, ())
        self.assertEqual(bundle.confidence, 0.7)

    def test_educational_concept(self):
        """Test concept recognition on an educational question."""
        bundle = classify("What is compound interest?")

        self.assertEqual(bundle.question_type, "educational")
        self.assertEqual(bundle.concepts, ("compound_interest",))
        self.assertEqual(bundle.confidence, 0.9)

    def test_unmatched_question_is_general(self):
        """Test questions matching nothing resolve to general."""
        bundle = classify("hello there")

        self.assertEqual(bundle.question_type, "general")
        self.assertEqual(bundle.intents, ("general",))
        self.assertEqual(bundle.topics, ("general",))
        self.assertEqual(bundle.concepts, ())
        self.assertEqual(bundle.confidence, 0.5)
        self.assertFalse(bundle.is_personal_finance)

    def test_classification_is_total(self):
        """Test every question gets a valid bundle."""
        questions = [
            "",
            "   ",
            "???",
            "Should I invest in stocks or bonds for retirement?",
            "Calculate my returns on a 5 year FD",
            "Plan my tax saving with ELSS and insurance",
            "x" * 500,
        ]
        for question in questions:
            with self.subTest(question=question[:30]):
                bundle = classify(question)
                self.assertIn(bundle.question_type, QUESTION_TYPES)
                self.assertTrue(bundle.topics)
                self.assertTrue(bundle.intents)
                self.assertGreaterEqual(bundle.confidence, 0.5)
                self.assertLessEqual(bundle.confidence, 0.9)

    def test_external_entity_without_first_person(self):
        """Test questions about companies or people are not personal finance."""
        self.assertFalse(classify("Who is Warren Buffett?").is_personal_finance)
        self.assertFalse(classify("What is Tesla stock doing?").is_personal_finance)

    def test_personal_finance_patterns(self):
        """Test first-person money questions are personal finance."""
        self.assertTrue(classify("How much did I spend on food?").is_personal_finance)
        self.assertTrue(classify("Should I invest my bonus?").is_personal_finance)
        self.assertTrue(classify("Give me tips based on my expenses").is_personal_finance)

    def test_inflected_topics(self):
        """Test inflected word forms still map to topics."""
        self.assertIn("spending", classify("I spent a lot last week").topics)
        self.assertIn("savings", classify("Am I saving enough?").topics)

    def test_needs_realtime_data(self):
        """Test live price and news detection."""
        self.assertTrue(needs_realtime_data("What is the current price of Reliance stock?"))
        self.assertTrue(needs_realtime_data("Latest news on the market"))
        self.assertFalse(needs_realtime_data("How can I reduce my spending?"))

    def test_assess_complexity(self):
        """Test complexity estimation."""
        simple = assess_complexity("How do I budget?")
        self.assertEqual(simple.estimated, "low")
        self.assertFalse(simple.has_numbers)

        compared = assess_complexity("Compare FD vs SIP returns over 5 years")
        self.assertEqual(compared.estimated, "high")
        self.assertTrue(compared.has_comparisons)
        self.assertTrue(compared.has_numbers)

        medium = assess_complexity("How should I organise my monthly household expenses this year?")
        self.assertEqual(medium.estimated, "medium")

        self.assertEqual(assess_complexity("a" * 201).estimated, "high")


if __name__ == "__main__":
    unittest.main()
