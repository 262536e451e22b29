import unittest

from parking_allotment.fees import FeePolicy, compute_fee
from parking_allotment.models import FeeConfig

MINUTE = 60_000


class FeePolicyTests(unittest.TestCase):
    """Tiered pricing: base block, then started hours"""

    def setUp(self):
        self.policy = FeePolicy()

    def test_reference_points(self):
        cases = [
            (0, 20),
            (1, 20),
            (30 * MINUTE, 20),
            (30 * MINUTE + 1, 70),
            (31 * MINUTE, 70),
            (90 * MINUTE, 70),
            (91 * MINUTE, 120),
            (150 * MINUTE, 120),
            (151 * MINUTE, 170),
        ]
        for duration, expected in cases:
            with self.subTest(duration=duration):
                self.assertEqual(self.policy.compute_fee(duration), expected)

    def test_never_below_base_and_non_decreasing(self):
        previous = 0
        for duration in range(0, 6 * 60 * MINUTE, 7 * MINUTE + 13):
            fee = self.policy.compute_fee(duration)
            self.assertGreaterEqual(fee, 20)
            self.assertGreaterEqual(fee, previous)
            previous = fee

    def test_negative_duration_rejected(self):
        with self.assertRaises(ValueError):
            self.policy.compute_fee(-1)

    def test_custom_config(self):
        policy = FeePolicy(FeeConfig(base_minutes=60, base_price=0, hourly_rate=10))
        self.assertEqual(policy.compute_fee(60 * MINUTE), 0)
        self.assertEqual(policy.compute_fee(61 * MINUTE), 10)
        self.assertEqual(policy.compute_fee(181 * MINUTE), 30)

    def test_module_function_and_callable(self):
        self.assertEqual(compute_fee(91 * MINUTE), 120)
        self.assertEqual(self.policy(31 * MINUTE), 70)

    def test_result_is_int(self):
        self.assertIsInstance(self.policy.compute_fee(45 * MINUTE), int)


if __name__ == "__main__":
    unittest.main()
