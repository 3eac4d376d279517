import unittest
from unittest.mock import patch

from drinklog.errors import RateLimitError
from drinklog.rate_limiter import FixedWindowRateLimiter


class FixedWindowRateLimiterTests(unittest.TestCase):
    @patch("drinklog.rate_limiter.time.time")
    def test_window_resets(self, mock_time):
        mock_time.return_value = 1000.0
        limiter = FixedWindowRateLimiter(limit=2, window_seconds=60)
        limiter.check("a")
        limiter.check("a")
        with self.assertRaises(RateLimitError):
            limiter.check("a")
        # Other clients have their own window.
        limiter.check("b")

        mock_time.return_value = 1061.0
        limiter.check("a")

    @patch("drinklog.rate_limiter.time.time")
    def test_expired_windows_are_dropped(self, mock_time):
        mock_time.return_value = 1000.0
        limiter = FixedWindowRateLimiter(limit=5, window_seconds=60)
        for i in range(50):
            limiter.check(f"client-{i}")
        self.assertEqual(len(limiter._hits), 50)

        mock_time.return_value = 1061.0
        limiter.check("late")
        self.assertEqual(list(limiter._hits), ["late"])

    def test_zero_limit_disables(self):
        limiter = FixedWindowRateLimiter(limit=0, window_seconds=60)
        for _ in range(10):
            limiter.check("a")


if __name__ == "__main__":
    unittest.main()
