"""
Tests for the Textual front end.
"""

import unittest

from exposurecheck.models import Status
from exposurecheck.tui import ExposureCheckApp
from tests.helpers import FakeServer


class TestExposureCheckApp(unittest.IsolatedAsyncioTestCase):

    async def test_table_lists_every_outcome(self):
        server = FakeServer({"/tmp/cache/token.php": (200, b"<?php exit; ?>")})
        app = ExposureCheckApp(
            ["http://matomo.test/a/", "http://matomo.test/b/"],
            transport=server.transport(),
        )
        async with app.run_test() as pilot:
            for _ in range(50):
                if app.table.row_count == 8:
                    break
                await pilot.pause(0.05)

            self.assertEqual(app.table.row_count, 8)
            self.assertEqual(len(app.results), 2)
            self.assertEqual(app.results[0][1].outcomes[2].status, Status.ERROR)


if __name__ == "__main__":
    unittest.main()
